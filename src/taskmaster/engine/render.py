# src/taskmaster/engine/render.py

"""
Rendering helpers for CLI output.

This module is responsible for:
- the task list view (list),
- the structured task detail view (next),
- the validation report (check).

It is presentation-only: it returns strings and never touches the ledger.
"""

from __future__ import annotations

import re
import shutil
import sys
import textwrap
from typing import Sequence

from .model import Priority, Task
from .validate import ValidationResult


# ---------------------------------------------------------------------
# ANSI / terminal helpers
# ---------------------------------------------------------------------

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_RESET = "\033[0m"
_DIM = "\033[90m"

_COLOR = {
    Priority.HIGH: "\033[31m",    # red
    Priority.MEDIUM: "\033[33m",  # yellow
    Priority.LOW: "\033[34m",     # blue
}


def _supports_color() -> bool:
    """Return True if stdout is a TTY."""
    return sys.stdout.isatty()


def _visible_len(s: str) -> int:
    """Return string length without ANSI colour escapes."""
    return len(_ANSI_RE.sub("", s))


def _paint(s: str, code: str, color: bool) -> str:
    if not (color and _supports_color()):
        return s
    return f"{code}{s}{_RESET}"


# ---------------------------------------------------------------------
# Task list
# ---------------------------------------------------------------------

def render_task_list(tasks: Sequence[Task], *, color: bool = True) -> str:
    """
    Render tasks as a compact list.

    Format:
      [x] Title (priority) id: task_id
          first line of the description
    """
    if not tasks:
        return "No tasks found."

    lines = [f"# Tasks ({len(tasks)})", ""]
    for task in tasks:
        box = "[x]" if task.is_completed else "[ ]"
        prio = _paint(task.priority.value, _COLOR[task.priority], color)

        lines.append(f"{box} {task.title} ({prio}) id: {task.task_id}")

        first = task.description.splitlines()[0].strip() if task.description else ""
        if first:
            lines.append(f"    {_paint(first, _DIM, color)}")

        if task.dependencies:
            lines.append(f"    depends on: {', '.join(task.dependencies)}")

    return "\n".join(lines)


# ---------------------------------------------------------------------
# Task detail view
# ---------------------------------------------------------------------

def render_task_detail(task: Task, *, color: bool = True) -> str:
    """
    Render a boxed task detail view.

    Width follows the terminal, capped at 80 columns.
    """
    width = min(80, shutil.get_terminal_size(fallback=(80, 24)).columns)
    inner_w = max(20, width - 4)  # borders + padding

    out: list[str] = []

    def wrap_lines(s: str, *, indent: str = "") -> list[str]:
        lines: list[str] = []
        for ln in s.rstrip().splitlines() or [""]:
            if not ln.strip():
                lines.append(indent.rstrip())
                continue

            wrapped = textwrap.wrap(
                ln,
                width=inner_w - len(indent),
                break_long_words=False,
                break_on_hyphens=False,
            ) or [""]

            lines.extend([indent + x for x in wrapped])

        return lines

    def box_rule(ch: str = "-") -> None:
        out.append(f"+{ch * (width - 2)}+")

    def box_line(content: str = "") -> None:
        # Coloured lines are short labels; clipping them could cut an escape.
        raw = content if _ANSI_RE.search(content) else content[:inner_w]
        pad = inner_w - _visible_len(raw)
        if pad > 0:
            raw = raw + (" " * pad)
        out.append(f"| {raw} |")

    state = "done" if task.is_completed else "pending"
    prio = _paint(task.priority.value, _COLOR[task.priority], color)

    box_rule("=")
    for ln in wrap_lines(f"{task.title} ({state})"):
        box_line(ln)
    box_rule("=")

    box_line(f"id: {task.task_id}")
    box_line(f"priority: {prio}")
    box_line(f"created: {_paint(task.created, _DIM, color)}")

    deps = ", ".join(task.dependencies) if task.dependencies else "none"
    for ln in wrap_lines(f"dependencies: {deps}"):
        box_line(ln)

    if task.description.strip():
        box_rule()
        box_line("Description:")
        for ln in wrap_lines(task.description, indent="  "):
            box_line(ln)

    box_rule("=")
    return "\n".join(out)


# ---------------------------------------------------------------------
# Validation report
# ---------------------------------------------------------------------

def render_validation(result: ValidationResult) -> str:
    if result.ok:
        return f"{result.path}: ok ({len(result.tasks)} tasks)"

    lines = [f"{result.path}"]
    for issue in result.issues:
        lines.append(f"  - {issue.code}: {issue.message}")
    return "\n".join(lines)
