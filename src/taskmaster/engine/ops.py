# src/taskmaster/engine/ops.py

"""
Filesystem-level operations and ledger rendering.

This module contains:
- ledger initialisation (directory + skeleton document),
- task id generation,
- creation of new task blocks,
- serialisation of Task objects back to the ledger grammar.

No parsing is performed here.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Final, Iterable, Optional

from .model import FOOTER_SENTINEL, LEDGER_HEADER, Priority, Task
from .parse import NO_DEPENDENCIES
from .validate import require_title

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Public request objects
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NewTaskRequest:
    """
    Parameters for creating a new task block.

    `priority` may be any value; anything outside high/medium/low
    falls back to the configured default.
    """

    title: str
    description: str = ""
    priority: Optional[str] = None
    dependencies: tuple[str, ...] = ()


# ---------------------------------------------------------------------
# Ids / timestamps
# ---------------------------------------------------------------------

ID_SLUG_MAX: Final[int] = 15

_STRIP_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """
    Convert title text to the id prefix.

    Lower-case, punctuation removed, whitespace runs joined by "_",
    cut to ID_SLUG_MAX characters.
    """
    s = title.lower()
    s = _STRIP_RE.sub("", s)
    s = _SPACE_RE.sub("_", s)
    return s[:ID_SLUG_MAX]


def generate_task_id(title: str) -> str:
    """
    Return "<slug>_<8 hex chars>".

    The suffix carries 32 random bits; existing ids are not consulted.
    """
    return f"{slugify(title)}_{secrets.token_hex(4)}"


def current_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------
# Ledger initialisation
# ---------------------------------------------------------------------

def skeleton() -> str:
    """Return the document written for an empty ledger."""
    return f"{LEDGER_HEADER}\n\n{FOOTER_SENTINEL}\n"


def ensure_ledger(path: str | Path) -> Path:
    """
    Ensure the ledger file exists.

    Creates parent directories and writes the empty skeleton if the file
    is missing. An existing file is left alone whatever its contents.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if not p.exists():
        p.write_text(skeleton(), encoding="utf-8")
        logger.info("Initialised task ledger at %s", p)

    return p


# ---------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------

def create_task(
    path: str | Path,
    req: NewTaskRequest,
    *,
    default_priority: Priority = Priority.MEDIUM,
) -> Task:
    """
    Append a new task block to an existing ledger and return the Task.

    The block is spliced in right before the footer sentinel, or appended
    at the end when the sentinel is missing. The ledger must exist
    (see ensure_ledger); a missing file raises FileNotFoundError.
    An empty or multi-line title raises ValidationError.
    """
    p = Path(path)
    title = require_title(req.title)

    task = Task(
        task_id=generate_task_id(title),
        title=title,
        priority=Priority.coerce(req.priority, default_priority),
        created=current_timestamp(),
        description=req.description,
        dependencies=list(req.dependencies),
        is_completed=False,
    )

    content = p.read_text(encoding="utf-8")
    block = format_task(task)

    pos = content.find(FOOTER_SENTINEL)
    if pos == -1:
        content = content.rstrip("\n") + "\n\n" + block + "\n"
    else:
        head = content[:pos].rstrip("\n")
        content = head + "\n\n" + block + "\n\n" + content[pos:]

    p.write_text(content, encoding="utf-8")
    logger.info("Created task %s in %s", task.task_id, p)

    return task


# ---------------------------------------------------------------------
# Serialisation (ledger grammar)
# ---------------------------------------------------------------------

def format_task(task: Task) -> str:
    """
    Render one Task as a ledger block (no trailing newline).
    """
    checkbox = "[x]" if task.is_completed else "[ ]"
    deps = ", ".join(task.dependencies) if task.dependencies else NO_DEPENDENCIES

    return "\n".join(
        [
            f"- {checkbox} **{task.title}** `(ID: {task.task_id})`",
            f"    - **Priority:** `{task.priority.value}`",
            f"    - **Dependencies:** `{deps}`",
            f"    - **Created:** `{task.created}`",
            "    - **Description:** ",
            "      ```",
            f"      {task.description}",
            "      ```",
        ]
    )


def serialize_tasks(tasks: Iterable[Task]) -> str:
    """
    Render a complete ledger document from Tasks, in the given order.
    """
    blocks = "\n\n".join(format_task(t) for t in tasks)
    if not blocks:
        return skeleton()
    return f"{LEDGER_HEADER}\n\n{blocks}\n\n{FOOTER_SENTINEL}\n"


def write_ledger(path: str | Path, tasks: Iterable[Task]) -> None:
    """
    Persist the full task list by re-rendering the whole document.
    """
    p = Path(path)
    p.write_text(serialize_tasks(tasks), encoding="utf-8")
