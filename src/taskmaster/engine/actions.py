# src/taskmaster/engine/actions.py

"""
Task mutation actions.

This module contains the state-changing operations on existing tasks:
completion toggling and field updates.

Design principles:
- Toggling patches one checkbox in place and leaves every other byte alone.
- Updating rewrites the whole document from the parsed task list.
- An unknown id is reported as False, never raised.
"""

import dataclasses
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from .model import Priority, Task
from .ops import write_ledger
from .parse import parse_dependencies, parse_ledger
from .validate import ValidationError, require_title

logger = logging.getLogger(__name__)


# Fields callers may change; task_id and created are immutable.
UPDATABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"title", "description", "priority", "dependencies", "is_completed"}
)
IMMUTABLE_FIELDS: Final[frozenset[str]] = frozenset({"id", "task_id", "created"})


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

def _header_pattern(task_id: str) -> re.Pattern[str]:
    """
    Match the header line of the block carrying `task_id`.

    Group 1 is everything up to the checkbox mark, group 2 the mark.
    """
    return re.compile(
        r"^([ \t]*- \[)([ x])(\]\s+\*\*.*?\*\*\s+`\(ID:\s*" + re.escape(task_id) + r"\)`)",
        re.MULTILINE,
    )


def _clean_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Drop immutable keys and check the rest.

    Raises ValidationError for unknown fields or invalid values.
    """
    out: dict[str, Any] = {}

    for key, value in changes.items():
        if key in IMMUTABLE_FIELDS:
            continue

        if key not in UPDATABLE_FIELDS:
            allowed = ", ".join(sorted(UPDATABLE_FIELDS))
            raise ValidationError(f"Unknown task field: {key} (allowed: {allowed})")

        if key == "priority":
            priority = Priority.parse(value)
            if priority is None:
                raise ValidationError(f"Invalid priority: {value}")
            value = priority
        elif key == "dependencies":
            if isinstance(value, str):
                value = parse_dependencies(value)
            else:
                value = [str(d).strip() for d in value if str(d).strip()]
        elif key == "is_completed":
            value = bool(value)
        elif key == "title":
            value = require_title(value)
        else:
            value = str(value)

        out[key] = value

    return out


# ---------------------------------------------------------------------
# Public actions
# ---------------------------------------------------------------------

def toggle_completion(path: str | Path, task_id: str, completed: bool) -> bool:
    """
    Set the checkbox of one task.

    Returns True if a block with this id exists, False otherwise (the file
    is not written). Only the checkbox character changes.
    """
    p = Path(path)
    content = p.read_text(encoding="utf-8")

    mark = "x" if completed else " "
    new_content, n = _header_pattern(task_id).subn(
        lambda m: f"{m.group(1)}{mark}{m.group(3)}",
        content,
    )

    if n == 0:
        return False

    if new_content != content:
        p.write_text(new_content, encoding="utf-8")
        logger.info("Marked task %s as %s", task_id, "completed" if completed else "pending")

    return True


def update_task(
    path: str | Path,
    task_id: str,
    changes: Mapping[str, Any],
    *,
    strict: bool = False,
) -> bool:
    """
    Merge `changes` into one task and rewrite the ledger.

    task_id/created are never overwritten even if present in `changes`.
    Returns False (and does not write) when the id is not in the ledger.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Task ledger not found: {p}")

    fields = _clean_changes(changes)
    tasks = parse_ledger(p, strict=strict)

    index = next((i for i, t in enumerate(tasks) if t.task_id == task_id), None)
    if index is None:
        return False

    updated: Task = dataclasses.replace(tasks[index], **fields)
    tasks[index] = updated

    write_ledger(p, tasks)
    logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(fields)) or "no changes")

    return True
