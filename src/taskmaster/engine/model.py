# src/taskmaster/engine/model.py

"""
Core domain models.

This module defines the in-memory representation of a ledger task,
the priority scale used for ordering, and the literal markers that
frame a ledger document.

No filesystem access should happen here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional


# ---------------------------------------------------------------------
# Ledger literals
# ---------------------------------------------------------------------

LEDGER_HEADER: Final[str] = "# Project Tasks"
FOOTER_SENTINEL: Final[str] = "---\n*Managed by Task Master MCP*"


# ---------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------

class Priority(str, Enum):
    """
    Task priority.

    Ordering for selection: high > medium > low.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """
        Return numeric rank for selection.

        Higher value = picked first.
        """
        order = {
            Priority.HIGH: 3,
            Priority.MEDIUM: 2,
            Priority.LOW: 1,
        }
        return order[self]

    @classmethod
    def coerce(cls, value: object, default: "Priority") -> "Priority":
        """
        Return the member matching `value`, or `default` when `value`
        is missing or not one of high/medium/low.
        """
        parsed = cls.parse(value)
        return default if parsed is None else parsed

    @classmethod
    def parse(cls, value: object) -> Optional["Priority"]:
        """Return the matching member or None."""
        if isinstance(value, Priority):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

@dataclass(slots=True)
class Task:
    """
    In-memory representation of one task block in the ledger.

    Notes:
    - task_id and created are assigned at creation and never rewritten.
    - created is kept as the ISO-8601 string found in the document.
    - dependencies are free text; they are not checked against other ids.
    """

    # Identity / core metadata
    task_id: str
    title: str
    priority: Priority
    created: str

    # Content
    description: str = ""
    dependencies: list[str] = field(default_factory=list)

    # State
    is_completed: bool = False

    @property
    def is_pending(self) -> bool:
        return not self.is_completed

    @property
    def priority_rank(self) -> int:
        return self.priority.rank
