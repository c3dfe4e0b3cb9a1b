# src/taskmaster/engine/store.py

"""
Ledger store facade.

TaskStore binds the engine functions to a Settings value and is the
entry point used by the CLI (or any other dispatch layer). Every method
takes an optional `path` that overrides the configured ledger path.

Each operation is one read-(modify-write) cycle guarded by a lock keyed
by the resolved ledger path. The lock only covers threads of the current
process; other processes writing the same file are not coordinated.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Optional

from taskmaster.config import Settings

from .actions import toggle_completion, update_task
from .graph import filter_tasks, next_task, unresolved_dependencies
from .model import Task
from .ops import NewTaskRequest, create_task, ensure_ledger
from .parse import parse_ledger
from .validate import ValidationError, ValidationResult, validate_ledger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Per-path locks
# ---------------------------------------------------------------------

# Entries live only while some operation holds the lock object.
_LOCKS: weakref.WeakValueDictionary[Path, threading.Lock] = weakref.WeakValueDictionary()
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    logger.debug("Ledger lock for %s", key)
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCKS[key] = lock
        return lock


# ---------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------

class TaskStore:
    """
    Ledger operations bound to one Settings value.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def resolve(self, path: Optional[str | Path] = None) -> Path:
        """Return `path`, or the configured ledger path when None."""
        return Path(path) if path is not None else self.settings.task_file_path

    # -----------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------

    def initialize(self, path: Optional[str | Path] = None) -> Path:
        p = self.resolve(path)
        with _lock_for(p):
            return ensure_ledger(p)

    def create(
        self,
        title: str,
        description: str = "",
        priority: Optional[str] = None,
        dependencies: Optional[Iterable[str]] = None,
        path: Optional[str | Path] = None,
    ) -> Task:
        """
        Create a task. The ledger must already be initialised.
        """
        p = self.resolve(path)
        req = NewTaskRequest(
            title=title,
            description=description,
            priority=priority,
            dependencies=tuple(dependencies or ()),
        )
        with _lock_for(p):
            return create_task(p, req, default_priority=self.settings.default_priority)

    def list(self, status: str = "all", path: Optional[str | Path] = None) -> list[Task]:
        """
        Return tasks in ledger order, filtered by "all", "completed" or "pending".
        """
        p = self.resolve(path)
        with _lock_for(p):
            tasks = parse_ledger(p, strict=self.settings.strict)

        try:
            return filter_tasks(tasks, status)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def complete(self, task_id: str, path: Optional[str | Path] = None) -> bool:
        p = self.resolve(path)
        with _lock_for(p):
            return toggle_completion(p, task_id, True)

    def uncomplete(self, task_id: str, path: Optional[str | Path] = None) -> bool:
        p = self.resolve(path)
        with _lock_for(p):
            return toggle_completion(p, task_id, False)

    def get_next(self, path: Optional[str | Path] = None) -> Optional[Task]:
        return next_task(self.list(path=path))

    def update(self, task_id: str, path: Optional[str | Path] = None, **fields: Any) -> bool:
        """
        Update fields of one task; see actions.update_task.
        """
        p = self.resolve(path)
        with _lock_for(p):
            return update_task(p, task_id, fields, strict=self.settings.strict)

    def unresolved_dependencies(self, path: Optional[str | Path] = None) -> dict[str, list[str]]:
        return unresolved_dependencies(self.list(path=path))

    def validate(self, path: Optional[str | Path] = None) -> ValidationResult:
        p = self.resolve(path)
        with _lock_for(p):
            return validate_ledger(p)
