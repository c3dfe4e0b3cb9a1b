"""Shared test fixtures."""

from pathlib import Path

import pytest

from taskmaster.config import Settings
from taskmaster.engine.model import Priority, Task
from taskmaster.engine.ops import ensure_ledger
from taskmaster.engine.store import TaskStore


@pytest.fixture()
def ledger(tmp_path: Path) -> Path:
    """An initialised, empty ledger file."""
    return ensure_ledger(tmp_path / "tasks" / "main.md")


@pytest.fixture()
def store(ledger: Path) -> TaskStore:
    return TaskStore(Settings(task_file_path=ledger))


@pytest.fixture()
def make_task():
    """Factory for in-memory tasks with readable defaults."""

    def _make(task_id: str, priority: str = "medium", *, deps=(), done=False, **kw) -> Task:
        return Task(
            task_id=task_id,
            title=kw.pop("title", task_id.replace("_", " ")),
            priority=Priority(priority),
            created=kw.pop("created", "2024-05-01T09:30:00.000Z"),
            description=kw.pop("description", f"Work on {task_id}"),
            dependencies=list(deps),
            is_completed=done,
        )

    return _make
