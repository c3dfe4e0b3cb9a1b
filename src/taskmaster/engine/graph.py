# src/taskmaster/engine/graph.py

"""
Dependency-aware task selection.

Pure functions over a task list, in ledger order. No filesystem access.
"""

from typing import Final, Optional, Sequence

from .model import Task


STATUS_FILTERS: Final[tuple[str, ...]] = ("all", "completed", "pending")


def completed_ids(tasks: Sequence[Task]) -> set[str]:
    return {t.task_id for t in tasks if t.is_completed}


def is_ready(task: Task, done: set[str]) -> bool:
    """
    True if the task is pending and every dependency is completed.

    Blank dependency entries are ignored.
    """
    if task.is_completed:
        return False

    for dep in task.dependencies:
        d = dep.strip()
        if d and d not in done:
            return False
    return True


def next_task(tasks: Sequence[Task]) -> Optional[Task]:
    """
    Return the next task to work on, or None.

    Candidates are pending tasks whose dependencies are all completed.
    The highest priority wins; ties go to the task that appears first.

    A dependency on an id that is not in the ledger is never satisfied,
    so such a task is never returned (see unresolved_dependencies).
    """
    if not tasks:
        return None

    done = completed_ids(tasks)
    candidates = [t for t in tasks if is_ready(t, done)]
    if not candidates:
        return None

    # max() keeps the first of equal keys, which preserves ledger order.
    return max(candidates, key=lambda t: t.priority_rank)


def filter_tasks(tasks: Sequence[Task], status: str = "all") -> list[Task]:
    """
    Filter by completion state: "all", "completed" or "pending".
    """
    if status == "completed":
        return [t for t in tasks if t.is_completed]
    if status == "pending":
        return [t for t in tasks if not t.is_completed]
    if status == "all":
        return list(tasks)

    allowed = ", ".join(STATUS_FILTERS)
    raise ValueError(f"Unknown status filter '{status}' (allowed: {allowed})")


def unresolved_dependencies(tasks: Sequence[Task]) -> dict[str, list[str]]:
    """
    Map task id -> dependency ids that match no task in the list.

    Only tasks with at least one unknown dependency are included.
    """
    known = {t.task_id for t in tasks}
    out: dict[str, list[str]] = {}

    for task in tasks:
        missing = [d.strip() for d in task.dependencies if d.strip() and d.strip() not in known]
        if missing:
            out[task.task_id] = missing

    return out
