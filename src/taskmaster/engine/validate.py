# src/taskmaster/engine/validate.py

"""
Ledger validation rules.

This module checks a ledger document against conventions that the
lenient parser does not enforce:
- blocks that fail to decode (and would be dropped on read),
- duplicate task ids,
- dependencies pointing at ids that are not in the ledger,
- tasks that depend on themselves.

It never modifies the ledger.
"""

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .graph import unresolved_dependencies
from .model import Task
from .parse import ParseError, decode_block, scan_blocks


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class ValidationError(Exception):
    """
    Fatal validation error used for command flow control.

    Raised when caller input cannot be applied to the ledger
    (e.g. unknown field names or an out-of-range priority on update).
    """


# ---------------------------------------------------------------------
# Result objects
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """
    A single validation problem.

    `code` is a stable identifier suitable for tests and future filtering.
    """

    code: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Aggregated validation result for a ledger file.
    """

    path: str
    tasks: Sequence[Task]
    issues: Sequence[ValidationIssue]

    @property
    def ok(self) -> bool:
        return not self.issues


# ---------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------

def require_title(value: object) -> str:
    """
    Return the title stripped of surrounding whitespace.

    Raises ValidationError for an empty or multi-line title: the header
    line could not be parsed back and the task would vanish from the ledger.
    """
    title = str(value or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if "\n" in title or "\r" in title:
        raise ValidationError("Title must be a single line")
    return title


def validate_document(text: str, *, source: str = "<string>") -> ValidationResult:
    """
    Validate ledger text.

    Every candidate block is decoded; blocks that fail are reported
    instead of being skipped.
    """
    issues: list[ValidationIssue] = []
    tasks: list[Task] = []

    for block in scan_blocks(text):
        try:
            tasks.append(decode_block(block, source=source))
        except ParseError as e:
            issues.append(
                ValidationIssue(
                    code="block_malformed",
                    message=f"Line {e.line}: {e.message}",
                )
            )

    counts = Counter(t.task_id for t in tasks)
    for task_id, n in counts.items():
        if n > 1:
            issues.append(
                ValidationIssue(
                    code="id_duplicate",
                    message=f"Task id '{task_id}' is used by {n} blocks",
                )
            )

    for task in tasks:
        if task.task_id in task.dependencies:
            issues.append(
                ValidationIssue(
                    code="dependency_self",
                    message=f"Task '{task.task_id}' depends on itself",
                )
            )

    for task_id, missing in unresolved_dependencies(tasks).items():
        issues.append(
            ValidationIssue(
                code="dependency_unresolved",
                message=(
                    f"Task '{task_id}' depends on unknown id(s): "
                    f"{', '.join(missing)} (it can never be selected as next)"
                ),
            )
        )

    return ValidationResult(path=source, tasks=tuple(tasks), issues=tuple(issues))


def validate_ledger(path: str | Path) -> ValidationResult:
    """
    Validate a ledger file. A missing file has no tasks and no issues.
    """
    p = Path(path)
    if not p.exists():
        return ValidationResult(path=str(p), tasks=(), issues=())

    return validate_document(p.read_text(encoding="utf-8"), source=str(p))
