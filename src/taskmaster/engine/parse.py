# src/taskmaster/engine/parse.py

"""
Ledger parser.

Parses a ledger document into in-memory Task models.

Document layout:

    # Project Tasks

    - [ ] **Title** `(ID: title_1a2b3c4d)`
        - **Priority:** `high`
        - **Dependencies:** `None`
        - **Created:** `2024-05-01T09:30:00.000Z`
        - **Description:**
          ```
          free text, may span several lines
          ```

    ---
    *Managed by Task Master MCP*

Parsing happens in two passes:
- scan_blocks() walks the lines and cuts the document into candidate blocks,
- decode_block() turns one candidate into a Task, field by field.

Blocks that do not decode are dropped unless strict parsing is requested,
in which case the first ParseError is raised.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .model import Priority, Task

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------

BLOCK_START: Final[str] = "- ["
FENCE: Final[str] = "```"
FOOTER_RULE: Final[str] = "---"
NO_DEPENDENCIES: Final[str] = "None"

_HEADER_RE = re.compile(r"^- \[([ x])\]\s+\*\*(.+?)\*\*\s+`\(ID:\s*([\w-]+)\)`$")
_PRIORITY_RE = re.compile(r"^- \*\*Priority:\*\*\s*`([^`]*)`$")
_DEPENDENCIES_RE = re.compile(r"^- \*\*Dependencies:\*\*\s*`([^`]*)`$")
_CREATED_RE = re.compile(r"^- \*\*Created:\*\*\s*`([^`]*)`$")
_DESCRIPTION_RE = re.compile(r"^- \*\*Description:\*\*$")

# Metadata lines expected between the header and the description fence.
_FIELDS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = (
    ("Priority", _PRIORITY_RE),
    ("Dependencies", _DEPENDENCIES_RE),
    ("Created", _CREATED_RE),
    ("Description", _DESCRIPTION_RE),
)


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

@dataclass(slots=True)
class ParseError(Exception):
    """
    Raised when a task block does not match the ledger grammar.
    """

    path: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.message}"


# ---------------------------------------------------------------------
# Block scanning
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawBlock:
    """
    Candidate task block cut out of a document.

    `line_no` is the 1-based line of the block header.
    `closed` is True when the description fence was closed.
    """

    line_no: int
    lines: tuple[str, ...]
    closed: bool


class _State(Enum):
    OUTSIDE = "outside"
    BLOCK = "block"
    FENCE = "fence"


def scan_blocks(text: str) -> Iterator[RawBlock]:
    """
    Yield candidate task blocks in document order.

    Any line starting with "- [" opens a candidate. Inside the description
    fence every line belongs to the description; the closing fence ends
    the block. Outside the fence, the next candidate or the footer rule
    ends it early and the block is yielded as not closed.
    """
    state = _State.OUTSIDE
    start = 0
    buf: list[str] = []

    for no, raw in enumerate(text.splitlines(), start=1):
        s = raw.strip()

        if state is _State.FENCE:
            buf.append(raw)
            if s == FENCE:
                yield RawBlock(line_no=start, lines=tuple(buf), closed=True)
                buf = []
                state = _State.OUTSIDE
            continue

        if s.startswith(BLOCK_START):
            if state is _State.BLOCK:
                yield RawBlock(line_no=start, lines=tuple(buf), closed=False)
            start = no
            buf = [raw]
            state = _State.BLOCK
            continue

        if state is _State.OUTSIDE:
            continue

        if s == FOOTER_RULE:
            yield RawBlock(line_no=start, lines=tuple(buf), closed=False)
            buf = []
            state = _State.OUTSIDE
            continue

        buf.append(raw)
        if s.startswith(FENCE):
            state = _State.FENCE

    if state is not _State.OUTSIDE:
        yield RawBlock(line_no=start, lines=tuple(buf), closed=False)


# ---------------------------------------------------------------------
# Block decoding
# ---------------------------------------------------------------------

def decode_block(block: RawBlock, *, source: str = "<string>") -> Task:
    """
    Decode one candidate block into a Task.

    Raises ParseError if any part of the template is missing or invalid.
    """

    def fail(offset: int, message: str) -> ParseError:
        return ParseError(source, block.line_no + offset, message)

    header = _HEADER_RE.match(block.lines[0].strip())
    if header is None:
        raise fail(0, "Task header must look like '- [ ] **Title** `(ID: id)`'")

    mark, title, task_id = header.groups()

    if not block.closed:
        raise fail(0, f"Task '{task_id}' has no closed description block")

    fence_at = _find_fence(block.lines)
    meta = [
        (i, ln.strip())
        for i, ln in enumerate(block.lines[1:fence_at], start=1)
        if ln.strip()
    ]

    if len(meta) < len(_FIELDS):
        label = _FIELDS[len(meta)][0]
        raise fail(fence_at, f"Task '{task_id}' is missing the '{label}' field")

    if len(meta) > len(_FIELDS):
        offset, text = meta[len(_FIELDS)]
        raise fail(offset, f"Unexpected line in task '{task_id}': {text!r}")

    values: list[str] = []
    for (offset, text), (label, rx) in zip(meta, _FIELDS):
        m = rx.match(text)
        if m is None:
            raise fail(offset, f"Expected the '{label}' field in task '{task_id}'")
        values.append(m.group(1).strip() if rx.groups else "")

    raw_priority, raw_dependencies, created, _ = values

    priority = Priority.parse(raw_priority)
    if priority is None:
        allowed = ", ".join([p.value for p in Priority])
        raise fail(meta[0][0], f"Invalid priority '{raw_priority}' (allowed: {allowed})")

    if not created:
        raise fail(meta[2][0], f"Task '{task_id}' has an empty 'Created' field")

    body = block.lines[fence_at + 1:-1]

    return Task(
        task_id=task_id,
        title=title,
        priority=priority,
        created=created,
        description="\n".join(body).strip(),
        dependencies=parse_dependencies(raw_dependencies),
        is_completed=(mark == "x"),
    )


def parse_dependencies(raw: str) -> list[str]:
    """
    Decode the Dependencies field.

    "None" means no dependencies; otherwise a comma-separated id list.
    """
    s = raw.strip()
    if s == NO_DEPENDENCIES:
        return []
    return [dep.strip() for dep in s.split(",") if dep.strip()]


def _find_fence(lines: tuple[str, ...]) -> int:
    for i, ln in enumerate(lines):
        if ln.strip().startswith(FENCE):
            return i
    raise ValueError("block has no description fence")


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def parse_document(
    text: str,
    *,
    strict: bool = False,
    source: str = "<string>",
) -> list[Task]:
    """
    Parse ledger text into Tasks, preserving document order.

    With strict=False, malformed blocks are skipped (logged at DEBUG).
    With strict=True, the first malformed block raises ParseError.
    """
    tasks: list[Task] = []
    for block in scan_blocks(text):
        try:
            tasks.append(decode_block(block, source=source))
        except ParseError as e:
            if strict:
                raise
            logger.debug("Skipping malformed task block: %s", e)
    return tasks


def parse_ledger(path: str | Path, *, strict: bool = False) -> list[Task]:
    """
    Parse a ledger file.

    A missing file yields an empty list; other read errors propagate.
    """
    p = Path(path)
    if not p.exists():
        return []

    text = p.read_text(encoding="utf-8")
    return parse_document(text, strict=strict, source=str(p))
