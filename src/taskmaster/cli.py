# src/taskmaster/cli.py

"""
Command-line interface for taskmaster.

This module:
- defines argument parsing and subcommands,
- delegates ledger logic to TaskStore,
- turns results into human-readable output and exit codes.

Exit codes: 0 success, 1 soft failure (unknown id, issues found, error),
2 usage error.
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from taskmaster.config import ConfigError, Settings
from taskmaster.engine.graph import STATUS_FILTERS
from taskmaster.engine.model import Priority
from taskmaster.engine.parse import ParseError
from taskmaster.engine.render import render_task_detail, render_task_list, render_validation
from taskmaster.engine.store import TaskStore
from taskmaster.engine.validate import ValidationError

logger = logging.getLogger(__name__)

_PRIORITIES = [p.value for p in Priority]


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskmaster")
    parser.add_argument(
        "-f",
        "--file",
        type=str,
        default=None,
        help="Ledger file (default: TASK_FILE_PATH or tasks/main.md)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: TASKMASTER_CONFIG or ./.taskmaster.yml)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed task blocks instead of skipping them",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable coloured output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ------------------------------------------------------------------
    # Read-only commands
    # ------------------------------------------------------------------

    p_list = sub.add_parser("list", help="List tasks")
    p_list.add_argument(
        "-s",
        "--status",
        type=str,
        default="all",
        choices=list(STATUS_FILTERS),
        help="Filter by completion state",
    )
    p_list.set_defaults(func=cmd_list)

    p_next = sub.add_parser(
        "next",
        help="Show the highest priority pending task whose dependencies are done",
    )
    p_next.set_defaults(func=cmd_next)

    p_check = sub.add_parser(
        "check",
        help="Report malformed blocks, duplicate ids and unknown dependencies",
    )
    p_check.set_defaults(func=cmd_check)

    # ------------------------------------------------------------------
    # Write commands
    # ------------------------------------------------------------------

    p_init = sub.add_parser("init", help="Create the ledger file if it is missing")
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add", help="Create a new task")
    p_add.add_argument("title", type=str, help="Task title")
    p_add.add_argument("-d", "--description", type=str, default="", help="Task description")
    p_add.add_argument(
        "-p",
        "--priority",
        type=str,
        default=None,
        help=f"Priority ({', '.join(_PRIORITIES)}); invalid values use the default",
    )
    p_add.add_argument(
        "--depends",
        action="append",
        default=[],
        help="Id of a task this one depends on (repeatable)",
    )
    p_add.set_defaults(func=cmd_add)

    p_done = sub.add_parser("done", help="Mark task as completed")
    p_done.add_argument("task_id", help="Task id")
    p_done.set_defaults(func=cmd_done)

    p_undone = sub.add_parser("undone", help="Mark task as pending again")
    p_undone.add_argument("task_id", help="Task id")
    p_undone.set_defaults(func=cmd_undone)

    p_update = sub.add_parser("update", help="Change task fields")
    p_update.add_argument("task_id", help="Task id")
    p_update.add_argument("--title", type=str, default=None, help="New title")
    p_update.add_argument("-d", "--description", type=str, default=None, help="New description")
    p_update.add_argument(
        "-p",
        "--priority",
        type=str,
        default=None,
        choices=_PRIORITIES,
        help="New priority",
    )
    p_update.add_argument(
        "--depends",
        action="append",
        default=None,
        help="Replace dependencies (repeatable)",
    )
    p_update.add_argument(
        "--no-depends",
        action="store_true",
        help="Clear all dependencies",
    )
    p_update.set_defaults(func=cmd_update)

    return parser


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

def cmd_init(store: TaskStore, args: argparse.Namespace) -> int:
    path = store.initialize()
    print(f"Task ledger initialised at {path}")
    return 0


def cmd_add(store: TaskStore, args: argparse.Namespace) -> int:
    title = (args.title or "").strip()
    if not title:
        print("Error: title is required")
        return 2

    store.initialize()
    task = store.create(
        title,
        args.description or "",
        priority=args.priority,
        dependencies=[d.strip() for d in args.depends if d.strip()],
    )
    print(f"Task created with ID: {task.task_id}")
    return 0


def cmd_list(store: TaskStore, args: argparse.Namespace) -> int:
    tasks = store.list(status=args.status)
    print(render_task_list(tasks, color=not args.no_color))
    return 0


def cmd_done(store: TaskStore, args: argparse.Namespace) -> int:
    if not store.complete(args.task_id):
        print(f"Task not found: {args.task_id}")
        return 1

    print(f"Task {args.task_id} marked as complete.")
    return 0


def cmd_undone(store: TaskStore, args: argparse.Namespace) -> int:
    if not store.uncomplete(args.task_id):
        print(f"Task not found: {args.task_id}")
        return 1

    print(f"Task {args.task_id} marked as pending.")
    return 0


def cmd_next(store: TaskStore, args: argparse.Namespace) -> int:
    task = store.get_next()
    if task is None:
        print(
            "No tasks available to work on. Either all tasks are completed "
            "or pending tasks have unmet dependencies."
        )
        return 0

    print(render_task_detail(task, color=not args.no_color))
    return 0


def cmd_update(store: TaskStore, args: argparse.Namespace) -> int:
    fields: dict[str, object] = {}
    if args.title is not None:
        fields["title"] = args.title
    if args.description is not None:
        fields["description"] = args.description
    if args.priority is not None:
        fields["priority"] = args.priority
    if args.no_depends:
        fields["dependencies"] = []
    elif args.depends is not None:
        fields["dependencies"] = args.depends

    if not fields:
        print("Error: nothing to update")
        return 2

    if not store.update(args.task_id, **fields):
        print(f"Task not found: {args.task_id}")
        return 1

    print(f"Task {args.task_id} updated.")
    return 0


def cmd_check(store: TaskStore, args: argparse.Namespace) -> int:
    result = store.validate()
    print(render_validation(result))
    return 0 if result.ok else 1


# ---------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------

def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env(config_file=args.config)
    if args.file:
        settings = dataclasses.replace(settings, task_file_path=Path(args.file))
    if args.strict:
        settings = dataclasses.replace(settings, strict=True)
    return settings


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 2

    try:
        store = TaskStore(_load_settings(args))
        return func(store, args)
    except (ConfigError, ParseError, ValidationError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
