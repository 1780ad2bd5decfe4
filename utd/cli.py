"""Command-line interface for utd.

This module provides the CLI interface for managing tasks and notes using
argparse. A single invocation may combine several actions; they run in this
order, each one independently:
- add: Append tasks (-a) and notes (-n), with optional priorities (-p)
- delete: Remove entries by id (-d)
- begin: Toggle the in-progress state of entries (-b)
- check: Mark entries as completed (-c)
- tidy: Purge completed entries (-t)
- renumber: Reassign sequential ids (-r)
The collection is always displayed last, optionally sorted (-s).
"""

import argparse
import logging
import random
import sys
from collections import deque
from pathlib import Path
from typing import Callable, List, Optional

from utd.config import LOG_FILE_NAME, LOG_LEVELS, Config, data_dir, load_config, state_file_path
from utd.errors import ConfigError, UtdError
from utd.logging_setup import setup_logging
from utd.models import Entry, Priority, SortKey
from utd.repository import EntryRepository
from utd.storage import JsonStorage

logger = logging.getLogger(__name__)

GREETINGS = [
    "Here's your board",
    "Remember...",
    "Let's get things done",
    "Focus",
]


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="utd",
        description="Command-line tracker for tasks and notes"
    )
    parser.add_argument("-a", "--add", nargs="+", metavar="TEXT", help="Add tasks")
    parser.add_argument("-n", "--note", nargs="+", metavar="TEXT", help="Add notes")
    parser.add_argument(
        "-p",
        "--priority",
        nargs="+",
        choices=[p.value for p in Priority],
        help="Priority of each added entry, tasks first then notes (default: normal)"
    )
    parser.add_argument("-d", "--delete", nargs="+", metavar="ID", help="Delete entries")
    parser.add_argument("-b", "--begin", nargs="+", metavar="ID", help="Start or stop tasks")
    parser.add_argument("-c", "--check", nargs="+", metavar="ID", help="Complete tasks")
    parser.add_argument("-t", "--tidy", action="store_true", help="Remove completed entries")
    parser.add_argument(
        "-r", "--re-set-ids", action="store_true", help="Renumber ids sequentially"
    )
    parser.add_argument(
        "-s",
        "--sort",
        choices=[s.value for s in SortKey],
        help="Order the listing by age or priority"
    )
    parser.add_argument("--log", choices=LOG_LEVELS, help="Console log level")
    parser.add_argument("--data-dir", help="Directory holding the state file")
    return parser


def cmd_add(args: argparse.Namespace, repo: EntryRepository) -> None:
    """Handle -a/-n, drawing priorities from one queue shared by both batches.

    Args:
        args: Parsed command-line arguments
        repo: EntryRepository instance
    """
    priorities = deque(Priority(p) for p in args.priority or [])
    if args.add:
        repo.add(args.add, is_task=True, priorities=priorities)
    if args.note:
        repo.add(args.note, is_task=False, priorities=priorities)


def format_entry(entry: Entry) -> str:
    """Format one listing line.

    Args:
        entry: Entry to show

    Returns:
        Indented line with done mark, id, title, tags and priority
    """
    mark = "✓" if entry.is_done else "☐"
    line = f"  {mark} {entry.id}. {entry.title}"
    if entry.tags:
        line = f"{line} {entry.tags}"
    return f"{line} ({entry.priority.value})"


def render(entries: List[Entry], config: Config) -> str:
    """Render the collection as plain text.

    Args:
        entries: Entries in display order
        config: User settings

    Returns:
        The listing, or an empty string when there is nothing to show
    """
    if not entries:
        return ""

    todo = [e for e in entries if e.is_task and not e.in_progress]
    in_progress = [e for e in entries if e.in_progress]
    notes = [e for e in entries if not e.is_task]

    lines = []
    if not config.disable_title:
        lines.append(random.choice(GREETINGS))
    if todo:
        total = sum(1 for e in entries if e.is_task)
        done = sum(1 for e in entries if e.is_task and e.is_done)
        lines.append(f"to-do [{done}/{total}]")
        lines.extend(format_entry(e) for e in todo)
    if in_progress:
        lines.append("in progress")
        lines.extend(format_entry(e) for e in in_progress)
    if notes:
        lines.append("notes")
        lines.extend(format_entry(e) for e in notes)
    return "\n".join(lines)


def run_actions(args: argparse.Namespace, repo: EntryRepository) -> None:
    """Run every requested mutation, logging failures and carrying on.

    Args:
        args: Parsed command-line arguments
        repo: EntryRepository instance
    """
    actions: List[Callable[[], object]] = []
    if args.add or args.note:
        actions.append(lambda: cmd_add(args, repo))
    if args.delete:
        actions.append(lambda: repo.delete(args.delete))
    if args.begin:
        actions.append(lambda: repo.start(args.begin))
    if args.check:
        actions.append(lambda: repo.complete(args.check))
    if args.tidy:
        actions.append(repo.tidy)
    if args.re_set_ids:
        actions.append(repo.renumber)

    for action in actions:
        try:
            action()
        except UtdError as exc:
            logger.error("%s", exc)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]

    Returns:
        Exit code (0 for success, 1 if the listing cannot be shown)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    directory = Path(args.data_dir) if args.data_dir else data_dir()

    config_error = None
    try:
        config = load_config(directory)
    except ConfigError as exc:
        config = Config()
        config_error = exc

    setup_logging(args.log or config.log_level, directory / LOG_FILE_NAME)
    if config_error is not None:
        logger.error("%s", config_error)

    repo = EntryRepository(JsonStorage(state_file_path(directory)))
    run_actions(args, repo)

    sort = SortKey(args.sort) if args.sort else None
    try:
        entries = repo.get_all(sort=sort)
    except UtdError as exc:
        logger.error("%s", exc)
        return 1

    output = render(entries, config)
    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
