"""Entry repository for managing entry operations.

This module provides a high-level EntryRepository class that manages tasks and
notes using the storage layer. Every mutation loads the collection, transforms
it in memory and saves it back; the save is the only durability point, so an
error raised before it leaves the state file untouched.
"""

import logging
import re
import time
from typing import Callable, Deque, Iterable, List, Optional, Union

from utd.errors import ParseError
from utd.models import Entry, Priority, SortKey, extract_tags
from utd.storage import JsonStorage, Storage

logger = logging.getLogger(__name__)

IdArg = Union[str, int]
Clock = Callable[[], int]

ID_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


class MonotonicClock:
    """Nanosecond wall clock that never returns the same value twice."""

    def __init__(self, source: Clock = time.time_ns):
        """Initialize the clock.

        Args:
            source: Underlying nanosecond timestamp source
        """
        self._source = source
        self._last = 0

    def __call__(self) -> int:
        now = self._source()
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return now


_default_clock = MonotonicClock()


def parse_id(value: IdArg) -> int:
    """Parse an id argument.

    Only plain ASCII decimal digits with an optional sign are accepted;
    whitespace, underscores and non-ASCII digits are rejected.

    Args:
        value: Id as typed on the command line, or an int

    Returns:
        The parsed id

    Raises:
        ParseError: If the value is not an integer
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value)
    if not ID_PATTERN.fullmatch(text):
        raise ParseError(f"Invalid id: {value!r}")
    return int(text)


class EntryRepository:
    """Repository for managing entries with a storage backend.

    Attributes:
        storage: Storage backend for persisting entries
        clock: Callable returning the current instant in nanoseconds
    """

    def __init__(self, storage: Optional[Storage] = None, clock: Optional[Clock] = None):
        """Initialize EntryRepository with a storage backend.

        Args:
            storage: Storage implementation to use. If None, uses JsonStorage
                    with the default state file.
            clock: Timestamp source. If None, uses a process-wide
                  MonotonicClock.
        """
        self.storage = storage or JsonStorage()
        self.clock = clock or _default_clock

    def add(
        self,
        texts: Iterable[str],
        is_task: bool = True,
        priorities: Optional[Deque[Priority]] = None,
    ) -> List[Entry]:
        """Append a batch of new entries.

        Ids continue from the highest id currently stored. Priorities are
        popped from the front of the given queue, which is shared with any
        later call it is passed to; once exhausted, entries get NORMAL.

        Args:
            texts: Raw entry texts, possibly containing @tag markers
            is_task: True to add tasks, False to add notes
            priorities: Queue of priorities consumed front-to-back

        Returns:
            The newly created entries
        """
        entries = self.storage.load()
        next_id = max((e.id for e in entries), default=0)

        created = []
        for text in texts:
            title, tags = extract_tags(text)
            next_id += 1
            priority = priorities.popleft() if priorities else Priority.NORMAL
            created.append(
                Entry(
                    id=next_id,
                    title=title,
                    tags=tags,
                    is_task=is_task,
                    priority=priority,
                    created_at=self.clock(),
                )
            )

        entries.extend(created)
        self.storage.save(entries)
        logger.debug("%d %s added", len(created), "tasks" if is_task else "notes")
        return created

    def delete(self, ids: Iterable[IdArg]) -> None:
        """Remove every entry whose id is listed. Unknown ids are ignored.

        Raises:
            ParseError: If any id is malformed; nothing is saved in that case
        """
        entries = self.storage.load()
        count = 0
        for raw in ids:
            entry_id = parse_id(raw)
            entries = [e for e in entries if e.id != entry_id]
            count += 1
        self.storage.save(entries)
        logger.debug("%d entries deleted", count)

    def start(self, ids: Iterable[IdArg]) -> None:
        """Toggle in_progress on the listed entries and clear is_done.

        Starting an entry twice returns it to its previous in_progress value.

        Raises:
            ParseError: If any id is malformed; nothing is saved in that case
        """
        entries = self.storage.load()
        count = 0
        for raw in ids:
            entry_id = parse_id(raw)
            for entry in entries:
                if entry.id == entry_id:
                    entry.in_progress = not entry.in_progress
                    entry.is_done = False
                    logger.debug("starting entry %d: %s", entry_id, entry.title)
            count += 1
        self.storage.save(entries)
        logger.debug("%d entries updated", count)

    def complete(self, ids: Iterable[IdArg]) -> None:
        """Mark the listed entries as done and no longer in progress.

        Raises:
            ParseError: If any id is malformed; nothing is saved in that case
        """
        entries = self.storage.load()
        count = 0
        for raw in ids:
            entry_id = parse_id(raw)
            for entry in entries:
                if entry.id == entry_id:
                    entry.in_progress = False
                    entry.is_done = True
                    logger.debug("completing entry %d: %s", entry_id, entry.title)
            count += 1
        self.storage.save(entries)
        logger.debug("%d entries updated", count)

    def tidy(self) -> int:
        """Remove every completed entry, tasks and notes alike.

        Returns:
            Number of entries removed
        """
        entries = self.storage.load()
        kept = [e for e in entries if not e.is_done]
        self.storage.save(kept)
        removed = len(entries) - len(kept)
        logger.debug("%d completed entries removed", removed)
        return removed

    def renumber(self) -> None:
        """Reassign ids 1..N following the current collection order."""
        entries = self.storage.load()
        for index, entry in enumerate(entries, start=1):
            entry.id = index
        self.storage.save(entries)
        logger.debug("%d entries renumbered", len(entries))

    def get_all(self, sort: Optional[SortKey] = None) -> List[Entry]:
        """Get all entries, optionally ordered for display.

        Sorting never touches the stored order.

        Args:
            sort: AGE for oldest first, PRIORITY for highest first. If None,
                 entries are returned in file order.

        Returns:
            List of Entry objects
        """
        entries = self.storage.load()
        if sort is SortKey.AGE:
            entries.sort(key=lambda e: e.created_at)
        elif sort is SortKey.PRIORITY:
            entries.sort(key=lambda e: e.priority.score)
            entries.reverse()
        return entries
