"""Core models for utd.

This module defines the core data structures for entry management:
- Entry: A dataclass representing a task or a note
- Priority: Enum for entry priority levels
- SortKey: Enum for display ordering criteria
- extract_tags: Helper pulling inline @tag markers out of raw text
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

TAG_PATTERN = re.compile(r"@\w+")


class Priority(Enum):
    """Entry priority levels."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

    @property
    def score(self) -> int:
        """Numeric ordering value used for priority sorting."""
        return _PRIORITY_SCORES[self]


_PRIORITY_SCORES = {Priority.LOW: 1, Priority.NORMAL: 2, Priority.HIGH: 3}


class SortKey(Enum):
    """Display ordering criteria."""

    AGE = "age"
    PRIORITY = "priority"


@dataclass
class Entry:
    """Entry model representing a single task or note.

    Attributes:
        id: Identifier, unique within the collection
        title: Entry text with tag markers stripped
        tags: Space-joined tag markers, including the leading "@"
        is_task: True for tasks, False for notes
        in_progress: Whether the task has been started
        is_done: Whether the task has been completed
        priority: Priority level of the entry
        created_at: Creation instant in nanoseconds since the Unix epoch
    """

    id: int
    title: str
    tags: str = ""
    is_task: bool = True
    in_progress: bool = False
    is_done: bool = False
    priority: Priority = Priority.NORMAL
    created_at: int = 0


def extract_tags(text: str) -> Tuple[str, str]:
    """Split raw entry text into a title and its tag markers.

    Every "@word" marker is replaced by a single space in the title; the
    markers are joined with single spaces in order of appearance.

    Args:
        text: Raw text as typed by the user

    Returns:
        Tuple of (title, tags)
    """
    tags = TAG_PATTERN.findall(text)
    title = TAG_PATTERN.sub(" ", text)
    return title, " ".join(tags)
