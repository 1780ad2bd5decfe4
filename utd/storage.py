"""Storage layer for utd.

This module provides an abstract storage interface and a JSON file-based
implementation for persisting the entry collection. The whole collection is
rewritten on every save: it is written to a temporary file in the same
directory, which then atomically replaces the canonical file. No locking is
performed, so two concurrent invocations race and the last save wins.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from utd.config import state_file_path
from utd.errors import IoError, ParseError
from utd.models import Entry, Priority

logger = logging.getLogger(__name__)

TEMP_FILE_NAME = ".temp"


class Storage(ABC):
    """Abstract base class for entry storage implementations."""

    @abstractmethod
    def save(self, entries: List[Entry]) -> None:
        """Save the full collection to storage.

        Args:
            entries: Entries in collection order
        """
        pass

    @abstractmethod
    def load(self) -> List[Entry]:
        """Load the full collection from storage.

        Returns:
            Entries in stored order
        """
        pass


def entry_to_dict(entry: Entry) -> Dict[str, Any]:
    """Convert an entry into its on-disk representation."""
    return {
        "id": entry.id,
        "name": entry.title,
        "tags": entry.tags,
        "is_task": entry.is_task,
        "in_progress": entry.in_progress,
        "is_done": entry.is_done,
        "priority": entry.priority.value,
        "timestamp": entry.created_at,
    }


def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data[key]
    # bool is a subclass of int
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ParseError(f"Field '{key}' has invalid value {value!r}")
    return value


def entry_from_dict(data: Dict[str, Any]) -> Entry:
    """Build an entry from its on-disk representation.

    Raises:
        ParseError: If a field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ParseError(f"Expected an object, got {type(data).__name__}")
    if "name" not in data and "title" in data:
        data = {**data, "name": data["title"]}
    try:
        return Entry(
            id=_require(data, "id", int),
            title=_require(data, "name", str),
            tags=_require(data, "tags", str),
            is_task=_require(data, "is_task", bool),
            in_progress=_require(data, "in_progress", bool),
            is_done=_require(data, "is_done", bool),
            priority=Priority(_require(data, "priority", str)),
            created_at=_require(data, "timestamp", int),
        )
    except KeyError as exc:
        raise ParseError(f"Missing field {exc.args[0]!r}") from exc
    except ValueError as exc:
        raise ParseError(str(exc)) from exc


def dumps(entries: List[Entry]) -> str:
    """Serialize entries to pretty-printed, newline-terminated JSON."""
    return json.dumps([entry_to_dict(e) for e in entries], indent=2, ensure_ascii=False) + "\n"


def loads(content: str) -> List[Entry]:
    """Parse the contents of a state file.

    Empty content is treated as an empty collection.

    Raises:
        ParseError: If the content is not a valid entry array
    """
    if not content.strip():
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(f"State file is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("State file is nested too deeply") from exc
    if not isinstance(data, list):
        raise ParseError("State file must contain a JSON array")
    return [entry_from_dict(item) for item in data]


class JsonStorage(Storage):
    """JSON file-based storage implementation with atomic replace.

    Attributes:
        file_path: Path to the canonical JSON state file
    """

    def __init__(self, file_path: Optional[str] = None):
        """Initialize JsonStorage with a file path.

        Args:
            file_path: Path to the JSON state file. If None, uses the
                      state file inside the resolved data directory
        """
        self.file_path = Path(file_path) if file_path is not None else state_file_path()

    @property
    def temp_path(self) -> Path:
        """Temporary file the collection is written to before replacing."""
        return self.file_path.parent / TEMP_FILE_NAME

    def save(self, entries: List[Entry]) -> None:
        """Write entries to the temp file, then rename it over the state file.

        Args:
            entries: Entries in collection order

        Raises:
            IoError: If the temp file cannot be written or renamed
        """
        content = dumps(entries)
        temp_path = self.temp_path
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.file_path)
        except OSError as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise IoError(f"Cannot write {self.file_path}: {exc}") from exc
        logger.debug("saved %d entries to %s", len(entries), self.file_path)

    def load(self) -> List[Entry]:
        """Load entries from the state file, creating it if absent.

        Returns:
            Entries in file order. An empty file yields an empty list.

        Raises:
            IoError: If the file cannot be created or read
            ParseError: If the file contents are malformed
        """
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self.file_path.touch(exist_ok=True)
            content = self.file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"State file is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise IoError(f"Cannot read {self.file_path}: {exc}") from exc

        entries = loads(content)
        if entries:
            logger.debug("found %d existing entries", len(entries))
        else:
            logger.debug("found no existing entries")
        return entries
