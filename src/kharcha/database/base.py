"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from kharcha.domain.entities import Entry


class Database(ABC):
    """Abstract storage port for kharcha.

    Holds the entry log plus one JSON blob per settings key. An absent key
    reads as None; callers supply defaults.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Entry log operations
    @abstractmethod
    def list_entries(self) -> list[Entry]:
        """List all entries in log order."""
        pass

    @abstractmethod
    def append_entry(self, entry: Entry) -> Entry:
        """Append an entry to the end of the log. Returns the stored entry."""
        pass

    @abstractmethod
    def replace_entry(self, entry: Entry) -> None:
        """Replace the entry with the same ID, keeping its position."""
        pass

    @abstractmethod
    def remove_entry(self, entry_id: str) -> None:
        """Remove an entry by ID. Removing an unknown ID is a no-op."""
        pass

    @abstractmethod
    def replace_all_entries(self, entries: list[Entry]) -> None:
        """Replace the whole log with the given entries, in order."""
        pass

    # Settings operations
    @abstractmethod
    def get_setting(self, key: str) -> Optional[Any]:
        """Get the JSON value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set_setting(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""
        pass
