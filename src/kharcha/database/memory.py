"""In-memory database implementation."""

import copy
import json
from typing import Any, Optional

from kharcha.database.base import Database
from kharcha.domain.entities import Entry
from kharcha.domain.errors import StorageError


class InMemoryDatabase(Database):
    """Database kept in process memory, for tests and embedding.

    Settings are stored as JSON text so that values which would not survive a
    real store fail here too.
    """

    def __init__(self):
        self._entries: list[Entry] = []
        self._settings: dict[str, str] = {}

    def connect(self) -> None:
        """Connect to the database."""
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    def initialize_schema(self) -> None:
        """Initialize database schema."""
        pass

    def list_entries(self) -> list[Entry]:
        return list(self._entries)

    def append_entry(self, entry: Entry) -> Entry:
        if any(existing.id == entry.id for existing in self._entries):
            raise StorageError(f"Entry '{entry.id}' is already stored")
        self._entries.append(entry)
        return entry

    def replace_entry(self, entry: Entry) -> None:
        for index, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[index] = entry
                return
        raise StorageError(f"Cannot replace entry '{entry.id}': not stored")

    def remove_entry(self, entry_id: str) -> None:
        self._entries = [entry for entry in self._entries if entry.id != entry_id]

    def replace_all_entries(self, entries: list[Entry]) -> None:
        self._entries = list(entries)

    def get_setting(self, key: str) -> Optional[Any]:
        if key not in self._settings:
            return None
        return json.loads(self._settings[key])

    def set_setting(self, key: str, value: Any) -> None:
        try:
            self._settings[key] = json.dumps(copy.deepcopy(value))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot store '{key}': {e}") from e
