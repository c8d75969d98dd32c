"""
Key-value persistence with an optional capacity ceiling.

Stands in for browser local storage: a flat namespace of text values, where
a write can be rejected because the store is full. Capacity is measured the
way browsers measure it, as characters of every key plus its value.

Two stores are provided:
- MemoryKeyValueStore: process-local dict (tests, dry runs)
- SqliteKeyValueStore: single-file SQLite database

GUARANTEES:
-----------
- A rejected write leaves the previous value untouched
- QuotaExceededError is distinguishable from every other StorageError
- Schema version tracked with PRAGMA user_version (no migration)

NOT PROVIDED:
-------------
- Concurrent writers
- Expiry or eviction
"""

import logging
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from studio_helpers.errors import CapacityError, StorageError
from studio_helpers.storage.keys import QUOTA_PROBE


logger = logging.getLogger(__name__)


STORE_SCHEMA_VERSION = 1


class StorageCorruptionError(StorageError):
    """Raised when the store file fails its integrity check."""
    pass


class QuotaExceededError(StorageError, CapacityError):
    """Raised when a write would push the store over its capacity."""

    def __init__(self, key: str, required: int, capacity: int):
        self.key = key
        self.required = required
        self.capacity = capacity
        super().__init__(
            f"QuotaExceededError: writing '{key}' needs {required} chars, "
            f"capacity is {capacity}"
        )


class KeyValueStore(Protocol):
    """Minimal text store used by every service."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


def _entry_size(key: str, value: str) -> int:
    return len(key) + len(value)


def _check_capacity(
    key: str, value: str, usage: int, previous: Optional[str], capacity: Optional[int]
) -> None:
    """Raise QuotaExceededError if replacing key would exceed capacity."""
    if capacity is None:
        return
    freed = _entry_size(key, previous) if previous is not None else 0
    required = usage - freed + _entry_size(key, value)
    if required > capacity:
        raise QuotaExceededError(key, required, capacity)


class MemoryKeyValueStore:
    """
    In-memory store.

    Args:
        capacity: Maximum characters across all keys and values. None = unlimited.
        initial: Optional entries to preload (not subject to capacity)
    """

    def __init__(self, capacity: Optional[int] = None, initial: Optional[Dict[str, str]] = None):
        self.capacity = capacity
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_capacity(key, value, self.usage(), self._data.get(key), self.capacity)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)

    def usage(self) -> int:
        """Characters currently used."""
        return sum(_entry_size(k, v) for k, v in self._data.items())


class SqliteKeyValueStore:
    """
    SQLite-backed store.

    Must be opened before use (or used as a context manager). Every write is
    its own transaction.
    """

    def __init__(self, db_path: Path, capacity: Optional[int] = None):
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database file. Parent directories are created.
            capacity: Maximum characters across all keys and values. None = unlimited.
        """
        self.db_path = Path(db_path)
        self.capacity = capacity
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> None:
        """
        Open the database and initialize schema.

        Raises:
            StorageError: If the database cannot be opened or has a foreign schema
            StorageCorruptionError: If the integrity check fails
        """
        if self._conn is not None:
            return

        try:
            self._conn = sqlite3.connect(self.db_path)
            self._check_integrity()
            self._init_schema()
        except sqlite3.Error as e:
            self.close()
            raise StorageError(f"Failed to open store {self.db_path}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _check_integrity(self) -> None:
        cursor = self._conn.execute("PRAGMA integrity_check")
        result = cursor.fetchone()
        if result and result[0] != "ok":
            raise StorageCorruptionError(f"Store corruption detected: {result[0]}")

    def _init_schema(self) -> None:
        current_version = self._conn.execute("PRAGMA user_version").fetchone()[0]

        if current_version == 0:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            self._conn.execute(f"PRAGMA user_version = {STORE_SCHEMA_VERSION}")
            self._conn.commit()
        elif current_version != STORE_SCHEMA_VERSION:
            raise StorageError(
                f"Schema version mismatch: expected {STORE_SCHEMA_VERSION}, "
                f"found {current_version}. No automatic migration."
            )

    def _require_open(self) -> sqlite3.Connection:
        if not self._conn:
            raise StorageError("Store not opened")
        return self._conn

    def get(self, key: str) -> Optional[str]:
        conn = self._require_open()
        try:
            row = conn.execute("SELECT value FROM entries WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._require_open()
        try:
            _check_capacity(key, value, self.usage(), self.get(key), self.capacity)
            conn.execute(
                "INSERT OR REPLACE INTO entries (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        conn = self._require_open()
        try:
            conn.execute("DELETE FROM entries WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    def keys(self) -> List[str]:
        conn = self._require_open()
        return [row[0] for row in conn.execute("SELECT key FROM entries ORDER BY key")]

    def usage(self) -> int:
        """Characters currently used."""
        conn = self._require_open()
        row = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM entries"
        ).fetchone()
        return row[0]

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def remove_keys(store: KeyValueStore, keys: Iterable[str]) -> None:
    """Remove every key in keys; absent keys are ignored."""
    for key in keys:
        store.remove(key)


def probe_capacity(store: KeyValueStore) -> bool:
    """
    Check whether the store can still accept a small write.

    Returns:
        False only when the probe write is rejected for capacity
    """
    try:
        store.set(QUOTA_PROBE, "quota_test")
    except CapacityError:
        return False
    store.remove(QUOTA_PROBE)
    return True
