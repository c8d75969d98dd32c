"""
Key-value persistence for imported datasets.

Flat key layout (see keys.py). Capacity failures are raised as
QuotaExceededError so callers can fall back to smaller representations.
"""

from .kv import (
    KeyValueStore,
    MemoryKeyValueStore,
    QuotaExceededError,
    SqliteKeyValueStore,
    StorageCorruptionError,
    probe_capacity,
    remove_keys,
)

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "QuotaExceededError",
    "SqliteKeyValueStore",
    "StorageCorruptionError",
    "probe_capacity",
    "remove_keys",
]
