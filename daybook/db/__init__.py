"""Local persistence for DayBook."""

from daybook.db.store import (
    DEFAULT_NAMESPACE,
    KeyValueStore,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    TradeStore,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "TradeStore",
]
