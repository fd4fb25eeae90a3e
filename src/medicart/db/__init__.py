"""Persistent store adapter: key-value backends and typed collection repositories."""

from .collections import (
    CART_KEY,
    REMINDERS_KEY,
    CartRepository,
    CollectionStore,
    ReminderRepository,
)
from .repository import SqliteKeyValueStore, create_store_engine
from .store import KeyValueStore, MemoryKeyValueStore

__all__ = [
    "CART_KEY",
    "REMINDERS_KEY",
    "CartRepository",
    "CollectionStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "ReminderRepository",
    "SqliteKeyValueStore",
    "create_store_engine",
]
