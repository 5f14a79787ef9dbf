"""Durable key-value stores backing the offline cache."""

from .base import KeyValueStore
from .exceptions import StoreError
from .memory import MemoryStore
from .sqlite import SQLiteStore

__all__ = ["KeyValueStore", "MemoryStore", "SQLiteStore", "StoreError"]
