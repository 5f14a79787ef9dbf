"""Cache-specific exceptions.

These never escape the public cache API; they travel inside
:class:`~sahwsync.cache.result.CacheResult` and are logged at the boundary.
"""

from typing import Optional


class CacheError(Exception):
    """Base exception for cache-related errors."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key


class StoreReadError(CacheError):
    """Stored value could not be read or decoded."""


class StoreWriteError(CacheError):
    """Value could not be written to or removed from the store."""
