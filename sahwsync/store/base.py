"""Key-value store interface consumed by the cache manager."""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Durable string-to-string store.

    Implementations must make each per-key operation atomic. Values are opaque
    strings; callers own (de)serialization. Failures are raised as
    :class:`~sahwsync.store.exceptions.StoreError`.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None when absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove ``key``. Removing a missing key is not an error."""

    async def close(self) -> None:
        """Release any resources held by the store."""
