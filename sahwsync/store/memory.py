"""In-process key-value store."""

import logging
from typing import Optional

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """Dictionary-backed store, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        logger.debug("Memory store initialized")

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Return the keys currently held."""
        return list(self._data)
