"""SQLite-backed durable key-value store."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from .base import KeyValueStore
from .exceptions import StoreError

logger = logging.getLogger(__name__)


class SQLiteStore(KeyValueStore):
    """Persists string values in a single SQLite table.

    The schema is created lazily on first use. Every operation opens its own
    connection so the store can be shared freely within one event loop.
    """

    def __init__(self, database_path: Union[Path, str]):
        """Initialize the store.

        Args:
            database_path: Path to the SQLite database file, or ``":memory:"``
        """
        self._in_memory = str(database_path) == ":memory:"
        self.database_path = Path(database_path) if not self._in_memory else database_path
        self._connection: Optional[aiosqlite.Connection] = None
        self._initialized = False
        self._initialization_lock: Optional[asyncio.Lock] = None

        logger.info(f"SQLite store initialized (lazy): {database_path}")

    async def _ensure_initialized(self) -> None:
        """Create the database directory and schema once.

        Raises:
            StoreError: If the database cannot be initialized
        """
        if self._initialized:
            return

        if self._initialization_lock is None:
            self._initialization_lock = asyncio.Lock()

        async with self._initialization_lock:
            if self._initialized:
                return

            try:
                if not self._in_memory:
                    self.database_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StoreError(f"Cannot create store directory: {e}") from e

            try:
                db = await self._connect()
                try:
                    if not self._in_memory:
                        # WAL keeps readers unblocked while a write is in flight
                        await db.execute("PRAGMA journal_mode=WAL")
                        await db.execute("PRAGMA synchronous=NORMAL")

                    await db.execute(
                        """
                        CREATE TABLE IF NOT EXISTS kv_store (
                            key TEXT PRIMARY KEY,
                            value TEXT NOT NULL,
                            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                        )
                    """
                    )
                    await db.commit()
                finally:
                    await self._release(db)
            except aiosqlite.Error as e:
                raise StoreError(f"Failed to initialize store: {e}") from e

            self._initialized = True
            logger.debug(f"SQLite store schema ready at {self.database_path}")

    async def _connect(self) -> aiosqlite.Connection:
        # An in-memory database only lives as long as its connection
        if self._in_memory:
            if self._connection is None:
                self._connection = await aiosqlite.connect(":memory:")
            return self._connection
        return await aiosqlite.connect(str(self.database_path))

    async def _release(self, db: aiosqlite.Connection) -> None:
        if db is not self._connection:
            await db.close()

    async def get(self, key: str) -> Optional[str]:
        await self._ensure_initialized()
        try:
            db = await self._connect()
            try:
                async with db.execute("SELECT value FROM kv_store WHERE key = ?", (key,)) as cursor:
                    row = await cursor.fetchone()
            finally:
                await self._release(db)
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read key: {e}", key=key) from e

        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        await self._ensure_initialized()
        try:
            db = await self._connect()
            try:
                await db.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                """,
                    (key, value),
                )
                await db.commit()
            finally:
                await self._release(db)
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to write key: {e}", key=key) from e

    async def remove(self, key: str) -> None:
        await self._ensure_initialized()
        try:
            db = await self._connect()
            try:
                await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                await db.commit()
            finally:
                await self._release(db)
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to remove key: {e}", key=key) from e

    async def keys(self) -> list[str]:
        """Return every stored key, mainly for diagnostics."""
        await self._ensure_initialized()
        try:
            db = await self._connect()
            try:
                async with db.execute("SELECT key FROM kv_store ORDER BY key") as cursor:
                    rows = await cursor.fetchall()
            finally:
                await self._release(db)
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to list keys: {e}") from e

        return [row[0] for row in rows]

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            self._initialized = False
