"""Offline status summary and read-through loading of cached domain data."""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

from ..network.models import ConnectionType, NetworkStatus

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..network.monitor import NetworkMonitor

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_CACHED_DATA_MESSAGE = "No internet connection and no cached data available"


class OfflineState(BaseModel):
    """Connectivity plus sync bookkeeping, as shown in an offline indicator."""

    is_online: bool = True
    is_slow_connection: bool = False
    connection_type: ConnectionType = ConnectionType.UNKNOWN
    last_sync: Optional[datetime] = None
    needs_sync: bool = False
    is_syncing: bool = False


class OfflineStatus:
    """Tracks the network monitor and the sync marker in one state object."""

    def __init__(self, network_monitor: "NetworkMonitor", cache_manager: "CacheManager"):
        self.network_monitor = network_monitor
        self.cache_manager = cache_manager
        self.state = OfflineState()
        self._unsubscribe: Optional[Callable[[], None]] = None

    async def start(self) -> OfflineState:
        """Subscribe to connectivity changes and load the sync marker."""
        if self._unsubscribe is None:
            self._unsubscribe = self.network_monitor.add_listener(self._on_network_status)
        await self._reload_sync_info()
        return self.state

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_network_status(self, status: NetworkStatus) -> None:
        self.state = self.state.model_copy(
            update={
                "is_online": status.is_online,
                "is_slow_connection": status.is_slow_connection,
                "connection_type": status.connection_type,
            }
        )

    async def _reload_sync_info(self) -> None:
        last_sync, needs_sync = await asyncio.gather(
            self.cache_manager.get_last_sync(), self.cache_manager.needs_sync()
        )
        self.state = self.state.model_copy(
            update={"last_sync": last_sync, "needs_sync": needs_sync}
        )

    async def sync(self) -> bool:
        """Verify connectivity and record a sync.

        Returns:
            True if the sync marker was written; False when offline, when a
            sync is already running or on failure
        """
        if not self.state.is_online or self.state.is_syncing:
            return False

        self.state = self.state.model_copy(update={"is_syncing": True})
        try:
            success = await self.network_monitor.sync_when_online()
            if success:
                await self._reload_sync_info()
            return success
        except Exception:
            logger.exception("Sync failed")
            return False
        finally:
            self.state = self.state.model_copy(update={"is_syncing": False})

    async def test_connectivity(self) -> bool:
        return await self.network_monitor.test_connectivity()

    async def clear_cache(self) -> None:
        await self.cache_manager.clear_all_cache()
        await self._reload_sync_info()


class CachedDataState(BaseModel):
    """Result of the last load: the data, where it came from and any error."""

    data: Any = None
    loading: bool = False
    error: Optional[str] = None
    is_from_cache: bool = False


class CachedDataLoader(Generic[T]):
    """Serve cached data first and keep the cache current when online.

    A cache hit is returned as is; when online the loader then fetches fresh
    data and writes it through before ``load`` returns. A failed refresh after
    a hit only logs. On a miss (or ``force_refresh``) fresh data is fetched and
    written through, or, when offline, the state carries
    ``NO_CACHED_DATA_MESSAGE``. A failed fetch falls back to the cache.

    Example:
        >>> loader = CachedDataLoader(
        ...     monitor,
        ...     fetch=prayer_api.fetch_times,
        ...     cache=cache_manager.cache_prayer_times,
        ...     get_cached=cache_manager.get_cached_prayer_times,
        ... )
        >>> state = await loader.load()
    """

    def __init__(
        self,
        network_monitor: "NetworkMonitor",
        fetch: Callable[[], Awaitable[T]],
        cache: Callable[[T], Awaitable[Any]],
        get_cached: Callable[[], Awaitable[Optional[T]]],
    ):
        """Initialize loader.

        Args:
            network_monitor: Source of the current online flag
            fetch: Coroutine function returning fresh data
            cache: Coroutine function writing data to the cache
            get_cached: Coroutine function reading cached data, None on miss
        """
        self.network_monitor = network_monitor
        self.fetch = fetch
        self.cache = cache
        self.get_cached = get_cached
        self.state = CachedDataState()

    async def load(self, force_refresh: bool = False) -> CachedDataState:
        """Load data, preferring the cache unless ``force_refresh`` is set."""
        self.state = self.state.model_copy(update={"loading": True, "error": None})

        try:
            cached = await self.get_cached()

            if cached is not None and not force_refresh:
                self.state = CachedDataState(data=cached, is_from_cache=True)
                if self.network_monitor.is_online:
                    await self._refresh_after_hit()
            elif self.network_monitor.is_online:
                fresh = await self.fetch()
                await self.cache(fresh)
                self.state = CachedDataState(data=fresh)
            else:
                self.state = self.state.model_copy(
                    update={"loading": False, "error": NO_CACHED_DATA_MESSAGE}
                )
        except Exception as e:
            self.state = await self._fall_back_to_cache(e)

        return self.state

    async def refresh(self) -> CachedDataState:
        return await self.load(force_refresh=True)

    async def _refresh_after_hit(self) -> None:
        try:
            fresh = await self.fetch()
            await self.cache(fresh)
        except Exception as e:
            logger.warning(f"Background refresh failed: {e}")
            return
        self.state = CachedDataState(data=fresh)

    async def _fall_back_to_cache(self, error: Exception) -> CachedDataState:
        message = str(error) or type(error).__name__
        failed = self.state.model_copy(update={"loading": False, "error": message})

        try:
            cached = await self.get_cached()
        except Exception:
            logger.exception("Reading cached data after a failed fetch failed")
            return failed

        if cached is None:
            logger.warning(f"Fetch failed and no cached data available: {message}")
            return failed

        logger.warning(f"Fetch failed, using cached data: {message}")
        return CachedDataState(
            data=cached, is_from_cache=True, error=f"Using cached data: {message}"
        )
