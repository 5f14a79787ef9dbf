"""Process-lifetime wiring of store, cache, network monitor and refresh policy."""

import logging
from typing import Optional

from .cache.manager import CacheManager
from .config.settings import SahwSyncSettings
from .network.monitor import ConnectionInfoProvider, NetworkMonitor
from .network.probe import ConnectivityProbe
from .refresh.controller import SmartRefreshController
from .refresh.policy import RefreshPolicy
from .store.base import KeyValueStore
from .store.memory import MemoryStore
from .store.sqlite import SQLiteStore
from .utils.helpers import Clock

logger = logging.getLogger(__name__)


class SyncContext:
    """Owns one instance of each component and passes them to each other.

    Create one per process (or per test) instead of relying on module-level
    singletons.
    """

    def __init__(
        self,
        store: KeyValueStore,
        cache_manager: CacheManager,
        network_monitor: NetworkMonitor,
        refresh_policy: RefreshPolicy,
        settings: Optional[SahwSyncSettings] = None,
    ):
        self.store = store
        self.cache_manager = cache_manager
        self.network_monitor = network_monitor
        self.refresh_policy = refresh_policy
        self.settings = settings
        self._controller: Optional[SmartRefreshController] = None

    @classmethod
    def create(
        cls,
        settings: SahwSyncSettings,
        store: Optional[KeyValueStore] = None,
        probe: Optional[ConnectivityProbe] = None,
        connection_info: Optional[ConnectionInfoProvider] = None,
        clock: Optional[Clock] = None,
    ) -> "SyncContext":
        """Build a context from settings.

        Args:
            settings: Application settings
            store: Store to use instead of the configured backend
            probe: Connectivity probe to use instead of one built from settings
            connection_info: Optional platform connection info provider
            clock: Callable returning the current aware datetime

        Returns:
            Wired context; call :meth:`initialize` before use
        """
        if store is None:
            store = cls._create_store(settings)

        cache_manager = CacheManager(store, clock=clock)
        network_monitor = NetworkMonitor(
            cache_manager,
            probe=probe or ConnectivityProbe(settings.probe_url, settings.probe_timeout),
            connection_info=connection_info,
            online_debounce=settings.online_debounce,
        )
        refresh_policy = RefreshPolicy(cache_manager, network_monitor, clock=clock)

        return cls(store, cache_manager, network_monitor, refresh_policy, settings)

    @staticmethod
    def _create_store(settings: SahwSyncSettings) -> KeyValueStore:
        backend = settings.store_backend.lower()
        if backend == "memory":
            logger.debug("Using in-memory store")
            return MemoryStore()
        if backend == "sqlite":
            return SQLiteStore(settings.resolved_database_file)
        raise ValueError(f"Unknown store backend: {settings.store_backend}")

    @property
    def refresh_controller(self) -> SmartRefreshController:
        """Smart refresh controller, created on first access."""
        if self._controller is None:
            interval = self.settings.refresh_check_interval if self.settings else 1800
            self._controller = SmartRefreshController(
                self.refresh_policy, self.network_monitor, check_interval=interval
            )
        return self._controller

    async def initialize(self) -> None:
        await self.network_monitor.initialize()

    async def close(self) -> None:
        """Stop the controller and release network and store resources."""
        if self._controller is not None:
            await self._controller.stop()
        await self.network_monitor.cleanup()
        await self.store.close()
        logger.debug("Sync context closed")

    async def __aenter__(self) -> "SyncContext":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()
