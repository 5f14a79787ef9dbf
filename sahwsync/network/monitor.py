"""Connectivity monitor driving synchronization triggers."""

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .exceptions import ConnectivityProbeError
from .models import ConnectionInfo, ConnectionType, MonitorState, NetworkStatus
from .probe import ConnectivityProbe

if TYPE_CHECKING:
    from ..cache.manager import CacheManager

logger = logging.getLogger(__name__)

StatusListener = Callable[[NetworkStatus], None]
ConnectionInfoProvider = Callable[[], Optional[ConnectionInfo]]


class NetworkMonitor:
    """Tracks online/offline transitions and coarse connection quality.

    Platform online/offline signals are fed in through :meth:`handle_online`
    and :meth:`handle_offline`. An online signal is only trusted after a real
    probe succeeds; only then is the cache manager's sync marker written.
    """

    def __init__(
        self,
        cache_manager: "CacheManager",
        probe: Optional[ConnectivityProbe] = None,
        connection_info: Optional[ConnectionInfoProvider] = None,
        online_debounce: float = 1.0,
    ):
        """Initialize network monitor.

        Args:
            cache_manager: Cache manager receiving the persisted flag and sync marker
            probe: Connectivity probe, a default one is created when omitted
            connection_info: Optional callable reporting platform connection details
            online_debounce: Seconds to wait after an online signal before probing
        """
        self.cache_manager = cache_manager
        self.probe = probe or ConnectivityProbe()
        self.connection_info = connection_info
        self.online_debounce = online_debounce

        self.state = MonitorState.ONLINE
        self._status = NetworkStatus()
        self._listeners: List[StatusListener] = []

        logger.debug("Network monitor initialized")

    @property
    def is_online(self) -> bool:
        return self._status.is_online

    @property
    def is_slow_connection(self) -> bool:
        return self._status.is_slow_connection

    def get_current_status(self) -> NetworkStatus:
        """Return a copy of the current status."""
        return self._status.model_copy()

    async def initialize(self) -> None:
        """Load the persisted flag for cold-start display and read connection quality."""
        persisted = await self.cache_manager.get_network_status()
        connection_type, is_slow = self._read_connection_quality()

        self._status = NetworkStatus(
            is_online=persisted == "online",
            connection_type=connection_type,
            is_slow_connection=is_slow,
        )
        self.state = MonitorState.ONLINE if self._status.is_online else MonitorState.OFFLINE

        logger.info(
            f"Network monitor started: {persisted}, connection {connection_type.value}"
            + (" (slow)" if is_slow else "")
        )

    async def cleanup(self) -> None:
        """Drop all listeners and release the probe's HTTP client."""
        self._listeners.clear()
        await self.probe.close()
        logger.debug("Network monitor cleaned up")

    def add_listener(self, callback: StatusListener) -> Callable[[], None]:
        """Register a status listener.

        The callback is invoked immediately with the current status and then on
        every change.

        Args:
            callback: Function receiving a copy of the status

        Returns:
            Function removing the listener again
        """
        self._listeners.append(callback)
        self._deliver(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _deliver(self, listener: StatusListener) -> None:
        try:
            listener(self.get_current_status())
        except Exception:
            logger.exception("Error in network status listener")

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            self._deliver(listener)

    def _read_connection_quality(self) -> Tuple[ConnectionType, bool]:
        if self.connection_info is None:
            return ConnectionType.UNKNOWN, False

        try:
            info = self.connection_info()
        except Exception:
            logger.exception("Connection info provider failed")
            return ConnectionType.UNKNOWN, False

        if info is None:
            return ConnectionType.UNKNOWN, False
        return info.connection_type(), info.is_slow()

    async def _update_status(self, is_online: Optional[bool] = None) -> None:
        """Recompute the status, persist the coarse flag and notify on change.

        Args:
            is_online: New online flag, or None to keep the current one
        """
        connection_type, is_slow = self._read_connection_quality()
        new_status = NetworkStatus(
            is_online=self._status.is_online if is_online is None else is_online,
            connection_type=connection_type,
            is_slow_connection=is_slow,
        )

        changed = new_status != self._status
        self._status = new_status
        self.state = MonitorState.ONLINE if new_status.is_online else MonitorState.OFFLINE

        await self.cache_manager.set_network_status(new_status.persisted_flag())

        if changed:
            logger.info(
                f"Network status changed: {new_status.persisted_flag()}, "
                f"connection {new_status.connection_type.value}"
            )
            self._notify_listeners()

    async def test_connectivity(self) -> bool:
        """Probe real connectivity and update the status with the outcome.

        Returns:
            True when the probe succeeded
        """
        try:
            is_connected = await self.probe.check()
        except ConnectivityProbeError as e:
            logger.info(f"Network test failed: {e.message}")
            is_connected = False
        except Exception:
            logger.exception("Unexpected error during connectivity probe")
            is_connected = False

        await self._update_status(is_connected)
        return is_connected

    async def _mark_synced(self) -> bool:
        try:
            await self.cache_manager.sync_when_online()
        except Exception:
            logger.exception("Sync failed")
            return False
        logger.debug("Sync marker updated")
        return True

    async def sync_when_online(self) -> bool:
        """Re-verify connectivity and record a synchronization.

        Only the global sync marker is written; domain data is refetched by
        the services that own it.

        Returns:
            False when offline or the probe fails, True once the marker is written
        """
        if not self.is_online:
            return False

        if not await self.test_connectivity():
            return False

        return await self._mark_synced()

    async def handle_online(self) -> None:
        """React to a platform online signal: debounce, probe, then sync."""
        logger.info("Network: online event detected")
        self.state = MonitorState.VERIFYING

        if self.online_debounce > 0:
            await asyncio.sleep(self.online_debounce)

        if await self.test_connectivity():
            await self._mark_synced()

    async def handle_offline(self) -> None:
        """React to a platform offline signal; no probe is needed."""
        logger.info("Network: offline event detected")
        await self._update_status(False)

    async def handle_connection_change(self) -> None:
        """Re-read connection quality after a platform change signal."""
        await self._update_status()
