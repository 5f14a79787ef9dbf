"""Unit tests for the offline status summary and read-through data loading."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sahwsync.network.models import ConnectionInfo, ConnectionType
from sahwsync.network.monitor import NetworkMonitor
from sahwsync.refresh.offline import (
    NO_CACHED_DATA_MESSAGE,
    CachedDataLoader,
    OfflineStatus,
)

FRESH_TIMES = {"fajr": "05:10"}
CACHED_TIMES = {"fajr": "05:12"}


@pytest.fixture
def offline_status(network_monitor, cache_manager):
    return OfflineStatus(network_monitor, cache_manager)


@pytest.fixture
def fetch():
    return AsyncMock(return_value=FRESH_TIMES)


@pytest.fixture
def loader(network_monitor, cache_manager, fetch):
    return CachedDataLoader(
        network_monitor,
        fetch=fetch,
        cache=cache_manager.cache_prayer_times,
        get_cached=cache_manager.get_cached_prayer_times,
    )


class TestOfflineStatus:
    """Test the combined connectivity and sync state."""

    @pytest.mark.asyncio
    async def test_start_loads_sync_marker(self, offline_status, cache_manager, fake_clock):
        await cache_manager.update_last_sync()

        state = await offline_status.start()

        assert state.is_online is True
        assert state.last_sync == fake_clock.now
        assert state.needs_sync is False

    @pytest.mark.asyncio
    async def test_never_synced_needs_sync(self, offline_status):
        state = await offline_status.start()

        assert state.last_sync is None
        assert state.needs_sync is True

    @pytest.mark.asyncio
    async def test_tracks_connectivity_changes(self, cache_manager, mock_probe):
        monitor = NetworkMonitor(
            cache_manager,
            probe=mock_probe,
            connection_info=lambda: ConnectionInfo(type="wifi"),
        )
        await monitor.initialize()
        status = OfflineStatus(monitor, cache_manager)
        await status.start()
        assert status.state.connection_type is ConnectionType.WIFI

        await monitor.handle_offline()

        assert status.state.is_online is False

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, offline_status, network_monitor):
        await offline_status.start()
        offline_status.stop()

        await network_monitor.handle_offline()

        assert offline_status.state.is_online is True
        assert network_monitor._listeners == []

    @pytest.mark.asyncio
    async def test_sync_records_marker(self, offline_status, fake_clock):
        await offline_status.start()

        assert await offline_status.sync() is True
        assert offline_status.state.last_sync == fake_clock.now
        assert offline_status.state.needs_sync is False
        assert offline_status.state.is_syncing is False

    @pytest.mark.asyncio
    async def test_sync_offline_is_refused(self, offline_status, network_monitor, mock_probe):
        await offline_status.start()
        await network_monitor.handle_offline()

        assert await offline_status.sync() is False
        mock_probe.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_sync_while_syncing_is_refused(self, offline_status):
        await offline_status.start()
        offline_status.state = offline_status.state.model_copy(update={"is_syncing": True})

        assert await offline_status.sync() is False

    @pytest.mark.asyncio
    async def test_sync_error_returns_false(self, offline_status, network_monitor):
        await offline_status.start()
        network_monitor.sync_when_online = AsyncMock(side_effect=RuntimeError("boom"))

        assert await offline_status.sync() is False
        assert offline_status.state.is_syncing is False

    @pytest.mark.asyncio
    async def test_clear_cache_resets_sync_info(self, offline_status, cache_manager):
        await cache_manager.update_last_sync()
        await cache_manager.cache_prayer_times(CACHED_TIMES)
        await offline_status.start()

        await offline_status.clear_cache()

        assert offline_status.state.last_sync is None
        assert offline_status.state.needs_sync is True
        assert await cache_manager.get_cached_prayer_times() is None

    @pytest.mark.asyncio
    async def test_test_connectivity_delegates(self, offline_status, mock_probe):
        assert await offline_status.test_connectivity() is True
        mock_probe.check.assert_awaited_once()


class TestCachedDataLoader:
    """Test cache-first loading with write-through."""

    @pytest.mark.asyncio
    async def test_hit_online_refreshes_and_writes_through(self, loader, cache_manager, fetch):
        await cache_manager.cache_prayer_times(CACHED_TIMES)

        state = await loader.load()

        fetch.assert_awaited_once()
        assert state.data == FRESH_TIMES
        assert state.is_from_cache is False
        assert state.loading is False
        assert await cache_manager.get_cached_prayer_times() == FRESH_TIMES

    @pytest.mark.asyncio
    async def test_hit_with_failed_refresh_keeps_cached_data(self, loader, cache_manager, fetch):
        await cache_manager.cache_prayer_times(CACHED_TIMES)
        fetch.side_effect = ConnectionError("timeout")

        state = await loader.load()

        assert state.data == CACHED_TIMES
        assert state.is_from_cache is True
        assert state.error is None

    @pytest.mark.asyncio
    async def test_hit_offline_skips_fetch(self, loader, cache_manager, network_monitor, fetch):
        await cache_manager.cache_prayer_times(CACHED_TIMES)
        await network_monitor.handle_offline()

        state = await loader.load()

        fetch.assert_not_called()
        assert state.data == CACHED_TIMES
        assert state.is_from_cache is True

    @pytest.mark.asyncio
    async def test_miss_online_fetches_and_writes_through(self, loader, cache_manager):
        state = await loader.load()

        assert state.data == FRESH_TIMES
        assert state.is_from_cache is False
        assert await cache_manager.get_cached_prayer_times() == FRESH_TIMES

    @pytest.mark.asyncio
    async def test_miss_offline_reports_no_cached_data(self, loader, network_monitor, fetch):
        await network_monitor.handle_offline()

        state = await loader.load()

        fetch.assert_not_called()
        assert state.data is None
        assert state.loading is False
        assert state.error == NO_CACHED_DATA_MESSAGE

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_cache(self, loader, cache_manager, fetch):
        await cache_manager.cache_prayer_times(CACHED_TIMES)

        state = await loader.refresh()

        fetch.assert_awaited_once()
        assert state.data == FRESH_TIMES
        assert state.is_from_cache is False

    @pytest.mark.asyncio
    async def test_failed_fetch_falls_back_to_cache(self, network_monitor, fetch):
        fetch.side_effect = ConnectionError("server unreachable")
        get_cached = AsyncMock(side_effect=[None, CACHED_TIMES])
        loader = CachedDataLoader(network_monitor, fetch, AsyncMock(), get_cached)

        state = await loader.load()

        assert state.data == CACHED_TIMES
        assert state.is_from_cache is True
        assert state.error == "Using cached data: server unreachable"

    @pytest.mark.asyncio
    async def test_forced_refresh_failure_falls_back_to_cache(self, loader, cache_manager, fetch):
        await cache_manager.cache_prayer_times(CACHED_TIMES)
        fetch.side_effect = ConnectionError("server unreachable")

        state = await loader.refresh()

        assert state.data == CACHED_TIMES
        assert state.is_from_cache is True
        assert state.error == "Using cached data: server unreachable"

    @pytest.mark.asyncio
    async def test_failed_fetch_without_cache_reports_error(self, loader, fetch):
        fetch.side_effect = ConnectionError("server unreachable")

        state = await loader.load()

        assert state.data is None
        assert state.loading is False
        assert state.error == "server unreachable"

    @pytest.mark.asyncio
    async def test_failed_cache_read_after_fetch_error(self, network_monitor, fetch):
        fetch.side_effect = ConnectionError("server unreachable")
        get_cached = AsyncMock(side_effect=[None, RuntimeError("store gone")])
        loader = CachedDataLoader(network_monitor, fetch, MagicMock(), get_cached)

        state = await loader.load()

        assert state.error == "server unreachable"
        assert state.is_from_cache is False
