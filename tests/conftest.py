"""Shared test fixtures: a controllable clock, in-memory stores and probe doubles."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from sahwsync.cache.manager import CacheManager
from sahwsync.cache.models import GeoPoint
from sahwsync.network.monitor import NetworkMonitor
from sahwsync.network.probe import ConnectivityProbe
from sahwsync.store.memory import MemoryStore

START_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache_manager(memory_store, fake_clock) -> CacheManager:
    return CacheManager(memory_store, clock=fake_clock)


@pytest.fixture
def mecca() -> GeoPoint:
    """Location of the Kaaba, used as the reference point in spatial tests."""
    return GeoPoint(latitude=21.4225, longitude=39.8262)


@pytest.fixture
def mock_probe() -> MagicMock:
    """Connectivity probe double that succeeds by default."""
    probe = MagicMock(spec=ConnectivityProbe)
    probe.url = "https://probe.test/favicon.ico"
    probe.check = AsyncMock(return_value=True)
    probe.close = AsyncMock()
    return probe


@pytest.fixture
def network_monitor(cache_manager, mock_probe) -> NetworkMonitor:
    return NetworkMonitor(cache_manager, probe=mock_probe, online_debounce=0)
