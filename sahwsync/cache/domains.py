"""Fixed per-domain cache policies."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class CacheDomain:
    """Storage key and validity rules for one kind of cached data.

    Attributes:
        name: Short domain name used in logs and stats
        storage_key: Key the entry is persisted under
        ttl: Maximum entry age, or None for entries that never expire
        spatial_tolerance_km: Maximum distance between stored and query
            location, or None when the domain is not location-keyed
        match_params: Parameters that must equal the query's exactly
    """

    name: str
    storage_key: str
    ttl: Optional[timedelta] = None
    spatial_tolerance_km: Optional[float] = None
    match_params: tuple[str, ...] = ()

    @property
    def is_location_keyed(self) -> bool:
        return self.spatial_tolerance_km is not None


PRAYER_TIMES = CacheDomain(
    name="prayer_times",
    storage_key="cached_prayer_times",
    ttl=timedelta(hours=24),
)

QIBLA_DIRECTION = CacheDomain(
    name="qibla_direction",
    storage_key="cached_qibla_direction",
    ttl=timedelta(days=7),
    spatial_tolerance_km=1.0,
)

ISLAMIC_CALENDAR = CacheDomain(
    name="islamic_calendar",
    storage_key="cached_islamic_calendar",
    ttl=timedelta(days=30),
)

MOSQUES = CacheDomain(
    name="mosques",
    storage_key="cached_mosques",
    ttl=timedelta(hours=2),
    spatial_tolerance_km=2.0,
    match_params=("radius", "query"),
)

USER_PREFERENCES = CacheDomain(
    name="user_preferences",
    storage_key="user_preferences",
)

ALL_DOMAINS: tuple[CacheDomain, ...] = (
    PRAYER_TIMES,
    QIBLA_DIRECTION,
    ISLAMIC_CALENDAR,
    MOSQUES,
    USER_PREFERENCES,
)

LAST_SYNC_KEY = "last_sync"
NETWORK_STATUS_KEY = "network_status"
REFRESH_PREFERENCES_KEY = "refresh_preferences"
