"""Offline cache for prayer-assistant domain data."""

from .domains import (
    ALL_DOMAINS,
    ISLAMIC_CALENDAR,
    MOSQUES,
    PRAYER_TIMES,
    QIBLA_DIRECTION,
    USER_PREFERENCES,
    CacheDomain,
)
from .exceptions import CacheError, StoreReadError, StoreWriteError
from .manager import CacheManager, classify_freshness
from .models import (
    CacheEntry,
    CacheFreshness,
    CacheStats,
    FreshnessStatus,
    GeoPoint,
    OfflineSnapshot,
)
from .result import CacheResult

__all__ = [
    "ALL_DOMAINS",
    "ISLAMIC_CALENDAR",
    "MOSQUES",
    "PRAYER_TIMES",
    "QIBLA_DIRECTION",
    "USER_PREFERENCES",
    "CacheDomain",
    "CacheEntry",
    "CacheError",
    "CacheFreshness",
    "CacheManager",
    "CacheResult",
    "CacheStats",
    "FreshnessStatus",
    "GeoPoint",
    "OfflineSnapshot",
    "StoreReadError",
    "StoreWriteError",
    "classify_freshness",
]
