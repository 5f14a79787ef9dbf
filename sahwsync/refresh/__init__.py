"""Refresh prompt policy and offline-first availability."""

from .availability import (
    CALENDAR_PROFILE,
    PRAYER_TIMES_PROFILE,
    QIBLA_PROFILE,
    AvailabilityReason,
    CacheAge,
    FeatureAvailability,
    FeatureProfile,
    OfflineFirstHelper,
    OfflineFirstState,
    classify_cache_age,
)
from .controller import RefreshState, SmartRefreshController
from .exceptions import FeatureUnavailableError, RefreshError
from .models import DismissalDuration, PromptFrequency, RefreshPreferences
from .offline import (
    NO_CACHED_DATA_MESSAGE,
    CachedDataLoader,
    CachedDataState,
    OfflineState,
    OfflineStatus,
)
from .policy import RefreshPolicy, should_show_refresh_prompt

__all__ = [
    "CALENDAR_PROFILE",
    "NO_CACHED_DATA_MESSAGE",
    "PRAYER_TIMES_PROFILE",
    "QIBLA_PROFILE",
    "AvailabilityReason",
    "CacheAge",
    "CachedDataLoader",
    "CachedDataState",
    "DismissalDuration",
    "FeatureAvailability",
    "FeatureProfile",
    "FeatureUnavailableError",
    "OfflineFirstHelper",
    "OfflineFirstState",
    "OfflineState",
    "OfflineStatus",
    "PromptFrequency",
    "RefreshError",
    "RefreshPolicy",
    "RefreshPreferences",
    "RefreshState",
    "SmartRefreshController",
    "classify_cache_age",
    "should_show_refresh_prompt",
]
