"""Offline-first feature availability based on the age of the last sync."""

import logging
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel

from ..utils.helpers import Clock, utc_now
from .exceptions import FeatureUnavailableError

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..network.monitor import NetworkMonitor

logger = logging.getLogger(__name__)

T = TypeVar("T")

FRESH_CACHE_HOURS = 1


class CacheAge(str, Enum):
    """Age class of cached data relative to a feature's tolerance."""

    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


class AvailabilityReason(str, Enum):
    """Why a feature is or is not available."""

    OFFLINE_NO_CACHE = "offline-no-cache"
    OFFLINE_CACHED = "offline-cached"
    ONLINE = "online"


class FeatureProfile(BaseModel):
    """How long a feature's cached data remains usable."""

    feature: str
    fallback_message: str = "This feature requires an internet connection."
    graceful_degradation: bool = True
    max_cache_age: float = 6.0  # hours


PRAYER_TIMES_PROFILE = FeatureProfile(
    feature="prayer-times",
    fallback_message=(
        "Prayer times require location access and internet connection for accurate calculations."
    ),
    max_cache_age=24,
)

QIBLA_PROFILE = FeatureProfile(
    feature="qibla",
    fallback_message=(
        "Qibla direction requires location access. Compass works offline with cached data."
    ),
    max_cache_age=168,
)

CALENDAR_PROFILE = FeatureProfile(
    feature="calendar",
    fallback_message=(
        "Islamic calendar data is calculated locally but some events may require internet."
    ),
    max_cache_age=720,
)


class OfflineFirstState(BaseModel):
    """Snapshot of a feature's offline readiness."""

    is_online: bool = True
    has_cache: bool = False
    cache_age: CacheAge = CacheAge.FRESH
    should_fallback: bool = False
    show_degraded_message: bool = False
    error: Optional[str] = None


class FeatureAvailability(BaseModel):
    available: bool
    reason: AvailabilityReason
    message: Optional[str] = None


def classify_cache_age(
    last_sync: Optional[datetime], now: datetime, max_cache_age: float
) -> CacheAge:
    """Classify the last sync against a feature's maximum cache age in hours."""
    if last_sync is None:
        return CacheAge.EXPIRED

    hours = (now - last_sync).total_seconds() / 3600
    if hours < FRESH_CACHE_HOURS:
        return CacheAge.FRESH
    if hours < max_cache_age:
        return CacheAge.STALE
    return CacheAge.EXPIRED


class OfflineFirstHelper:
    """Evaluates one feature's availability and runs actions with offline fallback."""

    def __init__(
        self,
        cache_manager: "CacheManager",
        profile: FeatureProfile,
        network_monitor: Optional["NetworkMonitor"] = None,
        clock: Optional[Clock] = None,
    ):
        self.cache_manager = cache_manager
        self.profile = profile
        self.network_monitor = network_monitor
        self._clock = clock or utc_now
        self.state = OfflineFirstState()

    async def _is_online(self) -> bool:
        if self.network_monitor is not None:
            return self.network_monitor.is_online
        return await self.cache_manager.get_network_status() == "online"

    async def refresh(self) -> OfflineFirstState:
        """Re-read connectivity and the last sync and recompute the state.

        Returns:
            The updated state; on failure the previous state with ``error`` set
        """
        try:
            last_sync = await self.cache_manager.get_last_sync()
            is_online = await self._is_online()
        except Exception as e:
            logger.exception(f"Error checking cache status for {self.profile.feature}")
            self.state = self.state.model_copy(update={"error": str(e)})
            return self.state

        has_cache = last_sync is not None
        cache_age = classify_cache_age(last_sync, self._clock(), self.profile.max_cache_age)
        expired = cache_age is CacheAge.EXPIRED

        self.state = OfflineFirstState(
            is_online=is_online,
            has_cache=has_cache,
            cache_age=cache_age,
            should_fallback=not is_online and (not has_cache or expired),
            show_degraded_message=(not is_online and self.profile.graceful_degradation)
            or (is_online and expired),
        )
        return self.state

    def get_cache_status_message(self) -> Optional[str]:
        state = self.state
        if not state.is_online and not state.has_cache:
            return "No internet connection and no cached data available."

        if not state.is_online:
            if state.cache_age is CacheAge.FRESH:
                return "Using fresh cached data while offline."
            if state.cache_age is CacheAge.STALE:
                return "Using cached data while offline. Data may be outdated."
            return (
                "Using expired cached data while offline. "
                "Please connect to internet for updates."
            )

        if state.cache_age is CacheAge.EXPIRED:
            return "Your cached data is outdated. Refreshing..."

        return None

    def get_feature_availability(self) -> FeatureAvailability:
        if self.state.should_fallback:
            return FeatureAvailability(
                available=False,
                reason=AvailabilityReason.OFFLINE_NO_CACHE,
                message=self.profile.fallback_message,
            )

        if not self.state.is_online and self.state.has_cache:
            return FeatureAvailability(
                available=True,
                reason=AvailabilityReason.OFFLINE_CACHED,
                message=self.get_cache_status_message(),
            )

        return FeatureAvailability(available=True, reason=AvailabilityReason.ONLINE)

    async def execute_with_fallback(
        self,
        online_action: Callable[[], Awaitable[T]],
        offline_action: Optional[Callable[[], Awaitable[T]]] = None,
    ) -> T:
        """Run the online action, falling back to cached data when possible.

        Args:
            online_action: Coroutine function fetching fresh data
            offline_action: Coroutine function reading cached data

        Returns:
            Result of whichever action succeeded

        Raises:
            FeatureUnavailableError: If offline with no usable fallback
            Exception: The online action's error when the fallback fails as well
        """
        can_fall_back = offline_action is not None and self.state.has_cache

        if not self.state.is_online:
            if can_fall_back:
                return await offline_action()
            raise FeatureUnavailableError(self.profile.fallback_message)

        try:
            return await online_action()
        except Exception as error:
            if not can_fall_back:
                raise
            logger.warning(
                f"{self.profile.feature} online action failed, using cached data: {error}"
            )
            try:
                return await offline_action()
            except Exception:
                logger.exception(f"{self.profile.feature} cached fallback failed")
                raise error
