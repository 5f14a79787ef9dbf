"""Cache manager coordinating domain data with the durable store."""

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import ValidationError

from ..refresh.models import RefreshPreferences
from ..store.base import KeyValueStore
from ..utils.helpers import Clock, parse_iso_datetime, utc_now
from .domains import (
    ALL_DOMAINS,
    ISLAMIC_CALENDAR,
    LAST_SYNC_KEY,
    MOSQUES,
    NETWORK_STATUS_KEY,
    PRAYER_TIMES,
    QIBLA_DIRECTION,
    REFRESH_PREFERENCES_KEY,
    USER_PREFERENCES,
    CacheDomain,
)
from .exceptions import StoreReadError, StoreWriteError
from .models import (
    CacheEntry,
    CacheFreshness,
    CacheStats,
    FreshnessStatus,
    GeoPoint,
    OfflineSnapshot,
)
from .result import CacheResult

logger = logging.getLogger(__name__)

# Freshness tiers, in hours since the last global sync
FRESH_HOURS = 6
STALE_HOURS = 24
OUTDATED_HOURS = 72

NEEDS_SYNC_AFTER = timedelta(hours=24)
CRITICALLY_OUTDATED_AFTER = timedelta(hours=72)

NETWORK_STATUSES = ("online", "offline")


def classify_freshness(hours_old: float, last_sync: Optional[datetime] = None) -> CacheFreshness:
    """Map hours since the last sync onto a freshness tier.

    Lower bounds are inclusive: exactly 6h is stale, exactly 24h outdated and
    exactly 72h critical. ``math.inf`` (never synced) is critical.

    Args:
        hours_old: Hours elapsed since the last successful sync
        last_sync: The sync timestamp the age was computed from

    Returns:
        Freshness snapshot
    """
    if hours_old < FRESH_HOURS:
        status = FreshnessStatus.FRESH
    elif hours_old < STALE_HOURS:
        status = FreshnessStatus.STALE
    elif hours_old < OUTDATED_HOURS:
        status = FreshnessStatus.OUTDATED
    else:
        status = FreshnessStatus.CRITICAL

    critically_outdated = status is FreshnessStatus.CRITICAL
    return CacheFreshness(
        status=status,
        last_sync=last_sync,
        hours_old=hours_old,
        should_prompt_refresh=status in (FreshnessStatus.OUTDATED, FreshnessStatus.CRITICAL),
        critically_outdated=critically_outdated,
    )


def _normalize_param(value: Any) -> Any:
    # Absent and empty compare equal; numbers compare by value
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return value


class CacheManager:
    """Read-through/write-through persistence with per-domain validity rules.

    Every public operation is fail-open: store failures are logged and turned
    into a cache miss (reads) or a no-op (writes). Nothing raised by the store
    reaches the caller.
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Clock] = None) -> None:
        """Initialize cache manager.

        Args:
            store: Durable key-value store
            clock: Callable returning the current aware datetime, for tests
        """
        self.store = store
        self._clock = clock or utc_now

        logger.info("Cache manager initialized")

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Internal result-returning store API
    # ------------------------------------------------------------------

    async def _read(self, key: str) -> CacheResult[str]:
        try:
            return CacheResult.success(await self.store.get(key))
        except Exception as e:
            return CacheResult.failure(StoreReadError(f"Failed to read '{key}': {e}", key=key))

    async def _write(self, key: str, value: str) -> CacheResult[None]:
        try:
            await self.store.set(key, value)
        except Exception as e:
            return CacheResult.failure(StoreWriteError(f"Failed to write '{key}': {e}", key=key))
        return CacheResult.success()

    async def _remove(self, key: str) -> CacheResult[None]:
        try:
            await self.store.remove(key)
        except Exception as e:
            return CacheResult.failure(StoreWriteError(f"Failed to remove '{key}': {e}", key=key))
        return CacheResult.success()

    async def _load_entry(self, domain: CacheDomain) -> CacheResult[CacheEntry]:
        raw = await self._read(domain.storage_key)
        if not raw.ok or raw.value is None:
            return CacheResult(error=raw.error)

        try:
            return CacheResult.success(CacheEntry.model_validate_json(raw.value))
        except ValidationError as e:
            return CacheResult.failure(
                StoreReadError(
                    f"Malformed {domain.name} entry: {e.error_count()} validation errors",
                    key=domain.storage_key,
                )
            )

    @staticmethod
    def _report(result: CacheResult[Any], action: str) -> None:
        """Log a failed result at the public boundary."""
        if result.error is not None:
            logger.warning(f"Error {action}: {result.error.message}")

    # ------------------------------------------------------------------
    # Generic domain operations
    # ------------------------------------------------------------------

    async def cache_entry(
        self,
        domain: CacheDomain,
        payload: Any,
        location: Optional[GeoPoint] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        """Write-through ``payload`` for ``domain``, replacing any previous entry.

        Args:
            domain: Domain policy the entry belongs to
            payload: JSON-serializable data, stored verbatim
            location: Location the payload was computed for
            params: Domain parameters recorded with the entry
        """
        try:
            entry = CacheEntry(
                payload=payload,
                location=location,
                cached_at=self.now(),
                params=dict(params or {}),
            )
            serialized = entry.model_dump_json(by_alias=True)
        except Exception as e:
            self._report(
                CacheResult.failure(
                    StoreWriteError(
                        f"Cannot build {domain.name} entry: {e}", key=domain.storage_key
                    )
                ),
                f"caching {domain.name}",
            )
            return

        result = await self._write(domain.storage_key, serialized)
        self._report(result, f"caching {domain.name}")
        if result.ok:
            logger.debug(f"Cached {domain.name} ({len(serialized)} bytes)")

    async def get_entry(
        self,
        domain: CacheDomain,
        location: Optional[GeoPoint] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[CacheEntry]:
        """Return the cached entry for ``domain`` if it is valid for this query.

        Validity requires the entry to be within the domain TTL, within the
        spatial tolerance of ``location`` (location-keyed domains) and to match
        every required parameter. Only age expiry deletes the stored entry; a
        distance or parameter mismatch leaves it for other queries.

        Args:
            domain: Domain policy to apply
            location: Query location
            params: Query parameters compared against the stored ones

        Returns:
            The valid entry, or None on miss, expiry, mismatch or read failure
        """
        result = await self._load_entry(domain)
        if not result.ok:
            self._report(result, f"retrieving cached {domain.name}")
            return None

        entry = result.value
        if entry is None:
            return None

        if domain.ttl is not None and entry.age_seconds(self.now()) > domain.ttl.total_seconds():
            logger.debug(f"Cached {domain.name} expired, removing")
            self._report(await self._remove(domain.storage_key), f"expiring {domain.name}")
            return None

        if domain.is_location_keyed:
            if location is None or entry.location is None:
                logger.debug(f"Cached {domain.name} miss: no location to compare")
                return None

            distance = entry.location.distance_to(location)
            # NaN distances fail this comparison too
            if not distance <= domain.spatial_tolerance_km:
                logger.debug(
                    f"Cached {domain.name} miss: {distance:.2f} km from cached location "
                    f"(tolerance {domain.spatial_tolerance_km} km)"
                )
                return None

        query_params = params or {}
        for name in domain.match_params:
            if _normalize_param(entry.params.get(name)) != _normalize_param(query_params.get(name)):
                logger.debug(f"Cached {domain.name} miss: parameter '{name}' differs")
                return None

        logger.verbose(f"Cache hit for {domain.name}")  # type: ignore[attr-defined]
        return entry

    async def clear(self, domain: CacheDomain) -> None:
        """Remove the domain's entry unconditionally."""
        self._report(await self._remove(domain.storage_key), f"clearing {domain.name}")

    async def _get_payload(
        self,
        domain: CacheDomain,
        location: Optional[GeoPoint] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        entry = await self.get_entry(domain, location, params)
        return entry.payload if entry is not None else None

    # ------------------------------------------------------------------
    # Prayer times
    # ------------------------------------------------------------------

    async def cache_prayer_times(
        self,
        payload: Any,
        location: Optional[GeoPoint] = None,
        calculation_method: Optional[str] = None,
        madhab: Optional[str] = None,
    ) -> None:
        """Cache prayer times; method and madhab are recorded but not matched on read."""
        await self.cache_entry(
            PRAYER_TIMES,
            payload,
            location,
            {"calculation_method": calculation_method, "madhab": madhab},
        )

    async def get_cached_prayer_times(self) -> Any:
        return await self._get_payload(PRAYER_TIMES)

    async def clear_prayer_times(self) -> None:
        await self.clear(PRAYER_TIMES)

    # ------------------------------------------------------------------
    # Qibla direction
    # ------------------------------------------------------------------

    async def cache_qibla_direction(self, payload: Any, location: GeoPoint) -> None:
        await self.cache_entry(QIBLA_DIRECTION, payload, location)

    async def get_cached_qibla_direction(self, location: GeoPoint) -> Any:
        """Return the cached Qibla payload if computed within 1 km of ``location``."""
        return await self._get_payload(QIBLA_DIRECTION, location)

    async def clear_qibla_direction(self) -> None:
        await self.clear(QIBLA_DIRECTION)

    # ------------------------------------------------------------------
    # Islamic calendar
    # ------------------------------------------------------------------

    async def cache_islamic_calendar(self, payload: Any) -> None:
        await self.cache_entry(ISLAMIC_CALENDAR, payload)

    async def get_cached_islamic_calendar(self) -> Any:
        return await self._get_payload(ISLAMIC_CALENDAR)

    async def clear_islamic_calendar(self) -> None:
        await self.clear(ISLAMIC_CALENDAR)

    # ------------------------------------------------------------------
    # Mosques
    # ------------------------------------------------------------------

    @staticmethod
    def _mosque_params(radius: float, query: Optional[str]) -> dict[str, Any]:
        return {"radius": radius, "query": query or None}

    async def cache_mosques(
        self,
        payload: Any,
        location: GeoPoint,
        radius: float,
        query: Optional[str] = None,
    ) -> None:
        """Cache mosque search results for a location, search radius and query.

        Args:
            payload: Search results
            location: Search center
            radius: Search radius in kilometers
            query: Free-text search query, if any
        """
        await self.cache_entry(MOSQUES, payload, location, self._mosque_params(radius, query))

    async def get_cached_mosques(
        self,
        location: GeoPoint,
        radius: float,
        query: Optional[str] = None,
    ) -> Any:
        """Return cached mosque results for the same radius and query within 2 km."""
        return await self._get_payload(MOSQUES, location, self._mosque_params(radius, query))

    async def is_mosque_cache_valid(
        self,
        location: GeoPoint,
        radius: float,
        query: Optional[str] = None,
    ) -> bool:
        entry = await self.get_entry(MOSQUES, location, self._mosque_params(radius, query))
        return entry is not None

    async def clear_mosques(self) -> None:
        await self.clear(MOSQUES)

    # ------------------------------------------------------------------
    # User preferences
    # ------------------------------------------------------------------

    async def cache_user_preferences(self, preferences: dict[str, Any]) -> None:
        await self.cache_entry(USER_PREFERENCES, preferences)

    async def get_cached_user_preferences(self) -> Optional[dict[str, Any]]:
        return await self._get_payload(USER_PREFERENCES)

    async def clear_user_preferences(self) -> None:
        await self.clear(USER_PREFERENCES)

    # ------------------------------------------------------------------
    # Global sync bookkeeping
    # ------------------------------------------------------------------

    async def update_last_sync(self) -> None:
        """Record now as the time of the last successful synchronization."""
        result = await self._write(LAST_SYNC_KEY, self.now().isoformat())
        self._report(result, "updating last sync")

    async def get_last_sync(self) -> Optional[datetime]:
        result = await self._read(LAST_SYNC_KEY)
        if not result.ok:
            self._report(result, "retrieving last sync")
            return None
        if result.value is None:
            return None

        last_sync = parse_iso_datetime(result.value)
        if last_sync is None:
            logger.warning(f"Ignoring malformed last sync value: {result.value!r}")
        return last_sync

    async def needs_sync(self) -> bool:
        """True when never synced or the last sync is more than 24 hours old."""
        last_sync = await self.get_last_sync()
        return last_sync is None or self.now() - last_sync > NEEDS_SYNC_AFTER

    async def is_critically_outdated(self) -> bool:
        """True when never synced or the last sync is more than 72 hours old."""
        last_sync = await self.get_last_sync()
        return last_sync is None or self.now() - last_sync > CRITICALLY_OUTDATED_AFTER

    async def get_cache_freshness(self) -> CacheFreshness:
        """Classify time since the last sync into a freshness tier.

        Returns:
            Freshness snapshot; critical when no sync was ever recorded
        """
        last_sync = await self.get_last_sync()
        if last_sync is None:
            return classify_freshness(math.inf)

        hours_old = (self.now() - last_sync).total_seconds() / 3600
        return classify_freshness(hours_old, last_sync)

    async def sync_when_online(self) -> None:
        """Mark a completed synchronization: update last sync and persist online."""
        await self.update_last_sync()
        await self.set_network_status("online")

    # ------------------------------------------------------------------
    # Persisted network flag
    # ------------------------------------------------------------------

    async def set_network_status(self, status: str) -> None:
        if status not in NETWORK_STATUSES:
            logger.warning(f"Ignoring invalid network status: {status!r}")
            return
        self._report(await self._write(NETWORK_STATUS_KEY, status), "setting network status")

    async def get_network_status(self) -> str:
        """Return the persisted ``"online"``/``"offline"`` flag, defaulting to online."""
        result = await self._read(NETWORK_STATUS_KEY)
        if not result.ok:
            self._report(result, "getting network status")
            return "online"
        return result.value if result.value in NETWORK_STATUSES else "online"

    # ------------------------------------------------------------------
    # Refresh preferences
    # ------------------------------------------------------------------

    async def get_refresh_preferences(self) -> RefreshPreferences:
        """Load refresh prompt preferences, falling back to defaults."""
        result = await self._read(REFRESH_PREFERENCES_KEY)
        if not result.ok:
            self._report(result, "loading refresh preferences")
            return RefreshPreferences()
        if result.value is None:
            return RefreshPreferences()

        try:
            return RefreshPreferences.model_validate_json(result.value)
        except ValidationError:
            logger.warning("Malformed refresh preferences, using defaults")
            return RefreshPreferences()

    async def save_refresh_preferences(self, preferences: RefreshPreferences) -> None:
        result = await self._write(REFRESH_PREFERENCES_KEY, preferences.to_json())
        self._report(result, "saving refresh preferences")

    # ------------------------------------------------------------------
    # Diagnostics and bulk operations
    # ------------------------------------------------------------------

    async def get_cache_stats(self) -> CacheStats:
        """Get byte sizes of every serialized domain entry.

        Returns:
            Per-domain sizes, their total and the last sync time
        """
        sizes: dict[str, int] = {}
        for domain in ALL_DOMAINS:
            result = await self._read(domain.storage_key)
            self._report(result, f"sizing {domain.name}")
            raw = result.unwrap_or("")
            sizes[domain.name] = len(raw.encode("utf-8"))

        return CacheStats(
            sizes=sizes,
            total_size=sum(sizes.values()),
            last_sync=await self.get_last_sync(),
        )

    async def get_all_offline_data(self) -> OfflineSnapshot:
        """Collect everything needed for a cold start without network."""
        prayer_times, user_preferences, last_sync, network_status = await asyncio.gather(
            self.get_cached_prayer_times(),
            self.get_cached_user_preferences(),
            self.get_last_sync(),
            self.get_network_status(),
        )
        return OfflineSnapshot(
            prayer_times=prayer_times,
            user_preferences=user_preferences,
            last_sync=last_sync,
            network_status=network_status,
        )

    async def clear_all_cache(self) -> None:
        """Remove every domain entry, the last sync marker and the network flag."""
        keys = [domain.storage_key for domain in ALL_DOMAINS]
        keys += [LAST_SYNC_KEY, NETWORK_STATUS_KEY]

        for key in keys:
            self._report(await self._remove(key), f"clearing '{key}'")

        logger.info("Cache cleared")
