"""Models for cached domain data and cache diagnostics."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.helpers import ensure_timezone_aware
from .geo import haversine_km


class GeoPoint(BaseModel):
    """Immutable latitude/longitude pair with finite coordinates."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float
    longitude: float

    def distance_to(self, other: "GeoPoint") -> float:
        """Great-circle distance to ``other`` in kilometers."""
        return haversine_km(self.latitude, self.longitude, other.latitude, other.longitude)


class CacheEntry(BaseModel):
    """One domain's cached payload and the context it was fetched for.

    Persisted as JSON with the field names ``payload``, ``location``,
    ``cachedAt`` and ``domainParams``. The payload is stored verbatim.
    """

    model_config = ConfigDict(populate_by_name=True)

    payload: Any
    location: Optional[GeoPoint] = None
    cached_at: datetime = Field(alias="cachedAt")
    params: dict[str, Any] = Field(default_factory=dict, alias="domainParams")

    @field_validator("cached_at")
    @classmethod
    def _aware_cached_at(cls, value: datetime) -> datetime:
        return ensure_timezone_aware(value)

    @field_serializer("cached_at")
    def serialize_cached_at(self, dt: datetime) -> str:
        """Serialize the cache timestamp to ISO format."""
        return dt.isoformat()

    def age_seconds(self, now: datetime) -> float:
        """Seconds elapsed between caching and ``now``."""
        return (now - self.cached_at).total_seconds()


class FreshnessStatus(str, Enum):
    """Freshness tier derived from time since the last global sync."""

    FRESH = "fresh"
    STALE = "stale"
    OUTDATED = "outdated"
    CRITICAL = "critical"


class CacheFreshness(BaseModel):
    """Snapshot of how old the cached data is overall."""

    status: FreshnessStatus
    last_sync: Optional[datetime] = None
    hours_old: float
    should_prompt_refresh: bool = False
    critically_outdated: bool = False


class CacheStats(BaseModel):
    """Serialized byte sizes per domain, for diagnostics."""

    sizes: dict[str, int] = Field(default_factory=dict)
    total_size: int = 0
    last_sync: Optional[datetime] = None


class OfflineSnapshot(BaseModel):
    """Everything needed to render the app on a cold start without network."""

    prayer_times: Any = None
    user_preferences: Optional[dict[str, Any]] = None
    last_sync: Optional[datetime] = None
    network_status: str = "online"
