"""Models for refresh-prompt preferences."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.helpers import ensure_timezone_aware


class PromptFrequency(str, Enum):
    """How eagerly the app asks the user to refresh stale data."""

    CONSERVATIVE = "conservative"
    NORMAL = "normal"
    AGGRESSIVE = "aggressive"


class DismissalDuration(str, Enum):
    """How long a dismissed refresh prompt stays hidden."""

    TEMPORARY = "temporary"
    SESSION = "session"
    EXTENDED = "extended"

    @property
    def duration(self) -> timedelta:
        return _DISMISSAL_WINDOWS[self]


_DISMISSAL_WINDOWS = {
    DismissalDuration.TEMPORARY: timedelta(hours=2),
    DismissalDuration.SESSION: timedelta(hours=8),
    DismissalDuration.EXTENDED: timedelta(hours=24),
}


class RefreshPreferences(BaseModel):
    """User-owned refresh prompt settings.

    Persisted as JSON using the field names ``enableAutoPrompts``,
    ``promptFrequency`` and ``dismissedUntil``.
    """

    model_config = ConfigDict(populate_by_name=True)

    enable_auto_prompts: bool = Field(default=True, alias="enableAutoPrompts")
    prompt_frequency: PromptFrequency = Field(
        default=PromptFrequency.NORMAL, alias="promptFrequency"
    )
    dismissed_until: Optional[datetime] = Field(default=None, alias="dismissedUntil")

    @field_validator("dismissed_until")
    @classmethod
    def _aware_dismissed_until(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_timezone_aware(value) if value is not None else None

    @field_serializer("dismissed_until")
    def serialize_dismissed_until(self, dt: Optional[datetime]) -> Optional[str]:
        """Serialize the dismissal deadline to ISO format."""
        return dt.isoformat() if dt is not None else None

    def is_dismissed(self, now: datetime) -> bool:
        """True while ``now`` is strictly before the dismissal deadline."""
        return self.dismissed_until is not None and now < self.dismissed_until

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
