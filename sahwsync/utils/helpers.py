"""General utility functions and helpers."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware, assuming UTC for naive values.

    Args:
        dt: Datetime to check

    Returns:
        Timezone-aware datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_iso_datetime(dt_string: Optional[str]) -> Optional[datetime]:
    """Parse ISO datetime string with error handling.

    Accepts the trailing ``Z`` form produced by JavaScript clients. Naive
    values are interpreted as UTC.

    Args:
        dt_string: ISO datetime string

    Returns:
        Parsed timezone-aware datetime or None if parsing fails
    """
    if dt_string is None:
        logger.debug("Failed to parse datetime 'None': Input is None")
        return None

    try:
        if dt_string.endswith("Z"):
            dt_string = dt_string[:-1] + "+00:00"

        return ensure_timezone_aware(datetime.fromisoformat(dt_string))
    except (ValueError, TypeError) as e:
        logger.debug(f"Failed to parse datetime '{dt_string}': {e}")
        return None


def format_duration(seconds: int) -> str:
    """Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        minutes = seconds // 60
        remaining_seconds = seconds % 60
        if remaining_seconds == 0:
            return f"{minutes}m"
        return f"{minutes}m {remaining_seconds}s"
    hours = seconds // 3600
    remaining_minutes = (seconds % 3600) // 60
    if remaining_minutes == 0:
        return f"{hours}h"
    return f"{hours}h {remaining_minutes}m"


def format_time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    """Format datetime as time ago string.

    Args:
        dt: Datetime to format
        now: Reference time, defaults to the current UTC time

    Returns:
        Formatted time ago string
    """
    now = ensure_timezone_aware(now) if now is not None else utc_now()
    delta = now - ensure_timezone_aware(dt)

    if delta.total_seconds() < 60:
        return "just now"
    if delta.total_seconds() < 3600:
        minutes = int(delta.total_seconds() // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if delta.total_seconds() < 86400:
        hours = int(delta.total_seconds() // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = delta.days
    return f"{days} day{'s' if days != 1 else ''} ago"
