"""Utility functions and helpers."""

from .helpers import (
    Clock,
    ensure_timezone_aware,
    format_duration,
    format_time_ago,
    parse_iso_datetime,
    utc_now,
)
from .logging import apply_command_line_overrides, get_log_level, setup_logging

__all__ = [
    "Clock",
    "apply_command_line_overrides",
    "ensure_timezone_aware",
    "format_duration",
    "format_time_ago",
    "get_log_level",
    "parse_iso_datetime",
    "setup_logging",
    "utc_now",
]
