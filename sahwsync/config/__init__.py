"""Configuration management."""

from .settings import LoggingSettings, SahwSyncSettings

__all__ = ["LoggingSettings", "SahwSyncSettings"]
