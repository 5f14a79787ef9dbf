"""Refresh-specific exceptions."""


class RefreshError(Exception):
    """Base exception for refresh and availability errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FeatureUnavailableError(RefreshError):
    """Exception raised when a feature can run neither online nor from cache."""
