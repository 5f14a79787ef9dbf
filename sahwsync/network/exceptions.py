"""Network-specific exceptions."""

from typing import Optional


class NetworkError(Exception):
    """Base exception for network-related errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConnectivityProbeError(NetworkError):
    """Exception raised when the connectivity probe cannot confirm reachability."""
