"""Connectivity monitoring package."""

from .exceptions import ConnectivityProbeError, NetworkError
from .models import ConnectionInfo, ConnectionType, MonitorState, NetworkStatus
from .monitor import NetworkMonitor
from .probe import ConnectivityProbe

__all__ = [
    "ConnectionInfo",
    "ConnectionType",
    "ConnectivityProbe",
    "ConnectivityProbeError",
    "MonitorState",
    "NetworkError",
    "NetworkMonitor",
    "NetworkStatus",
]
