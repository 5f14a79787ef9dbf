"""Data models for connectivity monitoring."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectionType(str, Enum):
    """Coarse connection category."""

    WIFI = "wifi"
    CELLULAR = "cellular"
    NONE = "none"
    UNKNOWN = "unknown"


class MonitorState(str, Enum):
    """Network monitor state machine."""

    ONLINE = "online"
    OFFLINE = "offline"
    VERIFYING = "verifying"


CELLULAR_TYPES = frozenset({"cellular", "4g", "3g", "2g"})
SLOW_EFFECTIVE_TYPES = frozenset({"slow-2g", "2g"})


class ConnectionInfo(BaseModel):
    """Connection details reported by the host platform, when it can."""

    model_config = ConfigDict(populate_by_name=True)

    effective_type: Optional[str] = Field(default=None, alias="effectiveType")
    type: Optional[str] = None
    downlink: Optional[float] = Field(default=None, description="Bandwidth estimate in Mbit/s")

    def connection_type(self) -> ConnectionType:
        kind = self.effective_type or self.type
        if kind == "wifi":
            return ConnectionType.WIFI
        if kind in CELLULAR_TYPES:
            return ConnectionType.CELLULAR
        if kind == "none":
            return ConnectionType.NONE
        return ConnectionType.UNKNOWN

    def is_slow(self) -> bool:
        if self.effective_type in SLOW_EFFECTIVE_TYPES:
            return True
        return self.downlink is not None and 0 < self.downlink < 1


class NetworkStatus(BaseModel):
    """Current connectivity as seen by the monitor."""

    is_online: bool = True
    connection_type: ConnectionType = ConnectionType.UNKNOWN
    is_slow_connection: bool = False

    def persisted_flag(self) -> str:
        """Coarse flag stored by the cache manager."""
        return "online" if self.is_online else "offline"
