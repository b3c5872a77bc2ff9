# isclink/runtime/state.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConnectionState(Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"
    RECONNECTING = "reconnecting"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class Endpoint:
    host: str = ""
    port: int = 0

    @property
    def usable(self) -> bool:
        return bool(self.host) and 0 < self.port <= 0xFFFF

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ConnectionStatusChange:
    """
    Payload of the status-changed event: native status code + its name.
    """
    index: int
    status: str


@dataclass(frozen=True)
class CommunicatorStatus:
    """
    A snapshot of a communicator's state, safe to share across threads.
    """
    id: str
    state: ConnectionState
    endpoint: Endpoint
    connected: bool
    status_code: int
    status_name: str
    connection_requested: bool
    retry_pending: bool
    last_error: Optional[str] = None
