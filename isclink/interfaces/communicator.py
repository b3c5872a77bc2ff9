from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from isclink.protocol.text import Command
from isclink.runtime.events import EventSource
from isclink.runtime.state import ConnectionStatusChange


@runtime_checkable
class Communicator(Protocol):
    @property
    def id(self) -> str: ...
    @property
    def disposed(self) -> bool: ...
    @property
    def debug_level(self) -> int: ...
    @debug_level.setter
    def debug_level(self, value: int) -> None: ...
    def dispose(self) -> None: ...


@runtime_checkable
class SocketCommunicator(Communicator, Protocol):
    connected_change: EventSource[bool]
    connection_status_change: EventSource[ConnectionStatusChange]
    response_received: EventSource[str]

    @property
    def is_connected(self) -> bool: ...
    @property
    def connection_status(self) -> int: ...
    @property
    def host(self) -> str: ...
    @property
    def port(self) -> int: ...

    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> None: ...
    def disconnect(self) -> None: ...
    def send_command(self, command: Optional[Command]) -> None: ...
