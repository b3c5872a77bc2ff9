# isclink/runtime/communicator.py
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

from isclink.common.logging import DebugLevel, LevelGatedLogger, parse_debug_level
from isclink.core.errors import CommunicatorDisposedError
from isclink.protocol.text import Command
from isclink.transport.base import Transport
from isclink.transport.status import SocketErrorCode, SocketStatus, status_name
from isclink.transport.tcp import TcpTransport

from .dispatcher import ResponseDispatcher
from .events import EventSource, OrderedDispatcher
from .retry_timer import RetryTimer, TimerFactory
from .sender import CommandSender
from .state import CommunicatorStatus, ConnectionState, ConnectionStatusChange, Endpoint

TransportFactory = Callable[[str, int], Transport]

DEFAULT_RETRY_DELAY_S = 2.5

_RECEIVE_ARMED = (SocketErrorCode.SOCKET_OK, SocketErrorCode.SOCKET_OPERATION_PENDING)
_CONNECT_STARTED = (
    SocketErrorCode.SOCKET_OK,
    SocketErrorCode.SOCKET_OPERATION_PENDING,
    SocketErrorCode.SOCKET_CONNECTION_IN_PROGRESS,
)


@dataclass
class _SocketState:
    """Mutable state owned by one communicator. Guarded by its lock."""
    state: ConnectionState = ConnectionState.IDLE
    endpoint: Endpoint = Endpoint()
    connected: bool = False
    connection_requested: bool = False
    disconnect_requested: bool = False
    transport: Optional[Transport] = None
    status_code: int = int(SocketStatus.NO_CONNECT)
    disposed: bool = False
    last_error: Optional[str] = None


class TcpCommunicator:
    """
    TCP client communicator with automatic reconnect.

    Responsibilities:
      - own the endpoint, connection state and the single live transport
      - retry failed or dropped connections on a fixed delay until connected,
        disconnected or disposed
      - publish connectivity, status and response events
      - send commands while connected; drop them otherwise

    Transport callbacks and retries arrive on worker threads. All state is
    guarded by one lock; events are delivered after the lock is released, in
    the order the transitions happened.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        *,
        host: str = "",
        port: int = 0,
        transport_factory: Optional[TransportFactory] = None,
        logger: Optional[logging.Logger] = None,
        debug_level: DebugLevel = DebugLevel.DISABLED,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_S,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self._id = id or str(uuid.uuid4())
        self._log = LevelGatedLogger(self._id, logger or logging.getLogger(__name__), debug_level)
        self._transport_factory = transport_factory or TcpTransport

        self._lock = threading.RLock()
        self._s = _SocketState(endpoint=Endpoint(host or "", int(port)))

        self._events = OrderedDispatcher()
        self.connected_change: EventSource[bool] = EventSource("connected_change")
        self.connection_status_change: EventSource[ConnectionStatusChange] = EventSource("connection_status_change")
        self.response_received: EventSource[str] = EventSource("response_received")

        self._dispatcher = ResponseDispatcher(self.response_received, self._events.post)
        self._sender = CommandSender(self._log)
        self._retry = RetryTimer(retry_delay_s, self._reconnect, timer_factory=timer_factory)

    # ---------------- Properties ----------------
    @property
    def id(self) -> str:
        return self._id

    @property
    def disposed(self) -> bool:
        with self._lock:
            return self._s.disposed

    @property
    def debug_level(self) -> int:
        return int(self._log.debug_level)

    @debug_level.setter
    def debug_level(self, value: int) -> None:
        level = parse_debug_level(value)
        if level is None or level == self._log.debug_level:
            return
        self._log.debug_level = level

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._s.connected

    @property
    def connection_status(self) -> int:
        with self._lock:
            return self._s.status_code

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._s.state

    @property
    def retry_pending(self) -> bool:
        return self._retry.pending

    @property
    def host(self) -> str:
        with self._lock:
            return self._s.endpoint.host

    @host.setter
    def host(self, value: str) -> None:
        self._set_endpoint(host=value or "")

    @property
    def port(self) -> int:
        with self._lock:
            return self._s.endpoint.port

    @port.setter
    def port(self, value: int) -> None:
        self._set_endpoint(port=int(value))

    def _set_endpoint(self, **changes) -> None:
        self._throw_if_disposed()
        with self._lock:
            s = self._s
            endpoint = replace(s.endpoint, **changes)
            if endpoint == s.endpoint:
                return
            s.endpoint = endpoint
            if s.connection_requested:
                self._connect_locked(endpoint.host, endpoint.port)
        self._events.drain()

    def status(self) -> CommunicatorStatus:
        with self._lock:
            s = self._s
            return CommunicatorStatus(
                id=self._id,
                state=s.state,
                endpoint=s.endpoint,
                connected=s.connected,
                status_code=s.status_code,
                status_name=status_name(s.status_code),
                connection_requested=s.connection_requested,
                retry_pending=self._retry.pending,
                last_error=s.last_error,
            )

    # ---------------- Connect / Disconnect ----------------
    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Start connecting to host:port (defaults: the current endpoint).

        Returns immediately; watch connected_change / connection_status_change.
        """
        self._throw_if_disposed()
        with self._lock:
            self._connect_locked(host, port)
        self._events.drain()

    def _connect_locked(self, host: Optional[str], port: Optional[int]) -> None:
        s = self._s
        endpoint = Endpoint(
            s.endpoint.host if host is None else host,
            s.endpoint.port if port is None else int(port),
        )
        s.endpoint = endpoint

        if not endpoint.usable:
            self._log.error("Host is empty and/or port is 0 (%s)", endpoint)
            self._drop_session_locked()
            return

        if s.connected:
            self._log.notice("Connection closing...")
            s.connected = False
            self._events.post(self.connected_change, False)

        self._log.print_line("Connection starting %s...", endpoint)
        self._log.notice("Connection starting %s...", endpoint)
        self._retry.cancel()
        self._release_transport_locked()

        transport = self._transport_factory(endpoint.host, endpoint.port)
        transport.on_status_change = self._on_status_change
        s.transport = transport
        s.disconnect_requested = False
        s.connection_requested = True
        self._set_state_locked(ConnectionState.CONNECTING)

        rc = transport.connect_async(self._on_connect_complete)
        if rc not in _CONNECT_STARTED:
            s.last_error = rc.name
            self._log.warning("Connect request rejected: %s", rc.name)
            self._retry.arm()
            self._set_state_locked(ConnectionState.RECONNECTING)

    def disconnect(self) -> None:
        """
        Close the connection and stop retrying. A pending retry is cancelled
        even if the connection never came up.
        """
        self._throw_if_disposed()
        with self._lock:
            s = self._s
            s.connection_requested = False
            transport = s.transport
            if transport is None:
                return

            if s.connected:
                self._log.notice("Connection closing...")
                self._log.print_line("Connection closing...")
                s.disconnect_requested = True
                self._retry.cancel()
                self._set_state_locked(ConnectionState.DISCONNECTING)
                transport.close()
            elif self._retry.pending or s.state in (ConnectionState.CONNECTING, ConnectionState.RECONNECTING):
                self._log.notice("Connection attempts cancelled")
                s.disconnect_requested = True
                self._retry.cancel()
                transport.close()
                self._set_state_locked(ConnectionState.IDLE)
        self._events.drain()

    # ---------------- Commands ----------------
    def send_command(self, command: Optional[Command]) -> bool:
        """
        Send str / sequence of chars / bytes. Dropped silently when not
        connected. Returns True if the data was written.
        """
        self._throw_if_disposed()
        with self._lock:
            transport = self._s.transport if self._s.connected else None
        return self._sender.send(transport, command)

    # ---------------- Transport callbacks (worker threads) ----------------
    def _on_status_change(self, transport: Transport, status: SocketStatus) -> None:
        with self._lock:
            s = self._s
            if s.disposed or transport is not s.transport:
                return

            was_connected = s.connected
            name = status_name(status)
            s.status_code = int(status)

            if status == SocketStatus.CONNECTED:
                s.connected = True
                s.last_error = None
                self._set_state_locked(ConnectionState.CONNECTED)
                self._arm_receive_locked(transport)
            else:
                s.connected = False
                s.last_error = name
                self._wait_and_try_reconnect_locked()

            self._log.notice("SocketStatus changed %s", name)

            if s.connected != was_connected:
                self._events.post(self.connected_change, s.connected)
            self._events.post(self.connection_status_change, ConnectionStatusChange(int(status), name))
        self._events.drain()

    def _on_connect_complete(self, transport: Transport) -> None:
        with self._lock:
            s = self._s
            if s.disposed or transport is not s.transport:
                return
            if transport.status == SocketStatus.CONNECTED:
                return
            self._wait_and_try_reconnect_locked()
        self._events.drain()

    def _on_data(self, transport: Transport, data: bytes) -> None:
        with self._lock:
            s = self._s
            if s.disposed or transport is not s.transport:
                return
            try:
                self._dispatcher.dispatch(data)
            except Exception:
                self._log.exception("Failed to dispatch %d received byte(s)", len(data))
            if s.connected:
                self._arm_receive_locked(transport)
        self._events.drain()

    # ---------------- Retry ----------------
    def _wait_and_try_reconnect_locked(self) -> None:
        s = self._s
        if s.disposed:
            return

        if s.connected or s.disconnect_requested or not s.connection_requested or s.transport is None:
            if not s.connected:
                self._set_state_locked(ConnectionState.IDLE)
            return

        try:
            s.transport.close()
            self._retry.arm()
            self._set_state_locked(ConnectionState.RECONNECTING)
        except Exception:
            self._log.exception("Failed to schedule reconnect")

    def _reconnect(self) -> None:
        with self._lock:
            s = self._s
            if s.disposed or s.transport is None:
                return
            if s.connected or s.disconnect_requested:
                return

            self._log.print_line("Connection was not established, retrying...")
            self._set_state_locked(ConnectionState.CONNECTING)
            rc = s.transport.connect_async(self._on_connect_complete)
            if rc not in _CONNECT_STARTED:
                self._log.warning("Reconnect request rejected: %s", rc.name)
                self._retry.arm()
                self._set_state_locked(ConnectionState.RECONNECTING)
        self._events.drain()

    # ---------------- Helpers ----------------
    def _arm_receive_locked(self, transport: Transport) -> None:
        rc = transport.receive_async(self._on_data)
        if rc not in _RECEIVE_ARMED:
            self._log.warning("Receive not armed: %s", rc.name)

    def _drop_session_locked(self) -> None:
        s = self._s
        s.connection_requested = False
        self._retry.cancel()
        if s.transport is None:
            return
        self._release_transport_locked()
        self._set_state_locked(ConnectionState.IDLE)
        if s.connected:
            s.connected = False
            self._events.post(self.connected_change, False)
        if s.status_code != SocketStatus.NO_CONNECT:
            s.status_code = int(SocketStatus.NO_CONNECT)
            name = status_name(SocketStatus.NO_CONNECT)
            self._events.post(self.connection_status_change, ConnectionStatusChange(s.status_code, name))

    def _release_transport_locked(self) -> None:
        transport, self._s.transport = self._s.transport, None
        if transport is None:
            return
        transport.on_status_change = None
        try:
            transport.close()
        except Exception:
            self._log.exception("Failed to close previous transport")

    def _set_state_locked(self, new: ConnectionState) -> None:
        s = self._s
        if s.state is ConnectionState.DISPOSED or s.state is new:
            return
        self._log.print_line("State %s -> %s", s.state.name, new.name)
        s.state = new

    def _throw_if_disposed(self) -> None:
        with self._lock:
            if self._s.disposed:
                raise CommunicatorDisposedError(
                    f"Communicator '{self._id}' has been disposed.",
                    details={"id": self._id},
                )

    # ---------------- Lifecycle ----------------
    def dispose(self) -> None:
        """Release everything. Idempotent; later operations raise."""
        with self._lock:
            s = self._s
            if s.disposed:
                return
            s.state = ConnectionState.DISPOSED
            s.disposed = True
            s.connected = False
            s.connection_requested = False
            self._retry.close()
            self._release_transport_locked()
        self._log.notice("Disposed")

    def shutdown(self) -> None:
        self.dispose()

    def __enter__(self) -> "TcpCommunicator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        with self._lock:
            endpoint, state = self._s.endpoint, self._s.state
        return f"TcpCommunicator(id='{self._id}', endpoint='{endpoint}', state={state.name})"
