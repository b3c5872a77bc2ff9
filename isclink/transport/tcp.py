# isclink/transport/tcp.py
from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Optional

from .base import ConnectCallback, ReceiveCallback, Transport
from .errors import TransportIOError, TransportOpenError
from .status import SocketErrorCode, SocketStatus

SocketFactory = Callable[[str, int, float], socket.socket]


def _default_socket_factory(host: str, port: int, timeout: float) -> socket.socket:
    return socket.create_connection((host, port), timeout=timeout)


class _RxWorker(threading.Thread):
    """
    Reads one chunk from the socket each time a receive is armed.

    Exits when the socket reports EOF or an error, or when stopped.
    """

    def __init__(self, transport: "TcpTransport", sock: socket.socket, generation: int):
        super().__init__(daemon=True, name=f"isclink-rx-{transport.host}:{transport.port}")
        self.transport = transport
        self.sock = sock
        self.generation = generation
        self._cond = threading.Condition()
        self._callback: Optional[ReceiveCallback] = None
        self._stop_event = threading.Event()

    @property
    def armed(self) -> bool:
        with self._cond:
            return self._callback is not None

    def arm(self, callback: ReceiveCallback) -> None:
        with self._cond:
            self._callback = callback
            self._cond.notify()

    def run(self) -> None:
        t = self.transport
        while not self._stop_event.is_set():
            with self._cond:
                while self._callback is None and not self._stop_event.is_set():
                    self._cond.wait(0.1)
                if self._stop_event.is_set():
                    return

            try:
                data = self.sock.recv(t.buffer_size)
            except OSError as e:
                if not self._stop_event.is_set():
                    t._log.debug("RX_SOCKET_ERROR %s:%s err=%s", t.host, t.port, e)
                    t._link_down(self.generation, SocketStatus.LINK_LOST)
                return

            if not data:
                if not self._stop_event.is_set():
                    t._link_down(self.generation, SocketStatus.BROKEN_REMOTELY)
                return

            with self._cond:
                cb, self._callback = self._callback, None
            try:
                cb(t, data)
            except Exception:
                t._log.exception("RX_CALLBACK_ERROR len=%d", len(data))

    def stop(self) -> None:
        self._stop_event.set()
        with self._cond:
            self._cond.notify()


class TcpTransport(Transport):
    """
    TCP client transport built on blocking sockets and worker threads.

    Status changes and received data are delivered on threads owned by this
    transport, never on the caller's thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        buffer_size: int = 65535,
        connect_timeout_s: float = 5.0,
        socket_factory: Optional[SocketFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger=logger)
        self.host = host
        self.port = int(port)
        self.buffer_size = int(buffer_size)
        self.connect_timeout_s = float(connect_timeout_s)
        self._socket_factory = socket_factory or _default_socket_factory

        self._lock = threading.Lock()
        self._sock: Optional[socket.socket] = None
        self._rx: Optional[_RxWorker] = None
        self._status = SocketStatus.NO_CONNECT
        self._connecting = False
        # bumped on close(); workers from an older generation are ignored
        self._generation = 0

    @property
    def status(self) -> SocketStatus:
        with self._lock:
            return self._status

    # ---------------- connect ----------------
    def connect_async(self, callback: Optional[ConnectCallback] = None) -> SocketErrorCode:
        if not self.host:
            return SocketErrorCode.SOCKET_ADDRESS_NOT_SPECIFIED
        if not 0 < self.port <= 0xFFFF:
            return SocketErrorCode.SOCKET_INVALID_PORT_NUMBER

        with self._lock:
            if self._sock is not None:
                return SocketErrorCode.SOCKET_OK
            if self._connecting:
                return SocketErrorCode.SOCKET_CONNECTION_IN_PROGRESS
            self._connecting = True
            generation = self._generation

        threading.Thread(
            target=self._connect_worker,
            args=(generation, callback),
            daemon=True,
            name=f"isclink-connect-{self.host}:{self.port}",
        ).start()
        return SocketErrorCode.SOCKET_OPERATION_PENDING

    def _open_socket(self) -> socket.socket:
        try:
            sock = self._socket_factory(self.host, self.port, self.connect_timeout_s)
        except socket.gaierror as e:
            raise TransportOpenError(f"could not resolve {self.host!r}: {e}") from e
        except OSError as e:
            raise TransportOpenError(f"could not connect to {self.host}:{self.port}: {e}") from e
        sock.settimeout(None)
        return sock

    def _connect_worker(self, generation: int, callback: Optional[ConnectCallback]) -> None:
        sock: Optional[socket.socket] = None
        try:
            sock = self._open_socket()
            status = SocketStatus.CONNECTED
        except TransportOpenError as e:
            dns = isinstance(e.__cause__, socket.gaierror)
            status = SocketStatus.DNS_FAILED if dns else SocketStatus.CONNECT_FAILED
            self._log.debug("CONNECT_FAILED %s:%s err=%s", self.host, self.port, e)

        with self._lock:
            self._connecting = False
            stale = generation != self._generation
            if not stale:
                self._status = status
                if sock is not None:
                    self._sock = sock
                    self._rx = _RxWorker(self, sock, generation)
                    self._rx.start()

        if stale:
            # closed while the attempt was in flight
            if sock is not None:
                self._close_socket(sock)
            return

        self._notify_status(status)
        if callback is not None:
            try:
                callback(self)
            except Exception:
                self._log.exception("CONNECT_CALLBACK_ERROR")

    # ---------------- receive ----------------
    def receive_async(self, callback: ReceiveCallback) -> SocketErrorCode:
        with self._lock:
            rx = self._rx
        if rx is None:
            return SocketErrorCode.SOCKET_NOT_CONNECTED
        if rx.armed:
            return SocketErrorCode.SOCKET_OPERATION_PENDING
        rx.arm(callback)
        return SocketErrorCode.SOCKET_OPERATION_PENDING

    # ---------------- send ----------------
    def write(self, data: bytes) -> SocketErrorCode:
        with self._lock:
            sock = self._sock
            generation = self._generation
        if sock is None:
            return SocketErrorCode.SOCKET_NOT_CONNECTED

        try:
            sock.sendall(data)
        except OSError as e:
            self._link_down(generation, SocketStatus.LINK_LOST, from_caller=True)
            raise TransportIOError(f"TCP write failed: {e}") from None
        return SocketErrorCode.SOCKET_OK

    # ---------------- close ----------------
    def close(self) -> None:
        with self._lock:
            self._generation += 1
            self._connecting = False
            sock, self._sock = self._sock, None
            rx, self._rx = self._rx, None
            was_connected = self._status == SocketStatus.CONNECTED
            if was_connected:
                self._status = SocketStatus.NO_CONNECT

        if rx is not None:
            rx.stop()
        if sock is not None:
            self._close_socket(sock)

        if was_connected:
            self._log.info("TCP_CLOSED %s:%s", self.host, self.port)
            self._notify_status_later(SocketStatus.NO_CONNECT)

    def _link_down(self, generation: int, status: SocketStatus, *, from_caller: bool = False) -> None:
        with self._lock:
            if generation != self._generation or self._sock is None:
                return
            self._generation += 1
            sock, self._sock = self._sock, None
            rx, self._rx = self._rx, None
            self._status = status

        if rx is not None:
            rx.stop()
        self._close_socket(sock)
        self._log.info("TCP_LINK_DOWN %s:%s status=%s", self.host, self.port, status.name)
        if from_caller:
            self._notify_status_later(status)
        else:
            self._notify_status(status)

    def _notify_status_later(self, status: SocketStatus) -> None:
        # status callbacks always run on a transport-owned thread
        threading.Thread(
            target=self._notify_status,
            args=(status,),
            daemon=True,
            name=f"isclink-status-{self.host}:{self.port}",
        ).start()

    @staticmethod
    def _close_socket(sock: socket.socket) -> None:
        try:
            # wakes a recv() blocked in the RX worker
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            sock.close()
        except OSError:
            pass
