from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from isclink.transport.base import Transport
from isclink.transport.status import SocketErrorCode, SocketStatus


class FakeTimer:
    def __init__(self, delay_s: float, action: Callable[[], None]):
        self.delay_s = delay_s
        self.action = action
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.action()


class FakeTimerFactory:
    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, delay_s: float, action: Callable[[], None]) -> FakeTimer:
        t = FakeTimer(delay_s, action)
        self.timers.append(t)
        return t

    @property
    def outstanding(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not (t.cancelled or t.fired)]


class FakeTransport(Transport):
    """Transport stub; tests drive status and data callbacks by hand."""

    def __init__(self, host: str, port: int):
        super().__init__()
        self.host = host
        self.port = port
        self._status = SocketStatus.NO_CONNECT
        self.connect_calls = 0
        self.close_calls = 0
        self.written: List[bytes] = []
        self.raise_on_write: Optional[Exception] = None
        self.write_rc = SocketErrorCode.SOCKET_OK
        self.connect_rc = SocketErrorCode.SOCKET_OPERATION_PENDING
        self._connect_cb = None
        self._receive_cbs: list = []

    @property
    def status(self) -> SocketStatus:
        return self._status

    def connect_async(self, callback=None) -> SocketErrorCode:
        self.connect_calls += 1
        self._connect_cb = callback
        return self.connect_rc

    def receive_async(self, callback) -> SocketErrorCode:
        self._receive_cbs.append(callback)
        return SocketErrorCode.SOCKET_OPERATION_PENDING

    def write(self, data: bytes) -> SocketErrorCode:
        if self.raise_on_write is not None:
            raise self.raise_on_write
        self.written.append(bytes(data))
        return self.write_rc

    def close(self) -> None:
        self.close_calls += 1
        if self._status == SocketStatus.CONNECTED:
            self._status = SocketStatus.NO_CONNECT

    # ---- test drivers ----
    @property
    def receive_armed(self) -> int:
        return len(self._receive_cbs)

    def report(self, status: SocketStatus) -> None:
        self._status = status
        self._notify_status(status)

    def succeed(self) -> None:
        self.report(SocketStatus.CONNECTED)
        self._complete()

    def fail(self, status: SocketStatus = SocketStatus.CONNECT_FAILED) -> None:
        self.report(status)
        self._complete()

    def _complete(self) -> None:
        cb, self._connect_cb = self._connect_cb, None
        if cb is not None:
            cb(self)

    def deliver(self, data: bytes) -> None:
        cb = self._receive_cbs.pop(0)
        cb(self, data)


class FakeTransportFactory:
    def __init__(self):
        self.created: List[FakeTransport] = []

    def __call__(self, host: str, port: int) -> FakeTransport:
        t = FakeTransport(host, port)
        self.created.append(t)
        return t

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()
