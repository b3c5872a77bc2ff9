from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .status import SocketErrorCode, SocketStatus

StatusCallback = Callable[["Transport", SocketStatus], None]
ConnectCallback = Callable[["Transport"], None]
ReceiveCallback = Callable[["Transport", bytes], None]


class Transport(ABC):
    """
    Abstract asynchronous point-to-point transport (TCP, etc.).

    Contract:
      - connect_async(cb) starts opening the connection and returns immediately.
        cb(transport) runs on a transport-owned thread once the attempt ends;
        inspect `status` to see whether it succeeded.
      - receive_async(cb) arms a single receive. cb(transport, data) runs on a
        transport-owned thread with one chunk of data. Re-arm to keep reading.
      - write(data) sends data and returns a SocketErrorCode.
      - close() tears the connection down. Safe to call when not connected.
      - on_status_change(transport, status) is invoked on a transport-owned
        thread whenever the socket status changes.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self.on_status_change: Optional[StatusCallback] = None

    @property
    @abstractmethod
    def status(self) -> SocketStatus: ...

    @property
    def is_connected(self) -> bool:
        return self.status == SocketStatus.CONNECTED

    @abstractmethod
    def connect_async(self, callback: Optional[ConnectCallback] = None) -> SocketErrorCode: ...

    @abstractmethod
    def receive_async(self, callback: ReceiveCallback) -> SocketErrorCode: ...

    @abstractmethod
    def write(self, data: bytes) -> SocketErrorCode: ...

    @abstractmethod
    def close(self) -> None: ...

    def _notify_status(self, status: SocketStatus) -> None:
        cb = self.on_status_change
        if cb is None:
            return
        try:
            cb(self, status)
        except Exception:
            self._log.exception("STATUS_CALLBACK_ERROR status=%s", status.name)

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
