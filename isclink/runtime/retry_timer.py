# isclink/runtime/retry_timer.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def _thread_timer(delay_s: float, action: Callable[[], None]) -> TimerHandle:
    t = threading.Timer(delay_s, action)
    t.daemon = True
    t.name = "isclink-retry"
    return t


class RetryTimer:
    """
    Single-shot, re-armable deferred action with a fixed delay.

    At most one timer is outstanding: arm() replaces any pending one.
    After close() the timer can no longer be armed.
    """

    def __init__(
        self,
        delay_s: float,
        action: Callable[[], None],
        *,
        timer_factory: Optional[TimerFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.delay_s = float(delay_s)
        self._action = action
        self._factory = timer_factory or _thread_timer
        self._log = logger or logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._pending: Optional[TimerHandle] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def arm(self) -> bool:
        """(Re)start the countdown. Returns False if the timer is closed."""
        with self._lock:
            if self._closed:
                return False
            if self._pending is not None:
                self._pending.cancel()
            handle: TimerHandle

            def _fire() -> None:
                self._fire(handle)

            handle = self._factory(self.delay_s, _fire)
            self._pending = handle
        handle.start()
        return True

    def cancel(self) -> None:
        with self._lock:
            handle, self._pending = self._pending, None
        if handle is not None:
            handle.cancel()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.cancel()

    def _fire(self, handle: TimerHandle) -> None:
        with self._lock:
            # a cancelled or replaced timer may still call in
            if self._pending is not handle or self._closed:
                return
            self._pending = None
        try:
            self._action()
        except Exception:
            self._log.exception("RETRY_ACTION_FAILED")
