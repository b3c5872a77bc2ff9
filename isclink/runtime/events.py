# isclink/runtime/events.py
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")
Handler = Callable[[T], None]


class EventSource(Generic[T]):
    """
    Observer list for one event kind.

    Handlers are called in registration order. A failing handler is logged
    and does not stop the others.
    """

    def __init__(self, name: str, *, logger: Optional[logging.Logger] = None):
        self.name = name
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._handlers: List[Handler[T]] = []

    def __iadd__(self, handler: Handler[T]) -> "EventSource[T]":
        return self.add(handler)

    def __isub__(self, handler: Handler[T]) -> "EventSource[T]":
        return self.remove(handler)

    def add(self, handler: Handler[T]) -> "EventSource[T]":
        with self._lock:
            self._handlers.append(handler)
        return self

    def remove(self, handler: Handler[T]) -> "EventSource[T]":
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def handlers(self) -> Tuple[Handler[T], ...]:
        with self._lock:
            return tuple(self._handlers)

    def fire(self, arg: T) -> None:
        for handler in self.handlers():
            try:
                handler(arg)
            except Exception:
                self._log.exception("EVENT_HANDLER_ERROR event=%s", self.name)


class OrderedDispatcher:
    """
    FIFO delivery of notifications queued while a state lock is held.

    Producers call post() under their lock and drain() after releasing it.
    Only one thread delivers at a time; a drain() from inside a handler, or
    while another thread is delivering, returns at once and the active
    deliverer picks the notification up. Delivery order == post order.
    """

    def __init__(self) -> None:
        self._queue: Deque[Tuple[EventSource[Any], Any]] = deque()
        self._deliver_lock = threading.Lock()

    def post(self, source: EventSource[T], arg: T) -> None:
        self._queue.append((source, arg))

    def drain(self) -> None:
        while True:
            if not self._deliver_lock.acquire(blocking=False):
                return
            try:
                while True:
                    try:
                        source, arg = self._queue.popleft()
                    except IndexError:
                        break
                    source.fire(arg)
            finally:
                self._deliver_lock.release()
            # a post() may have landed between the last pop and the release
            if not self._queue:
                return
