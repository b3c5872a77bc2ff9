# isclink/app/lifecycle.py
from __future__ import annotations

import atexit
import logging
import threading
from typing import List, Optional

from isclink.interfaces.communicator import Communicator


class Lifecycle:
    """
    Explicit shutdown registry for the host process.

    The process calls shutdown() when it stops; every registered communicator
    is disposed once. Nothing is hooked implicitly: call install_atexit() to
    bind shutdown() to interpreter exit.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._members: List[Communicator] = []
        self._shut_down = False
        self._atexit_installed = False

    @property
    def shut_down(self) -> bool:
        with self._lock:
            return self._shut_down

    def register(self, communicator: Communicator) -> Communicator:
        with self._lock:
            if self._shut_down:
                raise RuntimeError("Lifecycle already shut down")
            if communicator not in self._members:
                self._members.append(communicator)
        return communicator

    def unregister(self, communicator: Communicator) -> None:
        with self._lock:
            if communicator in self._members:
                self._members.remove(communicator)

    def shutdown(self) -> None:
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            members, self._members = list(self._members), []

        for c in reversed(members):
            try:
                c.dispose()
            except Exception:
                self._log.exception("SHUTDOWN_DISPOSE_FAILED id=%s", getattr(c, "id", "?"))
        self._log.info("SHUTDOWN_COMPLETE count=%d", len(members))

    def install_atexit(self) -> None:
        with self._lock:
            if self._atexit_installed:
                return
            self._atexit_installed = True
        atexit.register(self.shutdown)
