"""
Debug-level gated logging sink used by communicators.

- DebugLevel: 0=DISABLED, 1=LOGGING_ENABLED, 2=DEBUG_ENABLED, 3=ALL_ENABLED.
- LevelGatedLogger: print/notice/warning/error/exception calls forwarded to a
  stdlib logger when the current debug level enables their category.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, Optional


class DebugLevel(IntEnum):
    DISABLED = 0
    LOGGING_ENABLED = 1   # notices, warnings, errors, exceptions
    DEBUG_ENABLED = 2     # console-style debug prints
    ALL_ENABLED = 3

    @property
    def logging_enabled(self) -> bool:
        return self in (DebugLevel.LOGGING_ENABLED, DebugLevel.ALL_ENABLED)

    @property
    def debug_enabled(self) -> bool:
        return self in (DebugLevel.DEBUG_ENABLED, DebugLevel.ALL_ENABLED)


def parse_debug_level(value: Any) -> Optional[DebugLevel]:
    """Return the DebugLevel for value, or None if it is not 0..3."""
    if isinstance(value, bool):
        return None
    try:
        return DebugLevel(int(value))
    except (TypeError, ValueError):
        return None


class LevelGatedLogger:
    """
    Wraps a stdlib logger; every message is prefixed with the owner id.

    print_line -> DEBUG   (DEBUG_ENABLED, ALL_ENABLED)
    notice     -> INFO    (LOGGING_ENABLED, ALL_ENABLED)
    warning    -> WARNING (LOGGING_ENABLED, ALL_ENABLED)
    error      -> ERROR   (LOGGING_ENABLED, ALL_ENABLED)
    exception  -> ERROR + traceback (LOGGING_ENABLED, ALL_ENABLED)
    """

    def __init__(
        self,
        owner_id: str,
        logger: Optional[logging.Logger] = None,
        debug_level: DebugLevel = DebugLevel.DISABLED,
    ) -> None:
        self.owner_id = owner_id
        self.logger = logger or logging.getLogger("isclink")
        self._level = DebugLevel(debug_level)

    @property
    def debug_level(self) -> DebugLevel:
        return self._level

    @debug_level.setter
    def debug_level(self, value: DebugLevel) -> None:
        self._level = DebugLevel(value)

    def _emit(self, level: int, msg: str, args: tuple, **kwargs: Any) -> None:
        self.logger.log(level, "[%s] " + msg, self.owner_id, *args, **kwargs)

    def print_line(self, msg: str, *args: Any) -> None:
        if self._level.debug_enabled:
            self._emit(logging.DEBUG, msg, args)

    def notice(self, msg: str, *args: Any) -> None:
        if self._level.logging_enabled:
            self._emit(logging.INFO, msg, args)

    def warning(self, msg: str, *args: Any) -> None:
        if self._level.logging_enabled:
            self._emit(logging.WARNING, msg, args)

    def error(self, msg: str, *args: Any) -> None:
        if self._level.logging_enabled:
            self._emit(logging.ERROR, msg, args)

    def exception(self, msg: str, *args: Any) -> None:
        """Log with the active exception's traceback. Call from an except block."""
        if self._level.logging_enabled:
            self._emit(logging.ERROR, msg, args, exc_info=True)
