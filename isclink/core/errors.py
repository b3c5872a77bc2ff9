# isclink/core/errors.py
from __future__ import annotations


class IscLinkError(Exception):
    """
    Base class for all expected operational errors in isclink.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, logs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Programmer errors (raised synchronously, never retried)
# ---------------------------------------------------------------------------

class InvalidSignalIndexError(IscLinkError, ValueError):
    """
    Signal index is outside the address space of its signal type.

    Examples:
      - digital index >= 4096
      - analog / serial index >= 1024
      - negative index
    """
    code = "invalid_signal_index"


class CommunicatorDisposedError(IscLinkError, RuntimeError):
    """
    A public operation was called on a communicator after dispose().
    """
    code = "communicator_disposed"


# ---------------------------------------------------------------------------
# Configuration errors (no network access yet)
# ---------------------------------------------------------------------------

class ConfigError(IscLinkError):
    """
    Communicator configuration is invalid.

    Examples:
      - config file missing or not valid YAML
      - unknown config key
      - port outside 1..65535
      - unknown transport driver
    """
    code = "config_error"
