from __future__ import annotations

from typing import Optional

from isclink.common.logging import LevelGatedLogger
from isclink.protocol.text import Command, bytes_to_text, command_to_bytes, replace_hex
from isclink.transport.base import Transport
from isclink.transport.status import SocketErrorCode, error_code_name


class CommandSender:
    """Writes commands through a connected transport."""

    def __init__(self, log: LevelGatedLogger):
        self._log = log

    def send(self, transport: Optional[Transport], command: Optional[Command]) -> bool:
        """
        Send command if transport is connected. Returns True if written.

        Text is converted 1:1 to bytes. Not connected -> dropped, nothing
        queued. Transport failures are logged, never raised.
        """
        if command is None:
            return False

        data = command_to_bytes(command)

        try:
            if transport is None or not transport.is_connected:
                self._log.print_line("Not connected, dropping %d byte(s)", len(data))
                return False

            self._log.print_line("Sending command -->%s<--", replace_hex(bytes_to_text(data)))
            rc = transport.write(data)
            if rc != SocketErrorCode.SOCKET_OK:
                self._log.warning("Send failed: %s", error_code_name(rc) or rc)
                return False
            return True
        except Exception:
            self._log.exception("Send failed with unexpected error")
            return False
