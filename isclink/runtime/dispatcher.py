from __future__ import annotations

from typing import Callable

from isclink.protocol.text import bytes_to_text
from .events import EventSource


class ResponseDispatcher:
    """
    Turns each received chunk into one response event.

    Bytes map 1:1 to characters; no buffering or framing across chunks.
    """

    def __init__(self, response_received: EventSource[str], post: Callable[[EventSource[str], str], None]):
        self.response_received = response_received
        self._post = post

    def dispatch(self, data: bytes) -> str | None:
        if not data:
            return None
        response = bytes_to_text(data)
        self._post(self.response_received, response)
        return response
