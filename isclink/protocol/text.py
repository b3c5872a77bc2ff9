# isclink/protocol/text.py
from __future__ import annotations

import re
from typing import Iterable, Iterator, Sequence, Union

# One byte per character: byte value == code point.
LATIN1 = "latin-1"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")

Command = Union[str, bytes, bytearray, Sequence[str]]


def bytes_to_text(data: bytes) -> str:
    """Map each byte to the character with the same code point."""
    return bytes(data).decode(LATIN1)


def text_to_bytes(text: str | Iterable[str]) -> bytes:
    """
    Inverse of bytes_to_text().

    Raises ValueError when a character does not fit in a single byte.
    """
    if not isinstance(text, str):
        text = "".join(text)
    try:
        return text.encode(LATIN1)
    except UnicodeEncodeError as e:
        raise ValueError(f"character {text[e.start]!r} at {e.start} does not fit in one byte") from None


def command_to_bytes(command: Command) -> bytes:
    if isinstance(command, (bytes, bytearray)):
        return bytes(command)
    return text_to_bytes(command)


def replace_hex(text: str) -> str:
    """
    Render control characters as a bracketed two-digit hex escape.

    >>> replace_hex("SET 1\\r\\n")
    'SET 1[0D][0A]'
    """
    return _CONTROL_CHARS.sub(lambda m: f"[{ord(m.group(0)) & 0xFF:02X}]", text)


def chunk(text: str, max_chunk_size: int) -> Iterator[str]:
    """Split text into consecutive pieces of at most max_chunk_size characters."""
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be positive")
    for i in range(0, len(text), max_chunk_size):
        yield text[i:i + max_chunk_size]
