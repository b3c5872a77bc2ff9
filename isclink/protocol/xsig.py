# isclink/protocol/xsig.py
"""
Signal codec for the Intersystem Communications (ISC) symbol.

Digital, analog and serial signal changes are encoded into short byte frames.
Indexes are 0-based and scoped to their signal type.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, TypeVar

from isclink.core.errors import InvalidSignalIndexError
from .text import LATIN1

T = TypeVar("T")

CLEAR_OUTPUTS = b"\xFC"
SEND_STATUS = b"\xFD"
SERIAL_TERMINATOR = 0xFF


@dataclass(frozen=True)
class SignalType:
    name: str
    max_index: int          # exclusive upper bound
    frame_size: int | None  # None = variable length


SIGNAL_TYPES: Dict[str, SignalType] = {
    # 12 bits of address for digitals, 10 bits for analogs and serials
    "digital": SignalType(name="digital", max_index=4096, frame_size=2),
    "analog":  SignalType(name="analog",  max_index=1024, frame_size=4),
    "serial":  SignalType(name="serial",  max_index=1024, frame_size=None),
}


def _check_index(kind: str, index: int) -> None:
    sig = SIGNAL_TYPES[kind]
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidSignalIndexError(
            f"{kind} index must be an int, got {type(index).__name__}",
            details={"type": kind, "index": index},
        )
    if index < 0 or index >= sig.max_index:
        raise InvalidSignalIndexError(
            f"{kind} index {index} out of range [0, {sig.max_index - 1}]",
            details={"type": kind, "index": index, "max_index": sig.max_index - 1},
        )


def _address_low(index: int) -> int:
    # index 0 wraps to 0x7F; receivers expect this
    return (index - 1) & 0x7F


def clear_outputs() -> bytes:
    """Force all outputs to 0."""
    return CLEAR_OUTPUTS


def send_status() -> bytes:
    """Ask the receiver to retransmit every output not set to 0."""
    return SEND_STATUS


def encode_digital(index: int, value: bool) -> bytes:
    _check_index("digital", index)
    return bytes((
        0x80 | (0 if value else 0x20) | (index >> 7),
        _address_low(index),
    ))


def encode_analog(index: int, value: int) -> bytes:
    _check_index("analog", index)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise ValueError(f"analog value must be an int in [0, 65535], got {value!r}")
    return bytes((
        0xC0 | ((value & 0xC000) >> 10) | (index >> 7),
        _address_low(index),
        (value & 0x3F80) >> 7,
        value & 0x7F,
    ))


def encode_serial(index: int, value: str) -> bytes:
    _check_index("serial", index)
    payload = value.encode(LATIN1, errors="replace")
    return bytes((0xC8 | (index >> 7), _address_low(index))) + payload + bytes((SERIAL_TERMINATOR,))


def _encode_run(kind: str, encode: Callable[[int, T], bytes], start_index: int, values: Iterable[T]) -> bytes:
    values = list(values)
    # validate the whole run up front so nothing is produced for a bad run
    _check_index(kind, start_index)
    if values:
        _check_index(kind, start_index + len(values) - 1)
    return b"".join(encode(start_index + i, v) for i, v in enumerate(values))


def encode_digitals(start_index: int, values: Iterable[bool]) -> bytes:
    return _encode_run("digital", encode_digital, start_index, values)


def encode_analogs(start_index: int, values: Iterable[int]) -> bytes:
    return _encode_run("analog", encode_analog, start_index, values)


def encode_serials(start_index: int, values: Iterable[str]) -> bytes:
    return _encode_run("serial", encode_serial, start_index, values)


def frame_size(kind: str, value: str | None = None) -> int:
    sig = SIGNAL_TYPES.get(kind.lower())
    if sig is None:
        raise NotImplementedError(f"Unknown signal type '{kind}'")
    if sig.frame_size is not None:
        return sig.frame_size
    return len(value or "") + 3
