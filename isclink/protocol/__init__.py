# protocol/__init__.py

from .xsig import (
    clear_outputs,
    send_status,
    encode_digital,
    encode_analog,
    encode_serial,
    encode_digitals,
    encode_analogs,
    encode_serials,
)
from .text import bytes_to_text, text_to_bytes, replace_hex, chunk

__all__ = [
    "clear_outputs", "send_status",
    "encode_digital", "encode_analog", "encode_serial",
    "encode_digitals", "encode_analogs", "encode_serials",
    "bytes_to_text", "text_to_bytes", "replace_hex", "chunk"]
