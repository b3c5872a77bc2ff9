from __future__ import annotations

import pytest

from isclink.core.errors import InvalidSignalIndexError
from isclink.protocol.xsig import (
    clear_outputs,
    encode_analog,
    encode_analogs,
    encode_digital,
    encode_digitals,
    encode_serial,
    encode_serials,
    frame_size,
    send_status,
)


def test_control_frames():
    assert clear_outputs() == b"\xFC"
    assert send_status() == b"\xFD"


def test_digital_index_zero_wraps_low_address():
    assert encode_digital(0, True) == b"\x80\x7F"
    assert encode_digital(0, False) == b"\xA0\x7F"


def test_digital_known_frames():
    assert encode_digital(1, False) == b"\xA0\x00"
    assert encode_digital(1, True) == b"\x80\x00"
    # high address bits land in byte 0
    assert encode_digital(128, True) == b"\x81\x7F"
    assert encode_digital(4095, True) == bytes((0x80 | 31, 4094 & 0x7F))


@pytest.mark.parametrize("index", [0, 1, 127, 128, 129, 2048, 4095])
@pytest.mark.parametrize("value", [True, False])
def test_digital_layout(index, value):
    out = encode_digital(index, value)
    assert len(out) == 2
    assert out[0] & 0x80
    assert out[0] & 0x1F == index >> 7
    assert bool(out[0] & 0x20) is (not value)
    assert out[1] == (index - 1) & 0x7F


@pytest.mark.parametrize("index", [-1, 4096, 10_000])
def test_digital_out_of_range(index):
    with pytest.raises(InvalidSignalIndexError):
        encode_digital(index, True)


def test_invalid_index_is_value_error():
    with pytest.raises(ValueError):
        encode_analog(1024, 0)


def test_analog_known_frame():
    # 0xFFFF at index 1
    assert encode_analog(1, 0xFFFF) == bytes((0xC0 | 0x30, 0x00, 0x7F, 0x7F))
    assert encode_analog(0, 0) == b"\xC0\x7F\x00\x00"


@pytest.mark.parametrize("index", [0, 1, 127, 128, 1023])
@pytest.mark.parametrize("value", [0, 1, 0x7F, 0x80, 0x3FFF, 0x4000, 0xC000, 0xFFFF, 12345])
def test_analog_value_reconstructs(index, value):
    out = encode_analog(index, value)
    assert len(out) == 4
    assert out[0] & 0xC0 == 0xC0
    assert out[0] & 0x07 == index >> 7
    assert out[1] == (index - 1) & 0x7F

    high = (out[0] & 0x30) << 10
    rebuilt = high | (out[2] << 7) | out[3]
    assert rebuilt == value


@pytest.mark.parametrize("index", [-1, 1024])
def test_analog_out_of_range(index):
    with pytest.raises(InvalidSignalIndexError):
        encode_analog(index, 1)


@pytest.mark.parametrize("value", [-1, 0x10000])
def test_analog_value_out_of_range(value):
    with pytest.raises(ValueError):
        encode_analog(0, value)


def test_serial_frame_layout():
    out = encode_serial(1, "Hi")
    assert out == b"\xC8\x00Hi\xFF"


def test_serial_index_high_bits_and_length():
    out = encode_serial(1023, "hello")
    assert len(out) == len("hello") + 3
    assert out[0] == 0xC8 | 7
    assert out[1] == 1022 & 0x7F
    assert out[-1] == 0xFF


def test_serial_is_single_byte_per_character():
    text = "\x00\x02caf\xe9\x7f"
    out = encode_serial(5, text)
    assert out[2:-1] == bytes(ord(c) for c in text)
    assert len(out) == len(text) + 3


def test_serial_non_latin1_character_becomes_question_mark():
    out = encode_serial(0, "a€b")
    assert out[2:-1] == b"a?b"


@pytest.mark.parametrize("index", [-1, 1024])
def test_serial_out_of_range(index):
    with pytest.raises(InvalidSignalIndexError):
        encode_serial(index, "x")


def test_batches_equal_concatenated_singles():
    assert encode_digitals(10, [True, False, True]) == (
        encode_digital(10, True) + encode_digital(11, False) + encode_digital(12, True)
    )
    assert encode_analogs(0, [1, 2]) == encode_analog(0, 1) + encode_analog(1, 2)
    assert encode_serials(3, ["a", "bc"]) == encode_serial(3, "a") + encode_serial(4, "bc")


def test_empty_batch():
    assert encode_digitals(0, []) == b""


def test_batch_running_past_ceiling_raises():
    with pytest.raises(InvalidSignalIndexError):
        encode_digitals(4095, [True, True])
    with pytest.raises(InvalidSignalIndexError):
        encode_serials(1023, ["a", "b"])


def test_frame_size():
    assert frame_size("digital") == 2
    assert frame_size("ANALOG") == 4
    assert frame_size("serial", "abcd") == 7
    with pytest.raises(NotImplementedError):
        frame_size("nope")
