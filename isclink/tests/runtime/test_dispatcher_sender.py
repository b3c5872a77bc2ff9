from __future__ import annotations

import logging

import pytest

from isclink.common.logging import DebugLevel, LevelGatedLogger
from isclink.runtime.dispatcher import ResponseDispatcher
from isclink.runtime.events import EventSource, OrderedDispatcher
from isclink.runtime.sender import CommandSender
from isclink.transport.status import SocketErrorCode, SocketStatus


# ---------------- ResponseDispatcher ----------------
def make_dispatcher():
    src: EventSource[str] = EventSource("response_received")
    got = []
    src += got.append
    events = OrderedDispatcher()
    return ResponseDispatcher(src, events.post), events, got


def test_dispatch_converts_bytes_one_to_one():
    d, events, got = make_dispatcher()

    text = d.dispatch(bytes(range(256)))
    events.drain()

    assert text == "".join(chr(i) for i in range(256))
    assert got == [text]


def test_each_chunk_is_one_event():
    d, events, got = make_dispatcher()
    d.dispatch(b"PAR")
    d.dispatch(b"TIAL\r")
    events.drain()
    assert got == ["PAR", "TIAL\r"]


def test_empty_chunk_publishes_nothing():
    d, events, got = make_dispatcher()
    assert d.dispatch(b"") is None
    events.drain()
    assert got == []


# ---------------- CommandSender ----------------
class StubTransport:
    def __init__(self, connected=True, rc=SocketErrorCode.SOCKET_OK, exc=None):
        self.status = SocketStatus.CONNECTED if connected else SocketStatus.NO_CONNECT
        self.rc = rc
        self.exc = exc
        self.written = []

    @property
    def is_connected(self):
        return self.status == SocketStatus.CONNECTED

    def write(self, data):
        if self.exc is not None:
            raise self.exc
        self.written.append(data)
        return self.rc


@pytest.fixture
def gated():
    return LevelGatedLogger("snd", logging.getLogger("isclink.test.sender"), DebugLevel.ALL_ENABLED)


def test_send_writes_bytes(gated):
    t = StubTransport()
    assert CommandSender(gated).send(t, "ON\r") is True
    assert t.written == [b"ON\r"]


def test_send_logs_control_chars_as_hex(gated, caplog):
    caplog.set_level(logging.DEBUG, logger="isclink.test.sender")
    CommandSender(gated).send(StubTransport(), "ON\r\n")
    assert "Sending command -->ON[0D][0A]<--" in caplog.text
    assert "[snd]" in caplog.text


def test_send_drops_when_not_connected(gated, caplog):
    caplog.set_level(logging.DEBUG, logger="isclink.test.sender")
    sender = CommandSender(gated)
    t = StubTransport(connected=False)

    assert sender.send(t, "ON") is False
    assert sender.send(None, "ON") is False
    assert t.written == []
    assert "Not connected, dropping 2 byte(s)" in caplog.text


def test_send_none_command(gated):
    t = StubTransport()
    assert CommandSender(gated).send(t, None) is False
    assert t.written == []


def test_send_error_code_is_reported(gated, caplog):
    caplog.set_level(logging.DEBUG, logger="isclink.test.sender")
    t = StubTransport(rc=SocketErrorCode.SOCKET_NOT_CONNECTED)
    assert CommandSender(gated).send(t, "x") is False
    assert "Send failed" in caplog.text


def test_send_exception_is_contained(gated, caplog):
    caplog.set_level(logging.DEBUG, logger="isclink.test.sender")
    t = StubTransport(exc=RuntimeError("wire cut"))
    assert CommandSender(gated).send(t, "x") is False
    assert "unexpected error" in caplog.text


def test_send_rejects_wide_characters(gated):
    with pytest.raises(ValueError):
        CommandSender(gated).send(StubTransport(), "€")
