from __future__ import annotations

from isclink.transport.status import SocketErrorCode, SocketStatus, error_code_name, status_name


def test_native_status_codes():
    assert SocketStatus.NO_CONNECT == 0
    assert SocketStatus.CONNECTED == 2
    assert SocketStatus.CONNECT_FAILED == 3
    assert SocketStatus.BROKEN_LOCALLY == 5
    assert SocketStatus.DNS_FAILED == 7
    assert SocketStatus.LINK_LOST == 9
    assert SocketStatus.SOCKET_NOT_EXIST == 10


def test_status_names():
    assert status_name(SocketStatus.CONNECTED) == "SOCKET_STATUS_CONNECTED"
    assert status_name(3) == "SOCKET_STATUS_CONNECT_FAILED"
    assert status_name(SocketStatus.BROKEN_REMOTELY) == "SOCKET_STATUS_BROKEN_REMOTELY"
    assert status_name(SocketStatus.DNS_FAILED) == "SOCKET_STATUS_DNS_FAILED"


def test_every_status_has_a_name():
    for s in SocketStatus:
        assert status_name(s).startswith("SOCKET_STATUS_")


def test_unknown_codes_have_empty_name():
    assert status_name(99) == ""
    assert error_code_name(-5) == ""


def test_error_code_names():
    assert error_code_name(SocketErrorCode.SOCKET_OK) == "SOCKET_OK"
    assert error_code_name(SocketErrorCode.SOCKET_NOT_CONNECTED) == "SOCKET_NOT_CONNECTED"
