# isclink/transport/status.py
from __future__ import annotations

from enum import IntEnum


class SocketStatus(IntEnum):
    """
    Native socket status codes reported by a transport.

    The numeric values are part of the status-changed event contract.
    """
    NO_CONNECT = 0
    WAITING = 1
    CONNECTED = 2
    CONNECT_FAILED = 3
    BROKEN_REMOTELY = 4
    BROKEN_LOCALLY = 5
    DNS_LOOKUP = 6
    DNS_FAILED = 7
    DNS_RESOLVED = 8
    LINK_LOST = 9
    SOCKET_NOT_EXIST = 10


class SocketErrorCode(IntEnum):
    """Result of a transport operation (connect request, send, receive request)."""
    SOCKET_OK = 0
    SOCKET_NOT_CONNECTED = 1
    SOCKET_CONNECTION_IN_PROGRESS = 2
    SOCKET_OPERATION_PENDING = 3
    SOCKET_ADDRESS_NOT_SPECIFIED = 4
    SOCKET_INVALID_PORT_NUMBER = 5
    SOCKET_NO_HOSTNAME_RESOLVE = 6
    SOCKET_INVALID_STATE = 7
    SOCKET_BUFFER_NOT_ALLOCATED = 8
    SOCKET_OUT_OF_MEMORY = 9
    SOCKET_INVALID_CLIENT_INDEX = 10
    SOCKET_MAX_CONNECTIONS_REACHED = 11
    SOCKET_SPECIFIED_PORT_ALREADY_IN_USE = 12
    SOCKET_INVALID_ADDRESS_ADAPTER_BINDING = 13
    SOCKET_NOT_ALLOWED_IN_SECURE_MODE = 14
    SOCKET_UDP_SERVER_RECEIVE_ONLY = 15


def status_name(value: int) -> str:
    """
    Human-readable status name, or "" for an unknown code.

    >>> status_name(2)
    'SOCKET_STATUS_CONNECTED'
    >>> status_name(99)
    ''
    """
    try:
        return f"SOCKET_STATUS_{SocketStatus(int(value)).name}"
    except ValueError:
        return ""


def error_code_name(value: int) -> str:
    try:
        return SocketErrorCode(int(value)).name
    except ValueError:
        return ""
