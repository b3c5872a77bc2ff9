from .base import Transport
from .status import SocketStatus, SocketErrorCode, status_name, error_code_name
from .tcp import TcpTransport
from .registry import TransportDriverRegistry

__all__ = ["Transport",
           "SocketStatus",
           "SocketErrorCode",
           "status_name",
           "error_code_name",
           "TcpTransport",
           "TransportDriverRegistry"]
