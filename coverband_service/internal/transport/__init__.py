from .base import ErrorType
from .base import HTTPTransport
from .base import Response
from .base import Transport
from .base import TransportResult
from .persistent import ConnectionState
from .persistent import PersistentHTTPTransport


__all__ = [
    "ConnectionState",
    "ErrorType",
    "HTTPTransport",
    "PersistentHTTPTransport",
    "Response",
    "Transport",
    "TransportResult",
]
