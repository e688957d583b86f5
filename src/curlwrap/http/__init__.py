"""Transport abstraction and the requests-based transport."""

from .protocols import RawOutput, Transport, TransportErrorCode
from .transport import RequestsTransport, serialize_headers

__all__ = [
    "RawOutput",
    "RequestsTransport",
    "Transport",
    "TransportErrorCode",
    "serialize_headers",
]
