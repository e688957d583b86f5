"""Protocol definitions for the transport abstraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol


class TransportErrorCode(IntEnum):
    """Transport error codes, numbered like libcurl's CURLcode values."""

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    FAILED_INIT = 2
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_PROXY = 5
    COULDNT_CONNECT = 7
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    BAD_FUNCTION_ARGUMENT = 43
    TOO_MANY_REDIRECTS = 47
    RECV_ERROR = 56
    PEER_FAILED_VERIFICATION = 60


@dataclass(frozen=True)
class RawOutput:
    """
    Result of one transport call.

    Attributes:
        data: Raw bytes (header blocks followed by the body when headers are shown)
        errno: TransportErrorCode value, 0 on success
        error: Human-readable error message, empty on success
    """

    data: bytes
    errno: int = TransportErrorCode.OK
    error: str = ""


class Transport(Protocol):
    """
    Protocol for transports the client drives.

    This abstraction allows for:
    - Mock implementations in tests
    - Different backends (requests, pycurl, etc.)

    Transports report failures of ``perform()`` through ``RawOutput.errno``
    and ``RawOutput.error`` instead of raising.
    """

    def open(self) -> None:
        """Acquire the underlying session."""
        ...

    def close(self) -> None:
        """Release the underlying session. Safe to call twice."""
        ...

    def apply_option(self, key: Any, value: Any) -> None:
        """
        Apply one option to the live session.

        Args:
            key: Option key
            value: Option value; ``None`` resets the option to its default
        """
        ...

    def perform(self) -> RawOutput:
        """Execute a request against the configured URL."""
        ...

    def get_info(self) -> dict[str, Any]:
        """
        Diagnostics of the last ``perform()`` call.

        Returns:
            Mapping with at least ``header_size``, ``http_code``, ``url``,
            ``redirect_count``, ``total_time``, ``content_type`` and
            ``size_download``
        """
        ...
