"""Request method and body specification."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union
from urllib.parse import urlencode

from ..errors import InvalidQueryError


class RequestMethod(str, Enum):
    """Request methods the client can be switched to."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"


class ProxyType(str, Enum):
    """Proxy protocols; only HTTP proxies are configured by the client."""

    HTTP = "http"
    SOCKS5 = "socks5"


QueryBody = Union[str, Mapping[str, Any]]


@dataclass(frozen=True)
class QuerySpec:
    """
    Validated request method plus encoded body.

    Attributes:
        method: Request method
        body: Form-encoded or pre-encoded body, None for bodiless requests
    """

    method: RequestMethod
    body: Optional[str] = None

    @classmethod
    def build(cls, method: str, body: Optional[QueryBody] = None) -> QuerySpec:
        """
        Validate a method/body pair.

        Unknown method names fall back to GET. POST requires a body that is
        either a pre-encoded string or a mapping of form fields; PUT accepts
        the same shapes optionally.

        Args:
            method: ``GET``, ``PUT`` or ``POST`` (case-insensitive)
            body: String body or mapping to form-encode

        Returns:
            QuerySpec

        Raises:
            InvalidQueryError: If the body has an unsupported shape
        """
        try:
            request_method = RequestMethod(method.upper())
        except (ValueError, AttributeError):
            request_method = RequestMethod.GET

        if request_method == RequestMethod.GET:
            return cls(RequestMethod.GET)

        if body is None:
            if request_method == RequestMethod.POST:
                raise InvalidQueryError("POST requires a string or mapping body")
            return cls(request_method)

        return cls(request_method, _encode_body(body))


def _encode_body(body: Any) -> str:
    if isinstance(body, str):
        return body
    if isinstance(body, Mapping):
        return urlencode(body, doseq=True)
    raise InvalidQueryError(f"Request body must be a string or mapping, not {type(body).__name__}")
