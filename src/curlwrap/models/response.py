"""Response models produced by the executor and parser."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional, Union

HeaderValue = Union[str, list[str]]

#: Key under which ``as_dict()`` stores a block's status line.
STATUS_LINE_KEY = "http_code"

COOKIE_HEADER = "set-cookie"

EMPTY_INFO: Mapping[str, Any] = MappingProxyType({})


def is_cookie_header(name: str) -> bool:
    """Check whether a header name sets a cookie (case-insensitive)."""
    return name.strip().lower() == COOKIE_HEADER


@dataclass(frozen=True)
class HeaderBlock:
    """
    Headers of one hop in a redirect chain.

    Attributes:
        status_line: Raw status line, e.g. ``HTTP/1.1 302 Found``
        headers: Header name to value; ``Set-Cookie`` maps to a list
    """

    status_line: str
    headers: dict[str, HeaderValue] = field(default_factory=dict)

    @property
    def status_code(self) -> Optional[int]:
        """Numeric status code from the status line, if it has one."""
        parts = self.status_line.split(None, 2)
        if len(parts) >= 2 and parts[1].isdigit():
            return int(parts[1])
        return None

    def get(self, name: str, default: Optional[HeaderValue] = None) -> Optional[HeaderValue]:
        """Look up a header by name, ignoring case."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    @property
    def cookies(self) -> list[str]:
        """All ``Set-Cookie`` values of this hop, in order."""
        result: list[str] = []
        for key, value in self.headers.items():
            if is_cookie_header(key):
                result.extend(value if isinstance(value, list) else [value])
        return result

    def as_dict(self) -> dict[str, HeaderValue]:
        """Flat mapping with the status line under ``STATUS_LINE_KEY``."""
        result: dict[str, HeaderValue] = {STATUS_LINE_KEY: self.status_line}
        for key, value in self.headers.items():
            result[key] = list(value) if isinstance(value, list) else value
        return result


@dataclass(frozen=True)
class RawResponse:
    """
    Unparsed transport output plus diagnostics.

    Attributes:
        data: Bytes returned by the transport (headers and body)
        errno: Transport error code, 0 on success
        error: Transport error message, empty on success
        header_size: Byte length of the header section reported by the transport
        info: Diagnostics reported by the transport
    """

    data: bytes
    errno: int = 0
    error: str = ""
    header_size: int = 0
    info: Mapping[str, Any] = field(default_factory=lambda: EMPTY_INFO)


@dataclass(frozen=True)
class ParsedResponse:
    """
    Structured result of one ``execute`` call.

    Transport failures do not raise; check ``ok`` (or ``errno``) before
    trusting the content.

    Attributes:
        headers: One HeaderBlock per hop, oldest first
        content: Response body, transcoded when charsets were given
        errno: Transport error code, 0 on success
        error: Transport error message
        info: Immutable diagnostics snapshot for this call
        charset: Charset of ``content`` when it was transcoded
    """

    headers: tuple[HeaderBlock, ...]
    content: bytes
    errno: int = 0
    error: str = ""
    info: Mapping[str, Any] = field(default_factory=lambda: EMPTY_INFO)
    charset: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.errno == 0

    @property
    def final(self) -> Optional[HeaderBlock]:
        """Header block of the last hop, if headers were captured."""
        return self.headers[-1] if self.headers else None

    @property
    def status_code(self) -> Optional[int]:
        if self.final is not None:
            return self.final.status_code
        code = self.info.get("http_code")
        return int(code) if code else None

    @property
    def text(self) -> str:
        """Body decoded with ``charset`` (UTF-8 when unknown), replacing bad bytes."""
        return self.content.decode(self.charset or "utf-8", errors="replace")

    def as_dict(self) -> dict[str, Any]:
        """Plain-dict view: ``errno``, ``error``, ``header`` and ``content``."""
        return {
            "errno": self.errno,
            "error": self.error,
            "header": [block.as_dict() for block in self.headers],
            "content": self.content,
        }
