"""Shared fixtures for curlwrap tests."""

from typing import Any, Optional

import pytest

from curlwrap.errors import ConfigurationError
from curlwrap.http import RawOutput
from curlwrap.options import Option

REDIRECT_HEADERS = (
    b"HTTP/1.1 302 Found\r\n"
    b"Location: /page/2\r\n"
    b"Set-Cookie: a=1\r\n"
    b"Set-Cookie: b=2\r\n"
    b"\r\n"
)
FINAL_HEADERS = b"HTTP/1.1 200 OK\r\nContent-Type: text/html; charset=utf-8\r\nSet-Cookie: c=3\r\n\r\n"
BODY = b"<html><body>ok</body></html>"


class FakeTransport:
    """In-memory transport returning canned output."""

    def __init__(
        self,
        data: bytes = b"",
        header_size: int = 0,
        errno: int = 0,
        error: str = "",
        info: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize fake transport.

        Args:
            data: Bytes returned by perform()
            header_size: Header section length reported by get_info()
            errno: Error code returned by perform()
            error: Error message returned by perform()
            info: Extra diagnostics merged into get_info()
        """
        self.data = data
        self.header_size = header_size
        self.errno = errno
        self.error = error
        self.extra_info = info or {}
        self.options: dict[Any, Any] = {}
        self.reject: set[Any] = set()
        self.performed: list[str] = []
        self.open_calls = 0
        self.close_calls = 0
        self._performed_once = False

    def open(self) -> None:
        self.open_calls += 1

    def close(self) -> None:
        self.close_calls += 1

    def apply_option(self, key: Any, value: Any) -> None:
        if key in self.reject:
            raise ConfigurationError(f"Rejected option {key}")
        if value is None:
            self.options.pop(key, None)
        else:
            self.options[key] = value

    def perform(self) -> RawOutput:
        self.performed.append(self.options.get(Option.URL))
        self._performed_once = True
        return RawOutput(self.data, self.errno, self.error)

    def get_info(self) -> dict[str, Any]:
        if not self._performed_once:
            return {}
        return {
            "url": self.options.get(Option.URL),
            "http_code": 0 if self.errno else 200,
            "header_size": self.header_size,
            **self.extra_info,
        }


class StaticDirectory:
    """Proxy directory returning a fixed candidate list."""

    def __init__(self, candidates):
        self.candidates = list(candidates)
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return list(self.candidates)


@pytest.fixture
def redirect_output() -> tuple[bytes, int]:
    """Raw output of a 302 -> 200 exchange and its header section length."""
    headers = REDIRECT_HEADERS + FINAL_HEADERS
    return headers + BODY, len(headers)


@pytest.fixture
def transport(redirect_output) -> FakeTransport:
    data, header_size = redirect_output
    return FakeTransport(data=data, header_size=header_size)
