"""Transport adapter that drives a requests.Session with curl-style options."""

from __future__ import annotations

import logging
import os
import time
from http.cookiejar import Cookie, LoadError, MozillaCookieJar
from types import TracebackType
from typing import Any, Callable, Optional, Union

import requests

from ..errors import ConfigurationError, TransportClosedError
from ..options import Option
from .protocols import RawOutput, TransportErrorCode

logger = logging.getLogger(__name__)

HEADER_ENCODING = "iso-8859-1"

_HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}

_ERROR_CODES: tuple[tuple[Any, TransportErrorCode], ...] = (
    (requests.exceptions.ProxyError, TransportErrorCode.COULDNT_RESOLVE_PROXY),
    (requests.exceptions.SSLError, TransportErrorCode.PEER_FAILED_VERIFICATION),
    (requests.exceptions.Timeout, TransportErrorCode.OPERATION_TIMEDOUT),
    (requests.exceptions.TooManyRedirects, TransportErrorCode.TOO_MANY_REDIRECTS),
    (requests.exceptions.InvalidSchema, TransportErrorCode.UNSUPPORTED_PROTOCOL),
    ((requests.exceptions.MissingSchema, requests.exceptions.InvalidURL), TransportErrorCode.URL_MALFORMAT),
    (requests.exceptions.ConnectionError, TransportErrorCode.COULDNT_CONNECT),
)


def error_code_for(exc: requests.RequestException) -> TransportErrorCode:
    """Map a requests exception to a transport error code."""
    for exc_types, code in _ERROR_CODES:
        if isinstance(exc, exc_types):
            return code
    return TransportErrorCode.RECV_ERROR


def status_line(response: requests.Response) -> str:
    """Rebuild the status line of a response, e.g. ``HTTP/1.1 302 Found``."""
    version = getattr(response.raw, "version", None)
    protocol = _HTTP_VERSIONS.get(version, "HTTP/1.1") if isinstance(version, int) else "HTTP/1.1"
    return f"{protocol} {response.status_code} {response.reason or ''}".rstrip()


def header_items(response: requests.Response) -> list[tuple[str, str]]:
    """
    Header lines of a response in received order.

    Uses the urllib3 header container when available because it keeps
    repeated headers such as ``Set-Cookie`` apart; requests' own mapping
    folds them into one comma-joined value.
    """
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "iteritems"):
        return list(raw_headers.iteritems())
    return list(response.headers.items())


def _header_value(value: Any) -> Union[str, bytes]:
    value = str(value)
    if value.isascii():
        return value
    return value.encode("utf-8")


def serialize_headers(responses: list[requests.Response]) -> bytes:
    """
    Serialize the header blocks of every hop the way curl emits them.

    Each block is a status line and header lines joined by CRLF and
    terminated by a blank line.
    """
    blocks = []
    for response in responses:
        lines = [status_line(response)]
        lines.extend(f"{name}: {value}" for name, value in header_items(response))
        blocks.append("\r\n".join(lines) + "\r\n\r\n")
    return "".join(blocks).encode(HEADER_ENCODING, errors="replace")


class RequestsTransport:
    """
    Transport backed by ``requests``.

    Options are kept in a plain dict and turned into ``Session.request``
    arguments on every ``perform()``. Output mimics curl: with
    ``SHOW_HEADERS`` enabled the returned bytes start with one header block
    per hop, and ``get_info()["header_size"]`` gives their total length.

    Example:
        with RequestsTransport() as transport:
            transport.apply_option(Option.URL, "https://example.com/")
            transport.apply_option(Option.SHOW_HEADERS, True)
            output = transport.perform()
            info = transport.get_info()
    """

    DEFAULT_MAX_REDIRECTS = requests.models.DEFAULT_REDIRECT_LIMIT

    SUPPORTED_OPTIONS = frozenset(option.value for option in Option)

    def __init__(self, session_factory: Callable[[], requests.Session] = requests.Session):
        """
        Initialize the transport.

        Args:
            session_factory: Callable creating the session on ``open()``
        """
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None
        self._options: dict[str, Any] = {}
        self._info: dict[str, Any] = {}
        self._file_cookies: list[Cookie] = []

    def __enter__(self) -> RequestsTransport:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def open(self) -> None:
        if self._session is None:
            self._session = self._session_factory()
            logger.debug("Transport session opened")

    def close(self) -> None:
        """Write the cookie jar if one is configured, then close the session."""
        if self._session is None:
            return
        session = self._session
        try:
            self._save_cookie_jar(session)
        finally:
            session.close()
            self._session = None
            self._file_cookies = []
            logger.debug("Transport session closed")

    def apply_option(self, key: Any, value: Any) -> None:
        """
        Apply one option; ``None`` resets it to the default.

        Raises:
            TransportClosedError: If the session is not open
            ConfigurationError: For unknown options or an unreadable cookie file
        """
        if self._session is None:
            raise TransportClosedError("Transport session is closed")

        name = key.value if isinstance(key, Option) else str(key)
        if name not in self.SUPPORTED_OPTIONS:
            raise ConfigurationError(f"Unsupported transport option: {name}")

        if name == Option.COOKIE_FILE.value:
            self._swap_cookie_file(self._session, value)

        if value is None:
            self._options.pop(name, None)
            return
        self._options[name] = value

    def get_option(self, key: Any) -> Any:
        """Return the value currently applied to the session, or None."""
        name = key.value if isinstance(key, Option) else str(key)
        return self._options.get(name)

    def perform(self) -> RawOutput:
        """
        Execute the configured request.

        Returns:
            RawOutput; network failures are reported through ``errno`` and
            ``error`` with empty data
        """
        if self._session is None:
            raise TransportClosedError("Transport session is closed")

        url = self._options.get(Option.URL.value)
        if not url:
            self._info = self._build_info(url="", elapsed=0.0)
            return RawOutput(b"", TransportErrorCode.URL_MALFORMAT, "No URL set")

        method = self._options.get(Option.REQUEST_METHOD.value, "GET")
        self._session.max_redirects = self._options.get(Option.MAX_REDIRECTS.value, self.DEFAULT_MAX_REDIRECTS)

        start = time.monotonic()
        try:
            response = self._session.request(method, url, **self._request_kwargs())
            body = response.content
        except (requests.RequestException, UnicodeError) as e:
            if isinstance(e, UnicodeError):
                code = TransportErrorCode.BAD_FUNCTION_ARGUMENT
            else:
                code = error_code_for(e)
            logger.warning(f"Transport error {int(code)} ({code.name}) for {url}: {e}")
            self._info = self._build_info(url=url, elapsed=time.monotonic() - start)
            return RawOutput(b"", int(code), str(e))
        elapsed = time.monotonic() - start

        if self._options.get(Option.SHOW_HEADERS.value) is True:
            header_section = serialize_headers([*response.history, response])
        else:
            header_section = b""

        self._info = self._build_info(
            url=response.url,
            elapsed=elapsed,
            http_code=response.status_code,
            header_size=len(header_section),
            redirect_count=len(response.history),
            content_type=response.headers.get("Content-Type"),
            size_download=len(body),
        )
        logger.debug(f"{method} {url} -> {response.status_code} in {elapsed:.3f}s")
        return RawOutput(header_section + body)

    def get_info(self) -> dict[str, Any]:
        return dict(self._info)

    def _request_kwargs(self) -> dict[str, Any]:
        opts = self._options
        kwargs: dict[str, Any] = {
            "headers": self._build_headers(),
            "allow_redirects": bool(opts.get(Option.FOLLOW_REDIRECTS.value, False)),
            "verify": opts.get(Option.SSL_VERIFY_PEER.value, True) is not False
            and opts.get(Option.SSL_VERIFY_HOST.value, True) is not False,
        }

        body = opts.get(Option.POST_FIELDS.value)
        if body is not None and opts.get(Option.REQUEST_METHOD.value, "GET") != "GET":
            kwargs["data"] = body

        proxy = opts.get(Option.PROXY.value)
        if proxy:
            proxy_url = str(proxy)
            if "://" not in proxy_url:
                proxy_type = opts.get(Option.PROXY_TYPE.value, "http")
                proxy_type = getattr(proxy_type, "value", proxy_type)
                proxy_url = f"{proxy_type}://{proxy_url}"
            kwargs["proxies"] = {"http": proxy_url, "https": proxy_url}

        connect_timeout = opts.get(Option.CONNECT_TIMEOUT.value)
        timeout = opts.get(Option.TIMEOUT.value)
        if connect_timeout is not None:
            kwargs["timeout"] = (connect_timeout, timeout)
        elif timeout is not None:
            kwargs["timeout"] = timeout

        return kwargs

    def _build_headers(self) -> dict[str, Union[str, bytes]]:
        """
        Build request headers; custom header lines win over single-purpose options.

        Non-ASCII values are sent as UTF-8 bytes, the way curl passes them
        through, since http.client would otherwise try to encode them as
        Latin-1.
        """
        headers: dict[str, Union[str, bytes]] = {}
        opts = self._options

        if opts.get(Option.REFERER.value):
            headers["Referer"] = opts[Option.REFERER.value]
        if opts.get(Option.USER_AGENT.value):
            headers["User-Agent"] = opts[Option.USER_AGENT.value]
        if opts.get(Option.COOKIE.value):
            headers["Cookie"] = opts[Option.COOKIE.value]

        for line in opts.get(Option.HTTP_HEADERS.value) or []:
            name, sep, value = str(line).partition(":")
            if not sep:
                logger.warning(f"Ignoring custom header line without a colon: {line!r}")
                continue
            headers[name.strip()] = value.strip()

        return {name: _header_value(value) for name, value in headers.items()}

    def _build_info(
        self,
        url: str,
        elapsed: float,
        http_code: int = 0,
        header_size: int = 0,
        redirect_count: int = 0,
        content_type: Optional[str] = None,
        size_download: int = 0,
    ) -> dict[str, Any]:
        return {
            "url": url,
            "http_code": http_code,
            "header_size": header_size,
            "redirect_count": redirect_count,
            "total_time": elapsed,
            "content_type": content_type,
            "size_download": size_download,
        }

    def _swap_cookie_file(self, session: requests.Session, path: Any) -> None:
        """
        Replace the cookies merged from the current cookie file.

        The new file is read before anything is removed, so a failed load
        leaves the session untouched.
        """
        loaded = [] if path is None else self._read_cookie_file(path)
        for cookie in self._file_cookies:
            try:
                session.cookies.clear(cookie.domain, cookie.path, cookie.name)
            except KeyError:
                pass
        for cookie in loaded:
            session.cookies.set_cookie(cookie)
        self._file_cookies = loaded

    def _read_cookie_file(self, path: Any) -> list[Cookie]:
        path = os.fspath(path)
        if not os.path.exists(path):
            logger.debug(f"Cookie file {path} does not exist yet")
            return []
        jar = MozillaCookieJar()
        try:
            jar.load(path, ignore_discard=True, ignore_expires=True)
        except (LoadError, OSError) as e:
            raise ConfigurationError(f"Cannot read cookie file {path}: {e}") from e
        logger.debug(f"Loaded {len(jar)} cookie(s) from {path}")
        return list(jar)

    def _save_cookie_jar(self, session: requests.Session) -> None:
        path = self._options.get(Option.COOKIE_JAR.value)
        if not path:
            return
        jar = MozillaCookieJar(os.fspath(path))
        for cookie in session.cookies:
            jar.set_cookie(cookie)
        try:
            jar.save(ignore_discard=True, ignore_expires=True)
        except OSError as e:
            logger.error(f"Failed to write cookie jar {path}: {e}")
            return
        logger.debug(f"Saved {len(jar)} cookie(s) to {path}")
