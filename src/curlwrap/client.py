"""Client bound to one base host: option setters, execution and diagnostics."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType, TracebackType
from typing import Any, Optional, Union

from .errors import ConfigurationError, InvalidHeadersError, TransportClosedError
from .executor import RequestExecutor
from .http.protocols import Transport
from .http.transport import RequestsTransport
from .models.config import ClientSettings
from .models.query import ProxyType, QueryBody, QuerySpec
from .models.response import EMPTY_INFO, ParsedResponse
from .options import Option, OptionKey, OptionStore
from .proxy import FoxtoolsDirectory, ProxyEndpoint, ProxyResolver
from .url import build_url, normalize_host

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:45.0) Gecko/20100101 Firefox/50.0"


class Client:
    """
    HTTP client bound to one base host.

    Configure it with the chainable setters, then call ``execute()`` once
    per request. The transport session is opened on construction and
    released by ``close()``; use the client as a context manager so the
    release happens on every exit path.

    Example:
        with Client.create("http://site.ru/") as client:
            client.set_show_headers().set_follow().set_referer("http://site.ru/")
            response = client.execute("page/1", "windows-1251", "utf-8")
            if response.ok:
                for block in response.headers:
                    print(block.status_line)
                print(response.text)
    """

    def __init__(
        self,
        host: str,
        transport: Optional[Transport] = None,
        resolver: Optional[ProxyResolver] = None,
    ):
        """
        Initialize the client and open the transport session.

        Args:
            host: Base host every path is joined to
            transport: Transport to drive (default: RequestsTransport)
            resolver: Proxy resolver used by ``set_proxy`` (default: ProxyResolver)
        """
        self._host = normalize_host(host)
        self._transport: Transport = transport if transport is not None else RequestsTransport()
        self._resolver = resolver
        self._transport.open()
        self._closed = False
        self._store = OptionStore(self._transport)
        self._executor = RequestExecutor(self._transport, self._store)
        self._info: Mapping[str, Any] = EMPTY_INFO

    @classmethod
    def create(cls, host: str, **kwargs: Any) -> Client:
        """Convenience constructor, same arguments as ``Client()``."""
        return cls(host, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: Optional[Transport] = None,
        resolver: Optional[ProxyResolver] = None,
    ) -> Client:
        """
        Create a client and apply a settings object to it.

        The transport is closed again if any setting fails to apply.
        """
        if resolver is None and settings.network.proxy_directory_url:
            resolver = ProxyResolver(FoxtoolsDirectory(url=settings.network.proxy_directory_url))

        client = cls(settings.host, transport=transport, resolver=resolver)
        try:
            client.apply_settings(settings)
        except Exception:
            client.close()
            raise
        return client

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def host(self) -> str:
        """Normalized base host (no trailing slash)."""
        return self._host

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def options(self) -> OptionStore:
        return self._store

    def close(self) -> None:
        """Release the transport session. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._transport.close()
        logger.debug(f"Client for {self._host} closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransportClosedError(f"Client for {self._host} is closed")

    # Option store access

    def set(self, key: OptionKey, value: Any) -> Client:
        """Set a raw option, overwriting any previous value."""
        self._ensure_open()
        self._store.set(key, value)
        return self

    def get(self, key: OptionKey) -> Any:
        """Return an option value, or ``NOT_SET`` if it was never set."""
        return self._store.get(key)

    def is_set(self, key: OptionKey) -> bool:
        return self._store.is_set(key)

    def _set_many(self, options: Mapping[OptionKey, Any]) -> Client:
        self._ensure_open()
        self._store.update(options)
        return self

    # Convenience setters

    def set_show_headers(self, enabled: bool = True) -> Client:
        """Include every hop's headers in the response."""
        return self.set(Option.SHOW_HEADERS, bool(enabled))

    def set_follow(self, enabled: bool = True) -> Client:
        """Follow ``Location`` redirects."""
        return self.set(Option.FOLLOW_REDIRECTS, bool(enabled))

    def set_referer(self, url: str) -> Client:
        return self.set(Option.REFERER, url)

    def set_user_agent(self, agent: str = DEFAULT_USER_AGENT) -> Client:
        return self.set(Option.USER_AGENT, agent)

    def set_cookie(
        self,
        cookie: Optional[str] = None,
        jar: Optional[Union[str, Path]] = None,
    ) -> Client:
        """
        Send a cookie string and/or persist cookies in a jar file.

        Args:
            cookie: Value of the ``Cookie`` request header
            jar: Cookie file read before requests and written on close;
                its directory is created if missing

        Raises:
            ConfigurationError: If neither argument is given
        """
        if cookie is None and jar is None:
            raise ConfigurationError("set_cookie needs a cookie string, a jar path, or both")

        options: dict[OptionKey, Any] = {}
        if jar is not None:
            jar_path = Path(jar)
            jar_path.parent.mkdir(parents=True, exist_ok=True)
            options[Option.COOKIE_FILE] = str(jar_path)
            options[Option.COOKIE_JAR] = str(jar_path)
        if cookie is not None:
            options[Option.COOKIE] = cookie

        return self._set_many(options)

    def set_headers(self, headers: Mapping[str, Any]) -> Client:
        """
        Send custom request headers.

        The mapping is stored as ``"Name: value"`` lines.

        Raises:
            InvalidHeadersError: If ``headers`` is not a mapping
        """
        if not isinstance(headers, Mapping):
            raise InvalidHeadersError(f"Headers must be a mapping, not {type(headers).__name__}")
        lines = [f"{name}: {value}" for name, value in headers.items()]
        return self.set(Option.HTTP_HEADERS, lines)

    def set_proxy(self, proxy: str) -> Client:
        """
        Route requests through an HTTP proxy.

        Args:
            proxy: ``host:port``, a proxy URL, or ``"auto"`` to pick a random
                proxy from the proxy directory

        Raises:
            ProxyUnavailableError: If ``"auto"`` could not produce a proxy;
                no proxy option is changed in that case
        """
        self._ensure_open()
        endpoint = self._get_resolver().resolve(proxy)
        return self._set_many({Option.PROXY_TYPE: ProxyType.HTTP.value, Option.PROXY: str(endpoint)})

    def resolve_proxy(self, proxy: str) -> ProxyEndpoint:
        """Resolve a proxy value without applying it."""
        return self._get_resolver().resolve(proxy)

    def set_disable_ssl(self) -> Client:
        """Disable TLS certificate and host name verification."""
        return self._set_many({Option.SSL_VERIFY_PEER: False, Option.SSL_VERIFY_HOST: False})

    def set_query(self, method: str, body: Optional[QueryBody] = None) -> Client:
        """
        Choose the request method and body.

        Args:
            method: ``GET``, ``PUT`` or ``POST``; anything else means GET
            body: Pre-encoded string or mapping of form fields (required for POST)

        Raises:
            InvalidQueryError: If the body shape is not supported
        """
        query = QuerySpec.build(method, body)
        return self._set_many({Option.REQUEST_METHOD: query.method.value, Option.POST_FIELDS: query.body})

    def set_timeout(self, total: Optional[float] = None, connect: Optional[float] = None) -> Client:
        """Set total and/or connection timeouts in seconds."""
        options: dict[OptionKey, Any] = {}
        if total is not None:
            options[Option.TIMEOUT] = total
        if connect is not None:
            options[Option.CONNECT_TIMEOUT] = connect
        return self._set_many(options)

    def apply_settings(self, settings: ClientSettings) -> Client:
        """Apply every non-default field of a settings object."""
        network = settings.network

        if settings.show_headers is not None:
            self.set_show_headers(settings.show_headers)
        if network.follow_redirects is not None:
            self.set_follow(network.follow_redirects)
        if network.max_redirects is not None:
            self.set(Option.MAX_REDIRECTS, network.max_redirects)
        if settings.referer:
            self.set_referer(settings.referer)
        if network.user_agent:
            self.set_user_agent(network.user_agent)
        if settings.cookies.cookie is not None or settings.cookies.jar is not None:
            self.set_cookie(settings.cookies.cookie, settings.cookies.jar)
        if settings.headers:
            self.set_headers(settings.headers)
        if not network.verify_tls:
            self.set_disable_ssl()
        if network.timeout is not None or network.connect_timeout is not None:
            self.set_timeout(network.timeout, network.connect_timeout)

        query = settings.query
        body = query.form if query.form is not None else query.data
        if query.method != "GET" or body is not None:
            self.set_query(query.method, body)

        if network.proxy:
            self.set_proxy(network.proxy)

        return self

    def _get_resolver(self) -> ProxyResolver:
        if self._resolver is None:
            self._resolver = ProxyResolver()
        return self._resolver

    # Execution

    def execute(
        self,
        path: str,
        from_charset: Optional[str] = None,
        to_charset: Optional[str] = None,
    ) -> ParsedResponse:
        """
        Request ``path`` relative to the base host.

        Transport failures do not raise: check ``response.ok``.

        Args:
            path: Path relative to the host, with or without a leading slash
            from_charset: Charset of the body (or ``"auto"``)
            to_charset: Charset to convert the body to; conversion only
                happens when both charsets are given

        Returns:
            ParsedResponse

        Raises:
            TranscodeError: If the body cannot be converted
            MalformedHeaderError: If the transport returned a malformed header line
            TransportClosedError: If the client was closed
        """
        self._ensure_open()
        url = build_url(self._host, path)
        try:
            return self._executor.execute(url, from_charset, to_charset)
        finally:
            self._info = MappingProxyType(dict(self._transport.get_info()))

    request = execute

    @property
    def info(self) -> Mapping[str, Any]:
        """Diagnostics of the last ``execute()`` call; empty before the first one."""
        return self._info

    def get_info(self) -> Mapping[str, Any]:
        return self._info
