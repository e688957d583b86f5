"""
curlwrap - A configurable HTTP client bound to one base host.

Usage:
    from curlwrap import Client

    with Client.create("http://site.ru/") as client:
        client.set_show_headers().set_follow().set_user_agent()
        client.set_query("POST", {"login": "user", "password": "secret"})

        response = client.execute("page/1", "windows-1251", "utf-8")
        if not response.ok:
            print(f"Transport error {response.errno}: {response.error}")
        for block in response.headers:
            print(block.status_line, block.cookies)
        print(response.text)
"""

__version__ = "1.0.0"

from .client import DEFAULT_USER_AGENT, Client
from .encoding import transcode
from .errors import (
    ConfigurationError,
    CurlwrapError,
    InvalidHeadersError,
    InvalidQueryError,
    MalformedHeaderError,
    ParseError,
    ProxyUnavailableError,
    TranscodeError,
    TransportClosedError,
)
from .executor import RequestExecutor
from .http import RawOutput, RequestsTransport, Transport, TransportErrorCode
from .models import (
    STATUS_LINE_KEY,
    ClientSettings,
    HeaderBlock,
    ParsedResponse,
    ProxyType,
    QuerySpec,
    RawResponse,
    RequestMethod,
)
from .options import NOT_SET, Option, OptionStore
from .proxy import AUTO_PROXY, FoxtoolsDirectory, ProxyDirectory, ProxyEndpoint, ProxyResolver
from .url import build_url, normalize_host

__all__ = [
    "__version__",
    # Client
    "Client",
    "DEFAULT_USER_AGENT",
    "RequestExecutor",
    # Options
    "NOT_SET",
    "Option",
    "OptionStore",
    # URL
    "build_url",
    "normalize_host",
    # Proxy
    "AUTO_PROXY",
    "FoxtoolsDirectory",
    "ProxyDirectory",
    "ProxyEndpoint",
    "ProxyResolver",
    # Transport
    "RawOutput",
    "RequestsTransport",
    "Transport",
    "TransportErrorCode",
    "transcode",
    # Models
    "ClientSettings",
    "HeaderBlock",
    "ParsedResponse",
    "ProxyType",
    "QuerySpec",
    "RawResponse",
    "RequestMethod",
    "STATUS_LINE_KEY",
    # Errors
    "ConfigurationError",
    "CurlwrapError",
    "InvalidHeadersError",
    "InvalidQueryError",
    "MalformedHeaderError",
    "ParseError",
    "ProxyUnavailableError",
    "TranscodeError",
    "TransportClosedError",
]
