"""Curlwrap configuration and response models."""

from .config import ClientSettings, CookieConfig, NetworkConfig, QueryConfig
from .query import ProxyType, QuerySpec, RequestMethod
from .response import STATUS_LINE_KEY, HeaderBlock, ParsedResponse, RawResponse

__all__ = [
    # Config
    "ClientSettings",
    "CookieConfig",
    "NetworkConfig",
    "QueryConfig",
    # Query
    "ProxyType",
    "QuerySpec",
    "RequestMethod",
    # Response
    "STATUS_LINE_KEY",
    "HeaderBlock",
    "ParsedResponse",
    "RawResponse",
]
