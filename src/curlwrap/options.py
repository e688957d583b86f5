"""Transport option keys and the option store."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .http.protocols import Transport

logger = logging.getLogger(__name__)


class Option(str, Enum):
    """Keys understood by the bundled transport."""

    SHOW_HEADERS = "show_headers"
    FOLLOW_REDIRECTS = "follow_redirects"
    MAX_REDIRECTS = "max_redirects"
    REFERER = "referer"
    USER_AGENT = "user_agent"
    COOKIE = "cookie"
    COOKIE_FILE = "cookie_file"
    COOKIE_JAR = "cookie_jar"
    HTTP_HEADERS = "http_headers"
    PROXY = "proxy"
    PROXY_TYPE = "proxy_type"
    SSL_VERIFY_PEER = "ssl_verify_peer"
    SSL_VERIFY_HOST = "ssl_verify_host"
    REQUEST_METHOD = "request_method"
    POST_FIELDS = "post_fields"
    URL = "url"
    TIMEOUT = "timeout"
    CONNECT_TIMEOUT = "connect_timeout"


OptionKey = Union[Option, str]


class _NotSet:
    """Type of the ``NOT_SET`` sentinel."""

    _instance: _NotSet | None = None

    def __new__(cls) -> _NotSet:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_SET"

    def __reduce__(self) -> str:
        return "NOT_SET"


NOT_SET = _NotSet()


class OptionStore:
    """
    Mapping of option keys to values, mirrored onto a live transport.

    Every write goes to the transport first and is recorded only once the
    transport accepted it, so the store and the session never diverge.

    Example:
        store = OptionStore(transport)
        store.set(Option.FOLLOW_REDIRECTS, True)
        store.get(Option.REFERER)  # NOT_SET
    """

    def __init__(self, transport: Transport):
        self._transport = transport
        self._options: dict[OptionKey, Any] = {}

    def set(self, key: OptionKey, value: Any) -> None:
        """
        Store a value, overwriting any previous one, and apply it.

        Args:
            key: Option key
            value: Option value; not validated here

        Raises:
            Whatever the transport raises when it rejects the value. The
            store keeps its previous value in that case.
        """
        self._transport.apply_option(key, value)
        self._options[key] = value
        logger.debug(f"Option {_key_name(key)} set to {value!r}")

    def update(self, options: Mapping[OptionKey, Any]) -> None:
        """
        Apply several options as one all-or-nothing step.

        If any option fails, the options already applied in this call are
        rolled back on both the store and the transport before the error
        is re-raised.
        """
        previous: list[tuple[OptionKey, Any]] = []
        try:
            for key, value in options.items():
                old = self._options.get(key, NOT_SET)
                self.set(key, value)
                previous.append((key, old))
        except Exception:
            for key, old in reversed(previous):
                self._restore(key, old)
            raise

    def get(self, key: OptionKey) -> Any:
        """Return the stored value, or ``NOT_SET`` if the key was never set."""
        return self._options.get(key, NOT_SET)

    def is_set(self, key: OptionKey) -> bool:
        """Check whether a key holds a value, including a stored ``False``."""
        return key in self._options

    def items(self) -> Iterator[tuple[OptionKey, Any]]:
        return iter(list(self._options.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._options

    def __len__(self) -> int:
        return len(self._options)

    def _restore(self, key: OptionKey, old: Any) -> None:
        if old is NOT_SET:
            self._options.pop(key, None)
            self._transport.apply_option(key, None)
        else:
            self._options[key] = old
            self._transport.apply_option(key, old)
        logger.debug(f"Option {_key_name(key)} rolled back")


def _key_name(key: OptionKey) -> str:
    return key.value if isinstance(key, Option) else str(key)
