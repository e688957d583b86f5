"""Proxy resolution, including random selection from a remote proxy directory."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import requests

from .errors import ProxyUnavailableError

logger = logging.getLogger(__name__)

#: Proxy value that asks for a random proxy from the directory.
AUTO_PROXY = "auto"

DEFAULT_DIRECTORY_URL = (
    "http://api.foxtools.ru/v2/Proxy?cp=UTF-8&lang=Auto&available=Yes&free=Yes&country=RU&formatting=1"
)


@dataclass(frozen=True)
class ProxyEndpoint:
    """
    Proxy address with an optional port.

    Attributes:
        address: Host name or IP address, or a verbatim proxy string
        port: Port number when known separately from the address
    """

    address: str
    port: Optional[int] = None

    def __str__(self) -> str:
        if self.port is None:
            return self.address
        return f"{self.address}:{self.port}"


class ProxyDirectory(Protocol):
    """
    Protocol for remote proxy lists.

    Implementations return candidates in the order the service lists them
    and raise ProxyUnavailableError when the list cannot be obtained.
    """

    def fetch(self) -> list[ProxyEndpoint]:
        """Return the current proxy candidates."""
        ...


class FoxtoolsDirectory:
    """
    Proxy directory backed by the foxtools.ru JSON API.

    Expects a payload of the form
    ``{"response": {"items": [{"ip": "1.2.3.4", "port": 8080}, ...]}}``.

    Example:
        directory = FoxtoolsDirectory(timeout=5.0)
        candidates = directory.fetch()
    """

    def __init__(
        self,
        url: str = DEFAULT_DIRECTORY_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the directory client.

        Args:
            url: Directory endpoint
            timeout: Timeout for the directory request in seconds
            session: Optional session to issue the request with
        """
        self.url = url
        self.timeout = timeout
        self._session = session

    def fetch(self) -> list[ProxyEndpoint]:
        """
        Download and decode the proxy list.

        Raises:
            ProxyUnavailableError: On network errors, non-200 responses or
                payloads that do not match the expected shape
        """
        getter = self._session.get if self._session is not None else requests.get
        try:
            response = getter(self.url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ProxyUnavailableError(f"Failed to fetch proxy list from {self.url}: {e}") from e
        except ValueError as e:
            raise ProxyUnavailableError(f"Proxy list from {self.url} is not valid JSON: {e}") from e

        return _parse_items(payload)


def _parse_items(payload: Any) -> list[ProxyEndpoint]:
    try:
        items = payload["response"]["items"]
        return [ProxyEndpoint(str(item["ip"]), int(item["port"])) for item in items]
    except (KeyError, TypeError, ValueError) as e:
        raise ProxyUnavailableError(f"Unexpected proxy list payload: {e!r}") from e


class ProxyResolver:
    """
    Turns a proxy setting into a concrete endpoint.

    ``"auto"`` picks one candidate uniformly at random from the directory;
    anything else is used verbatim.

    Example:
        resolver = ProxyResolver()
        endpoint = resolver.resolve("auto")
        print(f"Using proxy {endpoint}")
    """

    def __init__(
        self,
        directory: Optional[ProxyDirectory] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the resolver.

        Args:
            directory: Source of candidates for ``"auto"`` (default: FoxtoolsDirectory)
            rng: Random generator used to pick a candidate
        """
        self.directory = directory if directory is not None else FoxtoolsDirectory()
        self._rng = rng or random.Random()

    def resolve(self, value: str) -> ProxyEndpoint:
        """
        Resolve a proxy setting.

        Args:
            value: ``"auto"`` or a proxy address such as ``192.168.1.1:8080``

        Returns:
            ProxyEndpoint to configure on the transport

        Raises:
            ProxyUnavailableError: If ``"auto"`` was requested and no
                candidate could be obtained
        """
        if value != AUTO_PROXY:
            return ProxyEndpoint(value)

        candidates = self.directory.fetch()
        if not candidates:
            raise ProxyUnavailableError("Proxy directory returned no candidates")

        endpoint = self._rng.choice(candidates)
        logger.info(f"Selected proxy {endpoint} out of {len(candidates)} candidates")
        return endpoint
