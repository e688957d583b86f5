"""Joining a base host and a relative path into an absolute URL."""

from __future__ import annotations


def normalize_host(host: str) -> str:
    """
    Strip a single trailing slash from a base host.

    Args:
        host: Base host such as ``http://site.ru/``

    Returns:
        The host without its trailing slash
    """
    if host.endswith("/"):
        return host[:-1]
    return host


def build_url(host: str, path: str) -> str:
    """
    Join a host and a path with exactly one slash between them.

    Examples:
        >>> build_url("http://site.ru/", "page/1")
        'http://site.ru/page/1'
        >>> build_url("http://site.ru", "/page/1")
        'http://site.ru/page/1'
        >>> build_url("http://site.ru", "")
        'http://site.ru/'
    """
    if not path.startswith("/"):
        path = "/" + path
    return normalize_host(host) + path
