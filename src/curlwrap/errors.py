"""Error classes for curlwrap."""

from __future__ import annotations


class CurlwrapError(Exception):
    """Base class for all errors raised by curlwrap."""


class TransportClosedError(CurlwrapError):
    """Raised when a client is used after its transport session was closed."""


class ConfigurationError(CurlwrapError):
    """Raised when a setter receives a value that cannot be applied."""


class InvalidQueryError(ConfigurationError):
    """Raised for a request method / body combination that is not supported."""


class InvalidHeadersError(ConfigurationError):
    """Raised when custom headers are not given as a mapping."""


class ProxyUnavailableError(ConfigurationError):
    """
    Raised when an automatic proxy cannot be resolved.

    Covers network failures while querying the proxy directory, malformed
    directory payloads and empty candidate lists. The proxy is never
    silently disabled in these cases.
    """


class ParseError(CurlwrapError):
    """Raised when a transport response cannot be turned into a ParsedResponse."""


class MalformedHeaderError(ParseError):
    """Raised for a header line that lacks the ``": "`` separator."""

    def __init__(self, block_index: int, line: str):
        self.block_index = block_index
        self.line = line
        super().__init__(f"Malformed header line in block {block_index}: {line!r}")


class TranscodeError(ParseError):
    """Raised when the response body cannot be converted between charsets."""

    def __init__(self, from_charset: str, to_charset: str, reason: str):
        self.from_charset = from_charset
        self.to_charset = to_charset
        super().__init__(f"Cannot transcode body from {from_charset} to {to_charset}: {reason}")
