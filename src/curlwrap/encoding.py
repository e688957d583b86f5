"""Character encoding conversion for response bodies."""

from __future__ import annotations

import logging

from charset_normalizer import from_bytes as detect_encoding

from .errors import TranscodeError

logger = logging.getLogger(__name__)

#: Source charset value that asks for detection instead of a declared charset.
AUTO_CHARSET = "auto"


def detect_charset(data: bytes) -> str | None:
    """
    Guess the charset of a byte string.

    Args:
        data: Raw bytes

    Returns:
        Detected encoding name, or None if nothing plausible was found
    """
    result = detect_encoding(data)
    best_match = result.best() if result else None
    if best_match is None:
        return None
    logger.debug(f"Detected encoding: {best_match.encoding}")
    return best_match.encoding


def transcode(data: bytes, from_charset: str, to_charset: str) -> bytes:
    """
    Convert bytes from one character encoding to another.

    Conversion is strict: unknown charsets, bytes that are invalid in the
    source charset and characters the target charset cannot represent all
    fail instead of being dropped.

    Args:
        data: Bytes in ``from_charset``
        from_charset: Source charset, or ``"auto"`` to detect it
        to_charset: Target charset

    Returns:
        Bytes in ``to_charset``

    Raises:
        TranscodeError: If the conversion is not possible
    """
    if not data:
        return data

    source = from_charset
    if from_charset.lower() == AUTO_CHARSET:
        detected = detect_charset(data)
        if detected is None:
            raise TranscodeError(from_charset, to_charset, "source charset could not be detected")
        source = detected

    try:
        return data.decode(source).encode(to_charset)
    except LookupError as e:
        raise TranscodeError(source, to_charset, f"unknown charset ({e})") from e
    except UnicodeError as e:
        raise TranscodeError(source, to_charset, str(e)) from e
