"""Splitting raw transport output into per-hop header blocks and a body."""

from __future__ import annotations

import logging

from ..errors import MalformedHeaderError
from ..models.response import HeaderBlock, HeaderValue, is_cookie_header

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = b"\r\n\r\n"
LINE_SEPARATOR = "\r\n"
FIELD_SEPARATOR = ": "

# Header bytes are decoded as ISO-8859-1 so every byte maps to one character.
HEADER_ENCODING = "iso-8859-1"


def split_sections(data: bytes, header_size: int, show_headers: bool) -> tuple[bytes, bytes]:
    """
    Split raw transport output into header section and body.

    Args:
        data: Raw bytes returned by the transport
        header_size: Byte length of the header section reported by the transport
        show_headers: Whether the transport was asked to include headers

    Returns:
        Tuple of (header section, body). The header section is empty when
        headers are not shown.
    """
    if not show_headers:
        return b"", data
    header_size = max(0, header_size)
    return data[:header_size], data[header_size:]


def parse_header_block(block: str, index: int = 0) -> HeaderBlock:
    """
    Parse one hop's header lines.

    The first line is the status line. Every other line is split on the
    first ``": "``; ``Set-Cookie`` values accumulate in a list while any
    other repeated name keeps its last value.

    Args:
        block: Header lines of one hop joined with CRLF
        index: Position of the block, used in error messages

    Raises:
        MalformedHeaderError: If a header line lacks the separator
    """
    lines = block.split(LINE_SEPARATOR)
    headers: dict[str, HeaderValue] = {}

    for line in lines[1:]:
        name, sep, value = line.partition(FIELD_SEPARATOR)
        if not sep:
            raise MalformedHeaderError(index, line)

        if is_cookie_header(name):
            existing = headers.get(name)
            if isinstance(existing, list):
                existing.append(value)
            else:
                headers[name] = [value]
        else:
            headers[name] = value

    return HeaderBlock(status_line=lines[0], headers=headers)


def parse_header_section(section: bytes) -> tuple[HeaderBlock, ...]:
    """
    Parse a header section holding one block per hop.

    Blocks are separated by a blank line. A trailing empty segment (the
    normal end of a well-formed section) does not produce a block.

    Args:
        section: Header section bytes

    Returns:
        Header blocks in hop order, oldest first
    """
    segments = section.split(BLOCK_SEPARATOR)
    if segments and not segments[-1]:
        segments.pop()

    blocks = tuple(
        parse_header_block(segment.decode(HEADER_ENCODING), index) for index, segment in enumerate(segments)
    )
    logger.debug(f"Parsed {len(blocks)} header block(s) from {len(section)} bytes")
    return blocks


def parse_response(
    data: bytes,
    header_size: int,
    show_headers: bool,
) -> tuple[tuple[HeaderBlock, ...], bytes]:
    """
    Split and parse raw transport output.

    Args:
        data: Raw bytes returned by the transport
        header_size: Byte length of the header section
        show_headers: Whether headers are present in ``data``

    Returns:
        Tuple of (header blocks, body)
    """
    section, body = split_sections(data, header_size, show_headers)
    if not show_headers:
        return (), body
    return parse_header_section(section), body
