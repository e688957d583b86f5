"""Response segmentation and header parsing."""

from .headers import (
    parse_header_block,
    parse_header_section,
    parse_response,
    split_sections,
)

__all__ = [
    "parse_header_block",
    "parse_header_section",
    "parse_response",
    "split_sections",
]
