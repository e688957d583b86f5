"""Logging setup for the curlwrap package and its command-line interface."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers of the HTTP stack that are chatty at DEBUG level
THIRD_PARTY_LOGGERS = ("urllib3", "charset_normalizer")


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Set up logging configuration for curlwrap.

    Console output goes to stderr so that response bodies written to
    stdout stay clean.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, reconfigure even if handlers exist

    Returns:
        Configured ``curlwrap`` logger
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("curlwrap")
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        logger.handlers.clear()

        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if log_file:
            handlers.append(logging.FileHandler(log_file))

        for handler in handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

    # Keep third-party debug noise out unless we are debugging ourselves
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))

    logger.propagate = False

    return logger
