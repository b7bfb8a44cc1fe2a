"""Logging configuration, called once by the CLI entrypoint.

Every module does ``logger = logging.getLogger(__name__)`` and inherits this
config. Level precedence: CLI flag > RA_DOWNLOADER_LOG_LEVEL > INFO.
"""

from __future__ import annotations

import logging
import sys

# WARNING and above: message only
_FMT_MINIMAL = "%(levelname)s %(message)s"

# INFO: timestamped with module context
_FMT_VERBOSE = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def setup_logging(level: str = "INFO", quiet_third_party: bool = True) -> None:
    """Configure the root logger with a single stderr handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        quiet_third_party: Keep httpx/httpcore at WARNING unless at DEBUG.
    """
    numeric_level = parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(numeric_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (INFO when unknown)."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
