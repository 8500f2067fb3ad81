"""Logging setup for the rxfile command line."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(name: Optional[str] = None) -> int:
    """Map a level name (or RXFILE_LOG_LEVEL, default WARNING) to a logging level."""
    level_name = (name or os.getenv("RXFILE_LOG_LEVEL") or "WARNING").upper()
    return getattr(logging, level_name, logging.WARNING)


def setup_logging(level_name: Optional[str] = None) -> int:
    """Configure stderr logging for the CLI and return the level in effect.

    httpx logs every request at INFO; it is held at WARNING unless rxfile
    itself runs at DEBUG.
    """
    level = resolve_level(level_name)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("rxfile").setLevel(level)
    logging.getLogger("httpx").setLevel(level if level <= logging.DEBUG else max(level, logging.WARNING))
    return level
