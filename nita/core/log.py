"""Process-wide logging setup shared by the API and the command-line scripts."""

import logging
import time

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def utc_formatter() -> logging.Formatter:
    """Formatter whose timestamps are UTC, matching the trailing Z in LOG_DATEFMT."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(level: int | str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(utc_formatter())
    logging.basicConfig(level=level, handlers=[handler])
