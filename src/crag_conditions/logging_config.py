"""Logging setup shared by the CLI and the API."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the root logger with a single stream handler.

    Safe to call more than once; later calls only change the level.
    """
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    logging.getLogger().setLevel(level)

    # Request lines from the HTTP client are too chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
