from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "STEAM_CRAWLER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure application logging. Records go to stderr so stdout stays free
    for exported results.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # aiohttp is noisy at DEBUG and never useful below WARNING here.
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))
