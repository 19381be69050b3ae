"""Process-wide logging setup."""
from __future__ import annotations

import logging
import sys

from .config import get_settings

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s - %(message)s"
_NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")


def configure_logging(level: str | None = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger().setLevel(resolved)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
