# app/logging/config.py
"""Process-wide logging setup."""

import logging
import sys

from app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Libraries that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; later calls only change the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    if not any(getattr(handler, "_sales_explorer", False) for handler in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sales_explorer = True
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
