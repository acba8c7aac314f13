# zenwhisper/core/logging.py

import logging
import os
import sys


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging() -> None:
    """
    Install the relay's log handler on the root logger.

    LOG_LEVEL picks the level (INFO when unset or unrecognized). Records go
    to stdout, one line each. Calling this under Uvicorn, which installs its
    own handlers first, only adjusts the level.
    """
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(handler)

    # One access line per HTTP request drowns out connect/join/leave events
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # Backend probing at hash time
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str | None = None) -> logging.Logger:
    """Named logger under the root configured by ``setup_logging``."""
    return logging.getLogger(name)
