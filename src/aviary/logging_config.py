"""Logging setup shared by the headless runner and the web server."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LEVEL_ENV = "AVIARY_LOG_LEVEL"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: str | None = None) -> str:
    """Explicit level wins, then ``AVIARY_LOG_LEVEL``, then INFO."""
    return (level or os.getenv(LEVEL_ENV) or "INFO").upper()


def configure_logging(*, level: str | None = None, include_uvicorn: bool = True) -> logging.Logger:
    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S")
    root = logging.getLogger("aviary")
    root.setLevel(resolved)
    # The server hands uvicorn log_config=None, so its loggers follow ours.
    if include_uvicorn:
        for name in UVICORN_LOGGERS:
            logging.getLogger(name).setLevel(resolved)
    root.debug("Logging at %s", resolved)
    return root
