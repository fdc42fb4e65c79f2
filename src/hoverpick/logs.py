"""Logging setup for the plugin host process.

Stdout carries the msgpack-RPC stream to the editor, so records only ever go
to a file.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured_handler: logging.Handler | None = None


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure the ``hoverpick`` logger.

    *level* and *log_file* default to ``HOVERPICK_LOG_LEVEL`` (``warning``)
    and ``HOVERPICK_LOG_FILE``. Without a file the logger gets a
    ``NullHandler``. Calling again replaces the previous handler.
    """
    global _configured_handler

    level = level or os.environ.get("HOVERPICK_LOG_LEVEL", "warning")
    log_file = log_file or os.environ.get("HOVERPICK_LOG_FILE")

    logger = logging.getLogger("hoverpick")
    if _configured_handler is not None:
        logger.removeHandler(_configured_handler)
        _configured_handler.close()

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False
    _configured_handler = handler
    return logger
