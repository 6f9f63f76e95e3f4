"""Logging helpers for the firewall mapper."""
from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _numeric_level(level: str | None) -> int:
    """Map a level name (``debug`` .. ``fatal``) onto the logging module's value."""
    name = (level or "info").strip().upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unsupported log level: {level}")
    return numeric


def configure_logging(level: str | None, log_file: str | None = None) -> logging.Handler:
    """Send all records at ``level`` and above to the console or ``log_file``.

    Any handlers already on the root logger are replaced; the installed
    handler is returned so callers can flush or close it.
    """
    numeric_level = _numeric_level(level)
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)
    return handler
