# beanpath/utils/logging.py
"""
Logging helpers (stdlib logging, one package logger)

Intent
- Give every module the same way to obtain a logger:
    logger = get_logger(__name__)
- Keep handler setup in one place so library users decide what is emitted.

Notes
- The package never configures the root logger.
- configure_logging() is idempotent: calling it twice does not duplicate handlers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "beanpath"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_TAG = "_beanpath_handler"


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module (children of the `beanpath` logger)."""
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler (and optionally a file handler) to the package logger.

    Existing handlers installed by a previous call are replaced.
    """
    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(level.upper())

    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    fmt = logging.Formatter(_FORMAT)
    for h in handlers:
        h.setFormatter(fmt)
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)
    return root


__all__ = ["PACKAGE_LOGGER", "get_logger", "configure_logging"]
