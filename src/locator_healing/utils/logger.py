"""
Logger Utility
--------------

Provides :func:`get_logger`, which returns a logger for a module of
the healing engine.  All loggers hang off the ``locator_healing``
package logger, which writes to stdout with timestamps, log levels and
module names.  The level is read from the ``LOG_LEVEL`` environment
variable the first time a logger is requested.
"""

import logging
import os
import sys
from functools import lru_cache

PACKAGE_LOGGER = "locator_healing"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s – %(message)s"


def _configure_package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(getattr(logging, level_name, logging.INFO))
    return root


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    """Return a logger named ``name`` beneath the package logger."""
    root = _configure_package_logger()
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return root.getChild(name)


__all__ = ["get_logger"]
