"""Logging helpers for the netBrowse package."""

from __future__ import annotations

import logging
import os

_PACKAGE_LOGGER = "netBrowse"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or the child logger called *name*.

    The first call attaches a single stream handler to the package logger so
    every module logger created with ``logging.getLogger(__name__)`` shares it.
    ``NETBROWSE_LOG_LEVEL`` overrides the default ``INFO`` level.
    """

    root = logging.getLogger(_PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        level = os.environ.get("NETBROWSE_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))
    if not name:
        return root
    if name.startswith(_PACKAGE_LOGGER):
        return logging.getLogger(name)
    return root.getChild(name)


__all__ = ["get_logger"]
