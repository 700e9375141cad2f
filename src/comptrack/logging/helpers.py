"""Namespaced stdlib loggers for diagnostics."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

BASE_LOGGER_NAME = "comptrack"


def setup_base_logger(level: int = logging.WARNING, stream: TextIO | None = None) -> logging.Logger:
    """Configure the base 'comptrack' logger once and return it."""
    base = logging.getLogger(BASE_LOGGER_NAME)
    base.setLevel(level)
    if base.handlers:
        return base
    base.propagate = False
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    base.addHandler(handler)
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the 'comptrack' namespace."""
    if not name or name == BASE_LOGGER_NAME:
        return logging.getLogger(BASE_LOGGER_NAME)
    if name.startswith(f"{BASE_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER_NAME}.{name}")
