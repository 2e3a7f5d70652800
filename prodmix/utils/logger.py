"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from prodmix.utils.config import get_settings


SOLVER_LOGGER_NAME = "prodmix.services.simplex_service"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Every module logs through the same handler and format. The simplex
    module emits one DEBUG record per pivot, so its logger gets its own
    threshold (``SOLVER_LOG_LEVEL``) and stays quiet when the rest of the
    application runs at DEBUG.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger(SOLVER_LOGGER_NAME).setLevel(settings.solver_log_level.upper())
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
