"""Structured logging setup shared by every typeahead component."""

import logging
import sys
from typing import Optional

import structlog

from typeahead.core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog processors for the process.

    Console rendering when ``LOG_FORMAT`` is ``console`` and stdout is a
    terminal; JSON lines otherwise.
    """
    settings = settings or get_settings()

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    use_console = settings.LOG_FORMAT.lower() == "console" and sys.stdout.isatty()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if use_console else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
