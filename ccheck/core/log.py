"""
ccheck/core/log.py

Structured logging setup.

Every module obtains its logger with structlog.get_logger() and logs
snake_case events with key/value context. configure_logging() is
called once by the CLI. Library users call it too, or configure
structlog themselves: unconfigured structlog renders every level,
debug included, on stdout.
"""

import logging
import os
import sys
from typing import Optional

import structlog

_LEVELS = {
    "debug":   logging.DEBUG,
    "info":    logging.INFO,
    "warning": logging.WARNING,
    "error":   logging.ERROR,
}


def resolve_level(level: Optional[str] = None, verbosity: int = 0) -> int:
    """
    Pick a log level.

    -v / -vv on the command line win over CCHECK_LOG_LEVEL,
    which wins over the default (warning).
    """
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    name = (level or os.environ.get("CCHECK_LOG_LEVEL", "warning")).lower()
    return _LEVELS.get(name, logging.WARNING)


def configure_logging(level: Optional[str] = None, verbosity: int = 0) -> None:
    """Configure structlog to render human-readable lines on stderr."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            resolve_level(level, verbosity)
        ),
        # resolve sys.stderr per call so redirected streams are honoured
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
