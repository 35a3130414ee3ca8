"""Structured logging configuration.

Log events are rendered as JSON lines on stderr so command output on
stdout stays machine readable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per call: sys.stderr may be swapped after configuration.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING") -> None:
    """Configure structlog for the current process.

    Args:
        level: Minimum level name to emit, e.g. ``"INFO"``.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    If structlog has not been configured yet, the default configuration
    (WARNING and above, JSON on stderr) is installed first. Applications
    can still call :func:`configure_logging` or ``structlog.configure``
    afterwards.

    Args:
        name: Logger name, usually __name__.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
