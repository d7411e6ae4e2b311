"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

LOG_FORMATS = ("auto", "console", "json")


def _renderer(log_format: str):
    if log_format == "console" or (log_format == "auto" and sys.stderr.isatty()):
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: str = "INFO", log_format: str = "auto") -> None:
    """Configure structlog for the API and scripts.

    ``log_format`` is ``console``, ``json`` or ``auto`` (console on a TTY).
    Anything bound with ``bind_request`` is merged into every event.
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format '{log_format}'")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_request(method: str, path: str) -> None:
    """Attach the current request to log events emitted while handling it."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=method, path=path)
