"""Structured logging for specwatch commands.

Every log line is one JSON object on stderr; stdout carries only command
results (pipeline JSON, analysis output). Fields bound with
``bind_run_context`` appear on every line emitted for the rest of the
command, including lines logged from inside asyncio tasks.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog


def setup_logging(level: str = "info", stream: IO[str] | None = None) -> None:
    """Configure structlog JSON output at *level* to *stream* (stderr by default)."""
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    structlog.contextvars.clear_contextvars()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**fields: Any) -> None:
    """Attach *fields* (command, provider, ...) to all subsequent log lines."""
    structlog.contextvars.bind_contextvars(**fields)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(component=component)  # type: ignore[return-value]
