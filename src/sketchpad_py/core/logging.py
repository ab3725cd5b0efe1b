"""Structured logging configuration for sketchpad-py."""

from __future__ import annotations

import logging
import sys
import uuid
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from typing import TextIO


def configure_logging(*, debug: bool = False, json_logs: bool = False, stream: TextIO | None = None) -> None:
    """Configure structured logging for the application.

    Args:
        debug: Enable debug level logging (every history commit is logged).
        json_logs: Output logs as JSON (for machine consumption).
        stream: Where to write log lines. Defaults to stderr so command
            output on stdout stays clean.
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.ExceptionPrettyPrinter(),
                structlog.dev.ConsoleRenderer(colors=stream is None and sys.stderr.isatty()),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if debug else logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_session(session_id: str | None = None) -> str:
    """Bind a drawing session id to every subsequent log line.

    Args:
        session_id: Session id to bind. A new one is generated when omitted.

    Returns:
        The bound session id.
    """
    session_id = session_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(session_id=session_id)
    return session_id
