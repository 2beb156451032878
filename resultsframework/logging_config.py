"""
structlog setup.

Library modules only call structlog.get_logger(); configure_logging() is
invoked by entry points (the CLI) to choose level and renderer.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from .config import settings

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure structlog to emit JSON (machine) or console (human) lines.

    Logs go to stderr so CLI output on stdout stays clean.
    """
    level_name = (level or settings.LOG_LEVEL).lower()
    if level_name not in LOG_LEVELS:
        # Unknown names from the environment fall back instead of failing
        level_name = "warning"
    log_format = fmt or settings.LOG_FORMAT

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name.upper())
        ),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
