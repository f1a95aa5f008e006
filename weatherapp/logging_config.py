"""Structured logging setup (structlog on top of stdlib logging)."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from .settings import settings


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog once per process.

    - "json": one JSON object per line (servers)
    - anything else: human readable console output
    """
    level = (level or settings.log_level).upper()
    fmt = fmt or settings.log_format

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to `name` (usually __name__)."""
    return structlog.get_logger(name)
