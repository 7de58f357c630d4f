"""
Structured logging setup for todosync.

Console rendering for local use, JSON lines when TODOSYNC_LOG_JSON is enabled.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from .settings import Settings, get_settings


# PUBLIC_INTERFACE
def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog from settings (environment when omitted)."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.log_json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # httpx logs each request at INFO through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
