"""Structured logging setup."""

import logging

import structlog

from telus_umrah.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog once at process start.

    Console output in local development, one JSON object per line elsewhere.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.ENV == "local"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
