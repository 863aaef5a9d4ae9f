"""
Structured logging configuration for TimeCraft.

structlog and stdlib logging share one pipeline: records from
`logging.getLogger()` (uvicorn, SQLAlchemy, our own modules) and events from
`structlog.get_logger()` (the schedule generator) go through the same
processors and come out as JSON in production or colored console lines
in dev mode.

Usage:
    from src.lib.logging import setup_logging

    setup_logging()  # Call once at application startup
"""

import logging
import os
import sys

import structlog

from src.config.settings import Settings, get_settings

# Loggers that are chatty at INFO: request lines, SQL echo, HTTP client internals
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """
    Configure structlog and stdlib logging for the application.

    Args:
        settings: Settings to read dev mode from (defaults to get_settings())
        level: Root log level; defaults to the LOG_LEVEL env var, then INFO
    """
    settings = settings or get_settings()
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    shared = _shared_processors()

    if settings.dev_mode:
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
        final = [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]
    else:
        renderer = structlog.processors.JSONRenderer()
        final = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Plain stdlib records get the same enrichment before rendering
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=final,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog logger bound to `name`, for key/value event logging."""
    return structlog.get_logger(name)


__all__ = ["QUIET_LOGGERS", "setup_logging", "get_logger"]
