"""
Structured logging configuration using structlog.

Development gets colored console output, staging and production get one JSON
object per line. Reminder jobs bind their name and tenant through contextvars
so every event of a sync or scheduler run can be filtered by them.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from src.config.settings import Settings, get_settings

# Libraries whose INFO output drowns the reminder events
_QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore", "uvicorn.access")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp every event with the service name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _renderers(settings: Settings) -> list[Processor]:
    if settings.environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(stream: TextIO | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        stream: Log destination. The CLI passes stderr so its JSON results
            on stdout stay machine-readable.
    """
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
        *_renderers(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def job_context(job: str, **fields: Any) -> Iterator[None]:
    """
    Bind a job name, plus fields such as ``tenant_id``, to every event
    logged inside the block.

    Usage:
        with job_context("reminder_sync", tenant_id=tenant_id):
            await reconciler.reconcile(tenant_id)
    """
    with structlog.contextvars.bound_contextvars(job=job, **fields):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
