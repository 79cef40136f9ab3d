#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging for the object cache with:
- Unit-of-work id correlation (one id per request using the cache)
- Stage identifiers for cache execution flow
- JSON formatting for log aggregation
- Redaction of email addresses that leak into logged cache keys

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation

Author: System Architect
Date: 2026-10-19
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from object_cache.core.config.settings import get_settings

unit_of_work_ctx: ContextVar[str | None] = ContextVar("unit_of_work_id", default=None)

_EMAIL_PATTERN = re.compile(r"\b[\w.-]+@[\w.-]+\.\w+\b")


def add_unit_of_work_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add the unit-of-work id to the log event from the context variable.

    STAGE-L.1: Unit-of-work id injection
    """
    unit_of_work_id = unit_of_work_ctx.get()
    if unit_of_work_id:
        event_dict["unit_of_work_id"] = unit_of_work_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_emails(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact email addresses from the message and from logged cache keys.

    STAGE-L.3: PII redaction
    """
    for field in ("event", "cache_key", "key"):
        value = event_dict.get(field)
        if isinstance(value, str):
            event_dict[field] = _EMAIL_PATTERN.sub("[EMAIL]", value)
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Uppercase the log level name.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_unit_of_work_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_emails,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="OC.1")
    """
    return structlog.get_logger(name)


def set_unit_of_work_id(unit_of_work_id: str) -> None:
    """
    Set the unit-of-work id for the current context.

    Call at the start of each request so every cache log line carries it.
    """
    unit_of_work_ctx.set(unit_of_work_id)


def get_unit_of_work_id() -> str | None:
    """Get the current unit-of-work id."""
    return unit_of_work_ctx.get()


def clear_unit_of_work_id() -> None:
    """Clear the unit-of-work id at the end of the request."""
    unit_of_work_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Args:
        logger: Logger instance
        stage: Stage identifier (e.g., Stage.REMOTE_LOOKUP)
        message: Log message
        level: Log level (debug, info, warning, error, critical)
        **kwargs: Additional fields to log

    Usage:
        log_stage(logger, Stage.REMOTE_LOOKUP, "Remote miss", level="debug", cache_key="abc")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=str(getattr(stage, "value", stage)), **kwargs)
