"""
GRAPHE - Structured Logging

structlog runs on top of the standard library so that leaf modules logging
through ``logging.getLogger(__name__)`` and the builder logging through
``get_logger`` end up on the same handlers.

The engine never configures logging itself, so building a book leaves the
host process's handlers alone. Applications (the CLI) call
``setup_logging`` once at startup.

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging(LoggingConfig(level="INFO", json_format=True))
    logger = get_logger(__name__)
    logger.info("Scripture built", book_code="JON", chapters=4)
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from config import LoggingConfig, get_config

_configured: bool = False

SERVICE_NAME = "graphe"
BUILD_LOGGER_NAME = "graphe.build"


# =============================================================================
# PROCESSORS
# =============================================================================

def add_service_context(service_name: str, environment: str) -> structlog.types.Processor:
    """Processor stamping the service name and environment on every event."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the root logger. Only the first call has an effect
    until ``shutdown_logging`` resets it.

    Args:
        config: Logging configuration. Uses the global config if not provided.
    """
    global _configured

    if _configured:
        return

    app_config = get_config()
    config = config or app_config.logging
    level = getattr(logging, config.level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_service_context(SERVICE_NAME, app_config.env.value),
            add_timestamp,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in _build_handlers(config, level):
        root_logger.addHandler(handler)

    _configured = True


def _build_handlers(config: LoggingConfig, level: int) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stderr)
    # structlog has already rendered its own events; plain stdlib records get formatted here
    console.setFormatter(_JsonFormatter() if config.json_format else logging.Formatter("%(message)s"))
    handlers: List[logging.Handler] = [console]

    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_JsonFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; events already rendered as JSON pass through."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if message.startswith("{"):
            return message

        payload: Dict[str, Any] = {
            "event": message,
            "level": record.levelname.lower(),
            "logger": record.name,
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Structlog logger for ``name`` that emits through the stdlib logger of the
    same name.

    Configures nothing: events follow whatever ``setup_logging`` or the host
    application installed, and are dropped by stdlib levels like any other
    record.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def shutdown_logging() -> None:
    """Flush and close root handlers and forget the structlog configuration."""
    global _configured

    for handler in logging.getLogger().handlers:
        handler.flush()
        handler.close()

    structlog.reset_defaults()
    _configured = False


# =============================================================================
# CONTEXT
# =============================================================================

class LogContext:
    """
    Binds key/value pairs to every event logged inside the block.

    Example:
        >>> with LogContext(book_code="JON"):
        ...     logger.info("Building scripture")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


# =============================================================================
# BUILD EVENTS
# =============================================================================

class BuildLogger:
    """Named events emitted while a book is being built."""

    def __init__(self):
        self._logger = get_logger(BUILD_LOGGER_NAME)

    def build_started(self, book_code: str, chapter_count: int) -> None:
        self._logger.debug("Build started", book_code=book_code, chapter_count=chapter_count)

    def build_completed(
        self,
        book_code: str,
        chapters: int,
        verses: int,
        paragraphs: int,
        sections: int,
        duration: float,
    ) -> None:
        self._logger.debug(
            "Build completed",
            book_code=book_code,
            chapters=chapters,
            verses=verses,
            paragraphs=paragraphs,
            sections=sections,
            duration_ms=round(duration * 1000, 3),
        )

    def verse_dropped(self, reference: str, reason: str) -> None:
        self._logger.debug("Verse dropped", reference=reference, reason=reason)

    def empty_document(self, book_code: str, reason: str) -> None:
        self._logger.warning("Empty scripture produced", book_code=book_code, reason=reason)
