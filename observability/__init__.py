"""
GRAPHE - Observability

Structured logging for the scripture structuring engine.
"""
from .logging import (
    setup_logging,
    get_logger,
    shutdown_logging,
    LogContext,
    bind_context,
    unbind_context,
    clear_context,
    BuildLogger,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "LogContext",
    "bind_context",
    "unbind_context",
    "clear_context",
    "BuildLogger",
]
