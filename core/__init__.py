"""
GRAPHE - Core Module

Foundational components shared by every other package:
- Unified error handling

Usage:
    from core import GrapheError, GrapheInputError
"""

from core.errors import (
    GrapheError,
    GrapheConfigError,
    GrapheInputError,
    GrapheReferenceError,
    ErrorContext,
    ErrorSeverity,
)

__all__ = [
    "GrapheError",
    "GrapheConfigError",
    "GrapheInputError",
    "GrapheReferenceError",
    "ErrorContext",
    "ErrorSeverity",
]
