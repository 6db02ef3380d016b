"""
GRAPHE - Error Handling

Exceptions raised at the engine's boundaries: unreadable tokenizer output,
bad configuration, and the strict reference helper used by the CLI.

Data-quality problems inside a readable document are not errors; the
builder omits what it cannot interpret and logs it.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Where an error happened: the operation, and the book, reference or file involved."""

    operation: str
    component: str
    book_code: Optional[str] = None
    reference: Optional[str] = None
    source_path: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def location(self) -> Optional[str]:
        """Most specific place the context names: file, then reference, then book."""
        return self.source_path or self.reference or self.book_code

    @classmethod
    def capture(cls, operation: str, component: str, **kwargs: Any) -> "ErrorContext":
        """Context for an ``except`` block, with the active traceback attached."""
        return cls(operation=operation, component=component, stack_trace=traceback.format_exc(), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "component": self.component,
            "book_code": self.book_code,
            "reference": self.reference,
            "source_path": self.source_path,
            "metadata": dict(self.metadata),
            "stack_trace": self.stack_trace,
            "timestamp": self.timestamp.isoformat(),
        }


class GrapheError(Exception):
    """
    Base exception for the engine.

    Args:
        message: Human-readable description
        context: Where the error happened
        severity: Overrides the class default
        cause: Underlying exception, when wrapping one
        recoverable: Whether the caller can retry with different input
        suggestions: Hints shown to CLI users
    """

    error_code: str = "GRAPHE_ERROR"
    default_severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = list(suggestions or [])

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.context is not None:
            details = [f"component: {self.context.component}"]
            if self.context.location:
                details.append(f"at: {self.context.location}")
            text += f" ({', '.join(details)})"
        if self.cause is not None:
            text += f" [caused by: {self.cause!r}]"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": list(self.suggestions),
            "context": self.context.to_dict() if self.context is not None else None,
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    def with_context(self, **metadata: Any) -> "GrapheError":
        """Attach extra metadata, creating a bare context if the error has none."""
        if self.context is None:
            self.context = ErrorContext(operation="unknown", component="unknown")
        self.context.metadata.update(metadata)
        return self


class GrapheConfigError(GrapheError):
    """A configuration value the engine cannot use."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(self, message: str, config_key: Optional[str] = None, actual_value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.actual_value = actual_value


class GrapheInputError(GrapheError):
    """Tokenizer output that cannot be read at all."""

    error_code = "INPUT_ERROR"

    def __init__(self, message: str, source_path: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.source_path = source_path


REFERENCE_FORM_HINT = "Use the form 'BOOK chapter:verse[-[chapter:]verse]', e.g. 'JON 1:3-5'"


class GrapheReferenceError(GrapheError):
    """A reference string outside the reference grammar."""

    error_code = "REFERENCE_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(self, message: str, reference: Optional[str] = None, **kwargs: Any):
        kwargs.setdefault("recoverable", True)
        kwargs.setdefault("suggestions", [REFERENCE_FORM_HINT])
        super().__init__(message, **kwargs)
        self.reference = reference
