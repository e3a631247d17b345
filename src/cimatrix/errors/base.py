"""Custom exception hierarchy for cimatrix.

Every cimatrix error carries:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with axis/constraint details
- suggestions: List of actionable steps to resolve the issue

Example:
    try:
        rows = builder.generate_rows(5)
    except EmptyMatrixError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for cimatrix.

    Error codes are organized by category:
    - E2xx: Configuration errors (raised while registering axes and rules)
    - E3xx: Generation errors (raised by generate_rows)
    - E9xx: Unknown/internal errors
    """

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"
    INVALID_STATE = "E202"
    CONFIG_LOAD_FAILED = "E203"

    # Generation errors (E3xx)
    UNSATISFIABLE_PIN = "E301"
    EMPTY_MATRIX = "E302"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if 200 <= code_num < 300:
            return "configuration"
        elif 300 <= code_num < 400:
            return "generation"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context describing where an error occurred.

    Attributes:
        axis_name: Axis involved in the error, if any.
        constraint: Constraint (exclusion rule or pinned request) involved.
        source: File the configuration came from, if loaded from disk.
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    axis_name: str | None = None
    constraint: dict[str, Any] | None = None
    source: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "axis_name": self.axis_name,
            "constraint": self.constraint,
            "source": self.source,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.source:
            parts.append(f"source={self.source}")
        if self.axis_name:
            parts.append(f"axis={self.axis_name}")
        if self.constraint is not None:
            parts.append(f"constraint={self.constraint}")
        return " > ".join(parts) if parts else "unknown location"


class MatrixError(Exception):
    """Base exception for all cimatrix errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with configuration details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether the build may continue after this error
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []
    recoverable: bool = False

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        if recoverable is not None:
            self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(MatrixError):
    """The matrix configuration is invalid.

    Raised at registration time for duplicate axis names, axes without
    values, negative weights, or a name pattern that references an axis
    that was never registered.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid matrix configuration"
    default_suggestions = [
        "Check that every axis name is registered exactly once",
        "Make sure weights are zero or positive numbers",
        "Only reference registered axes in the name pattern",
    ]


class BuilderStateError(ConfigurationError):
    """The builder was used after it already generated its rows."""

    error_code = ErrorCode.INVALID_STATE
    default_message = "Matrix builder has already been built"
    default_suggestions = [
        "Create a new MatrixBuilder for every generation",
        "Register axes, exclusions and pins before calling generate_rows()",
    ]


class ConfigLoadError(ConfigurationError):
    """A matrix definition file could not be read or parsed."""

    error_code = ErrorCode.CONFIG_LOAD_FAILED
    default_message = "Failed to load matrix definition"
    default_suggestions = [
        "Check that the file exists and is readable",
        "Check the YAML syntax; the top level must be a mapping",
    ]


class UnsatisfiablePinError(MatrixError):
    """A pinned row request matches no row once exclusions are applied.

    Unsatisfiable pins are dropped by default. This error only aborts the
    build when fail_on_unsatisfiable_filters(True) is set.
    """

    error_code = ErrorCode.UNSATISFIABLE_PIN
    default_message = "Pinned row request cannot be satisfied"
    recoverable = True
    default_suggestions = [
        "Check whether an exclusion rule forbids every row the pin asks for",
        "Check that the pinned values are spelled like the axis values",
        "Disable strict mode to skip unsatisfiable pins",
    ]

    def __init__(
        self,
        constraint: dict[str, Any],
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.constraint = constraint
        context = kwargs.pop("context", None) or ErrorContext(constraint=constraint)
        super().__init__(
            message=message or f"No row satisfies pinned request {constraint}",
            context=context,
            **kwargs,
        )


class EmptyMatrixError(MatrixError):
    """Generation produced no rows at all.

    This means the exclusion rules forbid the whole space, which is never
    a useful outcome, so it is fatal regardless of strict mode.
    """

    error_code = ErrorCode.EMPTY_MATRIX
    default_message = "Matrix is empty: every combination is excluded"
    default_suggestions = [
        "Review the exclusion rules; together they forbid every combination",
        "Give at least one value of each axis a positive weight",
    ]
