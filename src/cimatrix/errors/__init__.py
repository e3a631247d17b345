"""cimatrix error handling.

Custom exception hierarchy with error codes, structured context and
actionable suggestions.
"""

from cimatrix.errors.base import (
    BuilderStateError,
    ConfigLoadError,
    ConfigurationError,
    EmptyMatrixError,
    ErrorCode,
    ErrorContext,
    MatrixError,
    UnsatisfiablePinError,
)

__all__ = [
    "BuilderStateError",
    "ConfigLoadError",
    "ConfigurationError",
    "EmptyMatrixError",
    "ErrorCode",
    "ErrorContext",
    "MatrixError",
    "UnsatisfiablePinError",
]
