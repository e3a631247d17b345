"""cimatrix - combinatorial test matrices for CI pipelines.

Register axes of variation, forbid invalid combinations, pin the rows that
must always run, and let weighted sampling pick the rest of the jobs.

Quick Start:
    from cimatrix import MatrixBuilder, sort_rows

    matrix = MatrixBuilder()
    matrix.add_axis("java_version", ["8", "11", "17"], title=lambda x: "Java " + x)
    matrix.add_axis("os", ["ubuntu-latest", "windows-latest"], title=lambda x: x.replace("-latest", ""))
    matrix.exclude({"java_version": "8", "os": "windows-latest"})
    matrix.generate_row({"os": "windows-latest"})
    rows = sort_rows(matrix.generate_rows(4))
"""

from __future__ import annotations

from cimatrix.adapters import SeededRandomAdapter, SequenceRandomAdapter
from cimatrix.combinatorial import (
    Axis,
    AxisValue,
    BuilderState,
    MatrixBuilder,
    Row,
    RowComposer,
    matches,
)
from cimatrix.config import MatrixDefinition, MatrixSettings, build_matrix, load_definition
from cimatrix.errors import (
    BuilderStateError,
    ConfigLoadError,
    ConfigurationError,
    EmptyMatrixError,
    MatrixError,
    UnsatisfiablePinError,
)
from cimatrix.ports import RandomPort
from cimatrix.sorting import natural_sort_key, sort_rows

__version__ = "0.1.0"

__all__ = [
    # Engine
    "MatrixBuilder",
    "BuilderState",
    "Axis",
    "AxisValue",
    "Row",
    "RowComposer",
    "matches",
    # Randomness
    "RandomPort",
    "SeededRandomAdapter",
    "SequenceRandomAdapter",
    # Configuration
    "MatrixDefinition",
    "MatrixSettings",
    "build_matrix",
    "load_definition",
    # Sorting
    "natural_sort_key",
    "sort_rows",
    # Errors
    "MatrixError",
    "ConfigurationError",
    "ConfigLoadError",
    "BuilderStateError",
    "UnsatisfiablePinError",
    "EmptyMatrixError",
]
