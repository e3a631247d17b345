"""Combinatorial CI matrix generation.

Define axes of variation (runtime version, operating system, locale, ...),
forbid invalid combinations, pin the rows that must always run, and let
weighted sampling fill the rest of the matrix up to a target size.

Architecture:
    Axis/AxisValue -> RowComposer -> PinnedRowGenerator + WeightedSampler
        -> MatrixBuilder

Modules:
    axes: Axis, AxisValue, normalize_value
    matching: matches, value_matches, is_excluded, freeze
    rows: Row, RowComposer
    pinned: PinnedRowGenerator
    sampler: WeightedSampler, SamplingStats, weighted_pick
    builder: MatrixBuilder, BuilderState

Quick Start:
    >>> from cimatrix.combinatorial import MatrixBuilder
    >>>
    >>> matrix = MatrixBuilder(seed=1)
    >>> matrix.add_axis("os", ["ubuntu-latest", "windows-latest", "macos-latest"])
    >>> matrix.add_axis("java_version", ["8", "11", "17"], title=lambda x: "Java " + x)
    >>> matrix.exclude({"os": "macos-latest", "java_version": "8"})
    >>> matrix.generate_row({"os": "windows-latest"})
    >>> rows = matrix.generate_rows(4)
"""

from cimatrix.combinatorial.axes import (
    DEFAULT_WEIGHT,
    Axis,
    AxisValue,
    TitleFn,
    normalize_value,
)
from cimatrix.combinatorial.builder import BuilderState, MatrixBuilder
from cimatrix.combinatorial.matching import (
    Constraint,
    freeze,
    is_excluded,
    matches,
    value_matches,
)
from cimatrix.combinatorial.pinned import PinnedRowGenerator
from cimatrix.combinatorial.rows import NAME_SEPARATOR, Row, RowComposer
from cimatrix.combinatorial.sampler import SamplingStats, WeightedSampler, weighted_pick

__all__ = [
    # Axes
    "Axis",
    "AxisValue",
    "TitleFn",
    "DEFAULT_WEIGHT",
    "normalize_value",
    # Matching
    "Constraint",
    "matches",
    "value_matches",
    "is_excluded",
    "freeze",
    # Rows
    "Row",
    "RowComposer",
    "NAME_SEPARATOR",
    # Generation
    "PinnedRowGenerator",
    "WeightedSampler",
    "SamplingStats",
    "weighted_pick",
    # Builder
    "MatrixBuilder",
    "BuilderState",
]
