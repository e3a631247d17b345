"""Matrix builder: the public entry point of the engine.

The builder is a two-phase state machine. While CONFIGURING it accepts
axes, exclusion rules, pinned requests, a name pattern and the strict-mode
flag. ``generate_rows()`` moves it to BUILT and returns the rows; any later
registration or generation call raises BuilderStateError.

Generation runs in three steps:

1. Every pinned request is resolved in request order. A request already
   satisfied by an earlier pinned row reuses that row.
2. The weighted sampler tops the matrix up to the requested count. Pinned
   rows count toward the total and are never dropped.
3. If nothing at all was produced, a deterministic search for any allowed
   row runs before EmptyMatrixError is raised.

Example:
    >>> from cimatrix import MatrixBuilder
    >>> matrix = MatrixBuilder(seed=42)
    >>> matrix.add_axis("java_version", ["8", "11", "17"], title=lambda x: "Java " + x)
    >>> matrix.add_axis("os", ["ubuntu-latest", "windows-latest"])
    >>> matrix.exclude({"java_version": "8", "os": "windows-latest"})
    >>> matrix.generate_row({"os": "windows-latest"})
    >>> rows = matrix.generate_rows(4)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from enum import Enum
from typing import Any

from cimatrix.adapters.random import SeededRandomAdapter
from cimatrix.combinatorial.axes import Axis, TitleFn
from cimatrix.combinatorial.matching import Constraint, is_excluded, matches
from cimatrix.combinatorial.pinned import DEFAULT_MAX_SEARCH_STEPS, PinnedRowGenerator
from cimatrix.combinatorial.rows import Row, RowComposer
from cimatrix.combinatorial.sampler import (
    DEFAULT_ATTEMPTS_PER_ROW,
    DEFAULT_MIN_ATTEMPTS,
    SamplingStats,
    WeightedSampler,
)
from cimatrix.errors import (
    BuilderStateError,
    ConfigurationError,
    EmptyMatrixError,
    ErrorContext,
    UnsatisfiablePinError,
)
from cimatrix.ports.random import RandomPort

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    """Lifecycle of a MatrixBuilder."""

    CONFIGURING = "configuring"
    BUILT = "built"


class MatrixBuilder:
    """Builds a CI test matrix from axes, exclusions and pinned rows.

    Attributes:
        seed: Seed for the default random source. None means the rows
            differ between runs.
        min_attempts: Lower bound of the sampler's attempt budget.
        attempts_per_row: Sampler attempts allowed per requested row.
        max_search_steps: Ceiling of the pinned row search.
        state: Current lifecycle state.
    """

    def __init__(
        self,
        seed: int | None = None,
        min_attempts: int = DEFAULT_MIN_ATTEMPTS,
        attempts_per_row: int = DEFAULT_ATTEMPTS_PER_ROW,
        max_search_steps: int = DEFAULT_MAX_SEARCH_STEPS,
    ) -> None:
        self.seed = seed
        self.min_attempts = min_attempts
        self.attempts_per_row = attempts_per_row
        self.max_search_steps = max_search_steps
        self.state = BuilderState.CONFIGURING

        self._axes: dict[str, Axis] = {}
        self._exclusions: list[dict[str, Any]] = []
        self._pins: list[dict[str, Any]] = []
        self._name_pattern: list[str] | None = None
        self._strict = False
        self.sampling_stats: SamplingStats | None = None
        self.unsatisfied_pins: list[UnsatisfiablePinError] = []

    # ------------------------------------------------------------------
    # Configuration phase
    # ------------------------------------------------------------------

    def _ensure_configuring(self, operation: str) -> None:
        if self.state is not BuilderState.CONFIGURING:
            raise BuilderStateError(
                f"Cannot call {operation}() after the matrix has been generated"
            )

    def add_axis(
        self,
        name: str,
        values: Iterable[Any],
        title: TitleFn | str | None = None,
    ) -> Axis:
        """Register an axis.

        Args:
            name: Unique axis name.
            values: Raw value declarations (scalars, objects, or structured
                entries with ``value``/``title``/``weight``).
            title: Title function, constant title string, or None for the
                value's string form.

        Returns:
            The registered Axis.

        Raises:
            ConfigurationError: On a duplicate name, an empty value list or
                an invalid weight.
        """
        self._ensure_configuring("add_axis")
        if name in self._axes:
            raise ConfigurationError(
                f"Axis '{name}' is already registered",
                context=ErrorContext(axis_name=name),
            )
        axis = Axis.create(name, values, title=title)
        self._axes[name] = axis
        logger.debug(f"Registered axis {axis!r}")
        return axis

    def exclude(self, constraint: Constraint) -> None:
        """Forbid every row matching ``constraint``."""
        self._ensure_configuring("exclude")
        self._exclusions.append(dict(constraint))

    def generate_row(self, constraint: Constraint) -> None:
        """Request at least one row matching ``constraint``.

        Requests are resolved by generate_rows(), in the order they were made.
        """
        self._ensure_configuring("generate_row")
        self._pins.append(dict(constraint))

    def set_name_pattern(self, axis_names: Sequence[str]) -> None:
        """Set the order in which axis titles appear in row names.

        Raises:
            ConfigurationError: If a name is not a registered axis.
        """
        self._ensure_configuring("set_name_pattern")
        unknown = [n for n in axis_names if n not in self._axes]
        if unknown:
            raise ConfigurationError(
                f"Name pattern references unregistered axes: {unknown}",
                context=ErrorContext(extra={"registered": list(self._axes)}),
            )
        self._name_pattern = list(axis_names)

    def fail_on_unsatisfiable_filters(self, fail: bool = True) -> None:
        """Make unsatisfiable pinned requests abort the build."""
        self._ensure_configuring("fail_on_unsatisfiable_filters")
        self._strict = fail

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def axes(self) -> tuple[Axis, ...]:
        return tuple(self._axes.values())

    @property
    def axis_by_name(self) -> Mapping[str, Axis]:
        """Registered axes by name.

        ``axis.raw_values`` holds the payloads to use in constraints;
        ``axis.values`` holds AxisValue objects, which match by their raw
        payload as well.
        """
        return dict(self._axes)

    @property
    def exclusions(self) -> list[dict[str, Any]]:
        return list(self._exclusions)

    @property
    def pins(self) -> list[dict[str, Any]]:
        return list(self._pins)

    @property
    def name_pattern(self) -> list[str]:
        if self._name_pattern is not None:
            return list(self._name_pattern)
        return list(self._axes)

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def total_combinations(self) -> int:
        """Size of the full cross-product, before exclusions."""
        result = 1
        for axis in self._axes.values():
            result *= axis.size
        return result

    def iter_allowed_rows(self) -> Iterator[Row]:
        """Enumerate every row of the cross-product that no rule excludes.

        Warning: walks the full cross-product. Check total_combinations
        before calling this on a large matrix.
        """
        composer = self._composer()
        names = [a.name for a in self._axes.values()]
        for combo in itertools.product(*(a.values for a in self._axes.values())):
            row = composer.compose(dict(zip(names, combo, strict=False)))
            if not is_excluded(row, self._exclusions):
                yield row

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _composer(self) -> RowComposer:
        return RowComposer(self.axes, self._name_pattern)

    def _pin_generator(self, composer: RowComposer) -> PinnedRowGenerator:
        return PinnedRowGenerator(
            self.axes,
            self._exclusions,
            composer,
            max_search_steps=self.max_search_steps,
        )

    def resolve_pins(self, composer: RowComposer | None = None) -> list[Row]:
        """Resolve every pinned request without changing the builder state.

        Returns:
            Distinct pinned rows in request order.

        Raises:
            UnsatisfiablePinError: In strict mode, for the first request
                that cannot be satisfied.
        """
        generator = self._pin_generator(composer or self._composer())
        rows: list[Row] = []
        self.unsatisfied_pins = []

        for constraint in self._pins:
            existing = next((r for r in rows if matches(r, constraint)), None)
            if existing is not None:
                logger.debug(f"Pinned request {constraint} already satisfied by {existing.name!r}")
                continue
            try:
                row = generator.generate(constraint)
            except UnsatisfiablePinError as e:
                if self._strict:
                    raise
                logger.warning(f"Skipping unsatisfiable pinned request: {e.message}")
                self.unsatisfied_pins.append(e)
                continue
            if row not in rows:
                rows.append(row)

        return rows

    def generate_rows(self, count: int, rng: RandomPort | None = None) -> list[Row]:
        """Generate the matrix.

        Args:
            count: Target number of rows. Pinned rows count toward it and
                are kept even if there are more of them than ``count``.
            rng: Random source for sampling. Defaults to a
                SeededRandomAdapter using the builder's seed.

        Returns:
            Distinct rows, pinned rows first, unsorted.

        Raises:
            ConfigurationError: If no axis is registered or count is negative.
            UnsatisfiablePinError: In strict mode, for an unsatisfiable pin.
            EmptyMatrixError: If no row can be produced at all.
            BuilderStateError: If the builder was already built.
        """
        self._ensure_configuring("generate_rows")
        if count < 0:
            raise ConfigurationError(f"Row count must not be negative, got {count}")
        if not self._axes:
            raise ConfigurationError("At least one axis must be registered before generating rows")
        self.state = BuilderState.BUILT

        logger.info(
            f"Generating {count} rows from {len(self._axes)} axes "
            f"({self.total_combinations} combinations, {len(self._exclusions)} exclusions, "
            f"{len(self._pins)} pinned requests)"
        )

        composer = self._composer()
        rows = self.resolve_pins(composer)

        sampler = WeightedSampler(
            self.axes,
            self._exclusions,
            composer,
            rng or SeededRandomAdapter(self.seed),
            min_attempts=self.min_attempts,
            attempts_per_row=self.attempts_per_row,
        )
        rows.extend(sampler.fill(rows, count))
        self.sampling_stats = sampler.stats

        if not rows:
            rows = self._fallback_row(composer)

        logger.info(f"Generated {len(rows)} rows")
        return rows

    def _fallback_row(self, composer: RowComposer) -> list[Row]:
        # Sampling can miss a sparse space; an unconstrained pin settles
        # whether any allowed row exists.
        try:
            return [self._pin_generator(composer).generate({})]
        except UnsatisfiablePinError as e:
            raise EmptyMatrixError(
                context=ErrorContext(extra={"exclusions": list(self._exclusions)}),
                cause=e,
            ) from e

    def __repr__(self) -> str:
        axes = ", ".join(f"{a.name}({a.size})" for a in self._axes.values())
        return f"MatrixBuilder([{axes}], state={self.state.value})"
