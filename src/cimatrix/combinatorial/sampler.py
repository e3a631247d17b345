"""Weighted random sampling of matrix rows.

The sampler tops up an existing set of rows (usually the pinned rows) until
a target count is reached. Every candidate draws one value per axis,
independently and proportionally to the value weights. Candidates that
match an exclusion rule or duplicate an accepted row are rejected.

Every draw, accepted or rejected, consumes one attempt from a fixed budget,
so a heavily excluded configuration cannot loop forever. Running out of
attempts is a normal outcome: the caller simply receives fewer rows.

Example:
    >>> from cimatrix.adapters import SeededRandomAdapter
    >>> sampler = WeightedSampler(axes, exclusions, composer, SeededRandomAdapter(42))
    >>> rows = sampler.fill(pinned_rows, target_count=5)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from cimatrix.combinatorial.axes import Axis, AxisValue
from cimatrix.combinatorial.matching import Constraint, is_excluded
from cimatrix.combinatorial.rows import Row, RowComposer
from cimatrix.ports.random import RandomPort

logger = logging.getLogger(__name__)

DEFAULT_MIN_ATTEMPTS = 100
DEFAULT_ATTEMPTS_PER_ROW = 50


@dataclass
class SamplingStats:
    """Counters from the last fill() call.

    Attributes:
        attempts: Candidates drawn.
        accepted: Candidates added to the result.
        excluded: Candidates rejected by an exclusion rule.
        duplicates: Candidates rejected as already present.
        budget: Attempt ceiling that applied.
    """

    attempts: int = 0
    accepted: int = 0
    excluded: int = 0
    duplicates: int = 0
    budget: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.budget

    def __repr__(self) -> str:
        return (
            f"SamplingStats({self.accepted} accepted in {self.attempts}/{self.budget} attempts, "
            f"{self.excluded} excluded, {self.duplicates} duplicates)"
        )


def weighted_pick(values: Sequence[AxisValue], rng: RandomPort) -> AxisValue:
    """Pick one value with probability proportional to its weight.

    If every weight is zero the pick is uniform, since excluding the whole
    axis would leave nothing to sample.
    """
    total = sum(v.weight for v in values)
    if total <= 0:
        return values[rng.choice_index(len(values))]

    r = rng.random() * total
    cumulative = 0.0
    for value in values:
        if value.weight <= 0:
            continue
        cumulative += value.weight
        if r < cumulative:
            return value

    # Float rounding can leave r == total; fall back to the last positive weight.
    return next(v for v in reversed(values) if v.weight > 0)


class WeightedSampler:
    """Fills a matrix with weighted random rows.

    Args:
        axes: Registered axes.
        exclusions: Exclusion rules no sampled row may match.
        composer: Composer used to build and name rows.
        rng: Injected random source.
        min_attempts: Lower bound of the attempt budget.
        attempts_per_row: Budget per requested row.
    """

    def __init__(
        self,
        axes: Sequence[Axis],
        exclusions: Sequence[Constraint],
        composer: RowComposer,
        rng: RandomPort,
        min_attempts: int = DEFAULT_MIN_ATTEMPTS,
        attempts_per_row: int = DEFAULT_ATTEMPTS_PER_ROW,
    ) -> None:
        self.axes = list(axes)
        self.exclusions = list(exclusions)
        self.composer = composer
        self.rng = rng
        self.min_attempts = min_attempts
        self.attempts_per_row = attempts_per_row
        self.stats = SamplingStats()

    def attempt_budget(self, target_count: int) -> int:
        return max(self.min_attempts, self.attempts_per_row * target_count)

    def draw(self) -> Row:
        """Draw one candidate row. Exclusions are not checked here."""
        choice = {axis.name: weighted_pick(axis.values, self.rng) for axis in self.axes}
        return self.composer.compose(choice)

    def fill(self, existing_rows: Sequence[Row], target_count: int) -> list[Row]:
        """Sample rows until ``target_count`` rows exist or the budget runs out.

        Args:
            existing_rows: Rows already in the matrix. They count toward the
                target and are never duplicated.
            target_count: Desired total number of rows.

        Returns:
            The newly sampled rows, in the order they were accepted.
        """
        seen = {row.key for row in existing_rows}
        needed = target_count - len(seen)
        self.stats = SamplingStats(budget=self.attempt_budget(target_count))
        sampled: list[Row] = []

        while len(sampled) < needed and self.stats.attempts < self.stats.budget:
            self.stats.attempts += 1
            row = self.draw()
            if is_excluded(row, self.exclusions):
                self.stats.excluded += 1
                continue
            if row.key in seen:
                self.stats.duplicates += 1
                continue
            seen.add(row.key)
            sampled.append(row)
            self.stats.accepted += 1

        if len(sampled) < needed:
            logger.info(
                f"Sampling stopped after {self.stats.attempts} attempts with "
                f"{len(seen)} of {target_count} rows; the remaining space is too constrained"
            )
        else:
            logger.debug(f"Sampling finished: {self.stats}")

        return sampled
