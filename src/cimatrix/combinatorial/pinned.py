"""Deterministic resolution of pinned row requests.

A pinned request is a partial constraint such as ``{"os": "windows-latest"}``
that must be represented by at least one row. The generator turns it into
one concrete row without using randomness, so the same configuration always
pins the same rows:

1. For every axis, the candidates are the values matching the request for
   that axis (all values when the axis is unconstrained), ordered by weight
   descending with ties kept in declaration order.
2. The preferred row takes the first candidate of every axis.
3. If the preferred row is excluded, a depth-first search walks the
   candidate orderings and returns the first row no exclusion rule matches.
   Partial assignments that already fully match a rule are pruned.

Example:
    >>> generator = PinnedRowGenerator(axes, exclusions, composer)
    >>> row = generator.generate({"hash": {"value": "same"}})
    >>> row["hash"]["value"]
    'same'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from cimatrix.combinatorial.axes import Axis, AxisValue
from cimatrix.combinatorial.matching import (
    Constraint,
    is_decided,
    is_excluded,
    matches,
    value_matches,
)
from cimatrix.combinatorial.rows import Row, RowComposer
from cimatrix.errors import UnsatisfiablePinError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SEARCH_STEPS = 100_000


def rank_by_weight(values: Sequence[AxisValue]) -> list[AxisValue]:
    """Order values by weight descending, keeping declaration order on ties."""
    # sorted() is stable, so equal weights keep their declaration order.
    return sorted(values, key=lambda v: -v.weight)


class PinnedRowGenerator:
    """Resolves partial constraints to concrete, non-excluded rows.

    Args:
        axes: Registered axes.
        exclusions: Exclusion rules no generated row may match.
        composer: Composer used to build and name rows.
        max_search_steps: Ceiling on assignments visited by the fallback
            search. Reaching it makes the request unsatisfiable.
    """

    def __init__(
        self,
        axes: Sequence[Axis],
        exclusions: Sequence[Constraint],
        composer: RowComposer,
        max_search_steps: int = DEFAULT_MAX_SEARCH_STEPS,
    ) -> None:
        self.axes = list(axes)
        self.exclusions = list(exclusions)
        self.composer = composer
        self.max_search_steps = max_search_steps

    def candidates(self, axis: Axis, constraint: Constraint) -> list[AxisValue]:
        """Values of ``axis`` allowed by ``constraint``, best first."""
        if axis.name not in constraint:
            return rank_by_weight(axis.values)
        matcher = constraint[axis.name]
        return rank_by_weight([v for v in axis.values if value_matches(v.raw, matcher)])

    def generate(self, constraint: Constraint) -> Row:
        """Resolve one pinned request.

        Args:
            constraint: Partial mapping of axis name to matcher.

        Returns:
            A row matching ``constraint`` and no exclusion rule.

        Raises:
            UnsatisfiablePinError: If no such row exists or the search
                ceiling was reached.
        """
        unknown = [name for name in constraint if name not in {a.name for a in self.axes}]
        if unknown:
            raise UnsatisfiablePinError(
                dict(constraint),
                message=f"Pinned request {dict(constraint)} references unknown axes {unknown}",
            )

        ranked = [self.candidates(axis, constraint) for axis in self.axes]
        for axis, values in zip(self.axes, ranked, strict=False):
            if not values:
                raise UnsatisfiablePinError(
                    dict(constraint),
                    message=(
                        f"Pinned request {dict(constraint)} matches no value "
                        f"of axis '{axis.name}'"
                    ),
                )

        preferred = {axis.name: values[0] for axis, values in zip(self.axes, ranked, strict=False)}
        row = self.composer.compose(preferred)
        if not is_excluded(row, self.exclusions):
            return row

        logger.debug(f"Preferred row for {dict(constraint)} is excluded, searching alternatives")
        choice = self._search(ranked)
        if choice is None:
            raise UnsatisfiablePinError(dict(constraint))
        return self.composer.compose(choice)

    def _violates_decided_rule(self, partial: Mapping[str, Any]) -> bool:
        # A rule whose axes are all assigned decides the outcome already.
        return any(
            is_decided(partial, rule) and matches(partial, rule) for rule in self.exclusions
        )

    def _search(self, ranked: list[list[AxisValue]]) -> dict[str, AxisValue] | None:
        steps = 0
        exhausted = False
        choice: dict[str, AxisValue] = {}
        partial: dict[str, Any] = {}

        def visit(depth: int) -> bool:
            nonlocal steps, exhausted
            if depth == len(self.axes):
                return True
            axis = self.axes[depth]
            for value in ranked[depth]:
                steps += 1
                if steps > self.max_search_steps:
                    exhausted = True
                    return False
                choice[axis.name] = value
                partial[axis.name] = value.raw
                if not self._violates_decided_rule(partial) and visit(depth + 1):
                    return True
                del choice[axis.name]
                del partial[axis.name]
            return False

        if visit(0):
            return dict(choice)
        if exhausted:
            logger.warning(f"Pinned row search gave up after {self.max_search_steps} steps")
        return None
