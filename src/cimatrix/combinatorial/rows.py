"""Matrix rows and the composer that names them.

A Row is one CI job: one raw value per axis plus a derived display name.
Rows compare and hash by their full value tuple, never by name, so two
rows with the same titles but different values stay distinct.

Example:
    >>> composer = RowComposer(axes, name_pattern=["java_version", "os"])
    >>> row = composer.compose({"java_version": java8, "os": ubuntu})
    >>> row.name
    'Java 8, ubuntu'
    >>> row.to_dict()
    {'java_version': '8', 'os': 'ubuntu-latest', 'name': 'Java 8, ubuntu'}
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from cimatrix.combinatorial.axes import Axis, AxisValue
from cimatrix.combinatorial.matching import freeze

NAME_SEPARATOR = ", "


class Row(Mapping[str, Any]):
    """An immutable matrix row.

    Behaves as a read-only mapping of axis name to raw value. The display
    name is kept separately in ``name``.

    Attributes:
        name: Display name built from the value titles.
    """

    __slots__ = ("_values", "_name", "_key")

    def __init__(self, values: Mapping[str, Any], name: str) -> None:
        self._values = MappingProxyType(dict(values))
        self._name = name
        self._key = tuple((axis, freeze(value)) for axis, value in self._values.items())

    @property
    def name(self) -> str:
        return self._name

    @property
    def key(self) -> tuple[tuple[str, Hashable], ...]:
        """Canonical value tuple used for equality and duplicate detection."""
        return self._key

    def __getitem__(self, axis_name: str) -> Any:
        return self._values[axis_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(self._key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._key == other._key

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary with every axis value plus ``name``."""
        result = dict(self._values)
        result["name"] = self._name
        return result

    def __repr__(self) -> str:
        return f"Row({self._name!r}, {dict(self._values)!r})"


class RowComposer:
    """Builds rows and their names from a choice of one value per axis.

    The composer is pure: it does not check exclusion rules. Callers test
    the composed row with the exclusion matcher before accepting it.

    Args:
        axes: Registered axes in registration order.
        name_pattern: Axis names in the order their titles appear in the
            name. Defaults to registration order.
    """

    def __init__(self, axes: Sequence[Axis], name_pattern: Sequence[str] | None = None) -> None:
        self.axes = list(axes)
        self.name_pattern = list(name_pattern) if name_pattern else [a.name for a in self.axes]

    def compose_name(self, choice: Mapping[str, AxisValue]) -> str:
        titles = (choice[axis_name].title for axis_name in self.name_pattern)
        return NAME_SEPARATOR.join(t for t in titles if t)

    def compose(self, choice: Mapping[str, AxisValue]) -> Row:
        """Build a row from one AxisValue per registered axis."""
        values = {axis.name: choice[axis.name].raw for axis in self.axes}
        return Row(values, self.compose_name(choice))
