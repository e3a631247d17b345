"""Axis definitions for CI test matrices.

An Axis is one independent testing dimension (Java version, operating
system, locale, ...). Each axis has an ordered list of weighted, titled
values.

Raw value declarations come in two shapes:

- a bare scalar or plain object, e.g. ``"ubuntu-latest"`` or
  ``{"language": "de", "country": "DE"}``;
- a structured entry carrying a ``value`` key plus optional ``title`` and
  ``weight``, e.g. ``{"value": "same", "title": "same hashcode", "weight": 1}``.

Example:
    >>> from cimatrix.combinatorial import Axis
    >>> os_axis = Axis.create(
    ...     "os",
    ...     ["ubuntu-latest", "windows-latest"],
    ...     title=lambda x: x.replace("-latest", ""),
    ... )
    >>> [v.title for v in os_axis.values]
    ['ubuntu', 'windows']
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
import math
from numbers import Real
from typing import Any

from cimatrix.errors import ConfigurationError, ErrorContext

# Maps a raw axis value to the fragment shown in the job name.
TitleFn = Callable[[Any], str]

DEFAULT_WEIGHT = 1


def default_title(value: Any) -> str:
    return str(value)


def constant_title(title: str) -> TitleFn:
    """Title function that ignores the value and always returns ``title``."""

    def title_fn(value: Any) -> str:
        return title

    return title_fn


def resolve_title(title: TitleFn | str | None) -> TitleFn:
    """Turn an axis-level title setting into a title function.

    None selects the default (the value's string form), a string is used
    as a constant title for every value, a callable is used as-is.
    """
    if title is None:
        return default_title
    if isinstance(title, str):
        return constant_title(title)
    if callable(title):
        return title
    raise ConfigurationError(
        f"Axis title must be a string or a callable, got {type(title).__name__}"
    )


def is_structured_entry(entry: Any) -> bool:
    """Check whether a declaration is a structured entry with a ``value`` key."""
    return isinstance(entry, Mapping) and "value" in entry


@dataclass(frozen=True)
class AxisValue:
    """A single normalized value of an axis.

    Attributes:
        raw: The payload used for matching and emitted in rows. For a
            structured entry this is the entry mapping as declared.
        title: Fragment shown in the job name. Empty hides the axis.
        weight: Relative sampling weight. Zero means never sampled
            (pinned rows may still use it).
    """

    raw: Any
    title: str
    weight: float = DEFAULT_WEIGHT

    def __repr__(self) -> str:
        return f"AxisValue({self.raw!r}, title={self.title!r}, weight={self.weight})"


def _validate_weight(weight: Any, axis_name: str) -> float:
    if isinstance(weight, bool) or not isinstance(weight, Real):
        raise ConfigurationError(
            f"Weight for axis '{axis_name}' must be a number, got {weight!r}",
            context=ErrorContext(axis_name=axis_name),
        )
    if not math.isfinite(weight):
        raise ConfigurationError(
            f"Weight for axis '{axis_name}' must be finite, got {weight}",
            context=ErrorContext(axis_name=axis_name),
        )
    if weight < 0:
        raise ConfigurationError(
            f"Weight for axis '{axis_name}' must not be negative, got {weight}",
            context=ErrorContext(axis_name=axis_name),
        )
    return weight


def normalize_value(entry: Any, title_fn: TitleFn, axis_name: str = "") -> AxisValue:
    """Convert one raw value declaration into an AxisValue.

    Args:
        entry: A bare scalar/object, or a mapping with a ``value`` key and
            optional ``title`` and ``weight``.
        title_fn: The axis-level title function.
        axis_name: Axis name, used in error messages.

    Returns:
        The normalized AxisValue.

    Raises:
        ConfigurationError: If the weight is negative or not a number.
    """
    if not is_structured_entry(entry):
        return AxisValue(raw=entry, title=str(title_fn(entry)), weight=DEFAULT_WEIGHT)

    weight = _validate_weight(entry.get("weight", DEFAULT_WEIGHT), axis_name)
    if "title" in entry and entry["title"] is not None:
        title = str(entry["title"])
    else:
        title = str(title_fn(entry["value"]))
    return AxisValue(raw=dict(entry), title=title, weight=weight)


@dataclass(frozen=True)
class Axis:
    """A named testing dimension.

    Attributes:
        name: Unique identifier for this axis.
        values: Ordered normalized values.
        title_fn: Title function the values were normalized with.
    """

    name: str
    values: tuple[AxisValue, ...]
    title_fn: TitleFn = default_title

    @classmethod
    def create(
        cls,
        name: str,
        values: Iterable[Any],
        title: TitleFn | str | None = None,
    ) -> Axis:
        """Build an axis from raw value declarations.

        Raises:
            ConfigurationError: If the name is empty, there are no values,
                or a weight is invalid.
        """
        if not name:
            raise ConfigurationError("Axis name cannot be empty")
        if isinstance(values, (str, bytes)) or isinstance(values, Mapping):
            raise ConfigurationError(
                f"Values of axis '{name}' must be a list, got {type(values).__name__}",
                context=ErrorContext(axis_name=name),
            )

        title_fn = resolve_title(title)
        normalized = tuple(normalize_value(v, title_fn, name) for v in values)
        if not normalized:
            raise ConfigurationError(
                f"Axis '{name}' must have at least one value",
                context=ErrorContext(axis_name=name),
            )
        return cls(name=name, values=normalized, title_fn=title_fn)

    @property
    def raw_values(self) -> list[Any]:
        """Raw payloads in declaration order."""
        return [v.raw for v in self.values]

    @property
    def total_weight(self) -> float:
        return sum(v.weight for v in self.values)

    @property
    def size(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"Axis({self.name!r}, values={self.raw_values})"
