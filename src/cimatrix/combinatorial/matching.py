"""Partial-match constraints for exclusion rules and pinned requests.

A constraint is a mapping from axis name to a matcher:

- a list means "any of": the row value must match at least one element;
- a mapping is a partial matcher: every field it names must match the
  corresponding field of the row value, extra fields are ignored;
- an AxisValue matches by its raw payload;
- anything else is compared by equality, against the ``value`` field when
  the row value is a structured entry.

All axes named by the constraint must match (conjunction). Axes the
constraint does not mention are wildcards.

Example:
    >>> rule = {"java_distribution": "microsoft", "java_version": ["8", "11"]}
    >>> matches({"java_distribution": "microsoft", "java_version": "8"}, rule)
    True
    >>> matches({"locale": {"language": "tr", "country": "TR"}}, {"locale": {"language": "tr"}})
    True
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from cimatrix.combinatorial.axes import AxisValue, is_structured_entry

logger = logging.getLogger(__name__)

# Partial mapping from axis name to matcher.
Constraint = Mapping[str, Any]

_MISSING = object()


def value_matches(value: Any, matcher: Any) -> bool:
    """Check a single row value against a single matcher.

    Args:
        value: The row's value for one axis.
        matcher: Scalar, partial-object mapping, or list of alternatives.

    Returns:
        True if the value satisfies the matcher.
    """
    if isinstance(matcher, AxisValue):
        matcher = matcher.raw

    if isinstance(matcher, (list, tuple)):
        return any(value_matches(value, alternative) for alternative in matcher)

    if isinstance(matcher, Mapping):
        if not isinstance(value, Mapping):
            return False
        for key, expected in matcher.items():
            actual = value.get(key, _MISSING)
            if actual is _MISSING or not _deep_equal_or_partial(actual, expected):
                return False
        return True

    # A scalar matcher compares against the payload of a structured entry.
    if is_structured_entry(value):
        return value["value"] == matcher
    return value == matcher


def _deep_equal_or_partial(actual: Any, expected: Any) -> bool:
    # Nested mappings keep partial semantics, nested lists compare exactly.
    if isinstance(expected, Mapping):
        return value_matches(actual, expected)
    return actual == expected


def matches(values: Mapping[str, Any], constraint: Constraint) -> bool:
    """Check whether a (possibly partial) row satisfies a constraint.

    Args:
        values: Mapping of axis name to raw value.
        constraint: Partial mapping of axis name to matcher.

    Returns:
        True if every axis named by the constraint matches. An axis that
        is absent from ``values`` never matches.
    """
    for axis_name, matcher in constraint.items():
        value = values.get(axis_name, _MISSING)
        if value is _MISSING:
            return False
        if not value_matches(value, matcher):
            return False
    return True


def is_excluded(values: Mapping[str, Any], rules: Iterable[Constraint]) -> bool:
    """Check a complete row against every exclusion rule."""
    for rule in rules:
        if matches(values, rule):
            logger.debug(f"Row {dict(values)} excluded by rule {dict(rule)}")
            return True
    return False


def is_decided(values: Mapping[str, Any], constraint: Constraint) -> bool:
    """Check whether every axis named by the constraint is already assigned."""
    return all(axis_name in values for axis_name in constraint)


def freeze(value: Any) -> Hashable:
    """Convert a raw value into a canonical hashable form.

    Mappings become sorted tuples of (key, frozen value) pairs and lists
    become tuples, so two deep-equal raw values always freeze to the same
    key. Used for duplicate detection.
    """
    if isinstance(value, Mapping):
        return (
            "__mapping__",
            tuple(sorted((str(k), freeze(v)) for k, v in value.items())),
        )
    if isinstance(value, (list, tuple)):
        return ("__sequence__", tuple(freeze(v) for v in value))
    if isinstance(value, (set, frozenset)):
        return ("__set__", tuple(sorted(repr(freeze(v)) for v in value)))
    if isinstance(value, Hashable):
        return value
    return ("__repr__", repr(value))


def row_key(values: Mapping[str, Any], axis_names: Iterable[str]) -> tuple[Hashable, ...]:
    """Full value tuple of a row, in the given axis order."""
    return tuple(freeze(values[name]) for name in axis_names)
