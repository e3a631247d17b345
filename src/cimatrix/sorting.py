"""Natural ordering of job names.

CI job lists read best when numeric parts sort by value, so ``"Java 8"``
comes before ``"Java 11"`` and ``"windows 8"`` before ``"windows 11"``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from cimatrix.combinatorial.rows import Row

_DIGITS = re.compile(r"([0-9]+)")


def natural_sort_key(name: str) -> tuple[tuple[int, Any], ...]:
    """Sort key that compares embedded digit runs as numbers.

    Text chunks compare case-insensitively. Each chunk is tagged so that
    numbers and text never compare with each other directly.
    """
    parts: list[tuple[int, Any]] = []
    # split() with a capturing group puts digit runs at odd indexes.
    for index, chunk in enumerate(_DIGITS.split(name)):
        if not chunk:
            continue
        if index % 2:
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk.casefold()))
    return tuple(parts)


def sort_rows(rows: Iterable[Row]) -> list[Row]:
    """Return the rows sorted by name in natural order."""
    return sorted(rows, key=lambda row: natural_sort_key(row.name))
