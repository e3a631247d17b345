"""Emission of generated matrices.

Three formats are supported:

- ``json``: ``{"include": [...]}`` printed to stdout, the shape GitHub
  Actions and most CI systems accept as a job matrix;
- ``github``: the same payload written as a step output, to the file
  named by ``$GITHUB_OUTPUT`` when set or as a ``::set-output`` command;
- ``table``: a rich table for humans.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO, Any

from rich.console import Console
from rich.table import Table

from cimatrix.combinatorial.rows import Row

GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"

# Rows straight from the builder, or job dicts a caller post-processed.
Job = Row | Mapping[str, Any]


def matrix_payload(rows: Sequence[Job]) -> dict[str, Any]:
    """Build the ``include`` payload consumed by CI matrix strategies."""
    return {"include": [row.to_dict() if isinstance(row, Row) else dict(row) for row in rows]}


def to_json(rows: Sequence[Job], indent: int | None = None) -> str:
    return json.dumps(matrix_payload(rows), indent=indent, default=str, ensure_ascii=False)


def emit_json(rows: Sequence[Job], stream: IO[str]) -> None:
    stream.write(to_json(rows, indent=2))
    stream.write("\n")


def emit_github(
    rows: Sequence[Job],
    stream: IO[str],
    output_name: str = "matrix",
    github_output: str | None = None,
) -> None:
    """Publish the matrix as a GitHub Actions step output.

    Args:
        rows: Rows to publish.
        stream: Stream for the legacy ``::set-output`` command.
        output_name: Name of the step output.
        github_output: Path of the step output file. Defaults to the
            ``GITHUB_OUTPUT`` environment variable.
    """
    payload = to_json(rows)
    target = github_output or os.environ.get(GITHUB_OUTPUT_ENV)
    if target:
        with open(Path(target), "a", encoding="utf-8") as f:
            f.write(f"{output_name}={payload}\n")
    else:
        stream.write(f"::set-output name={output_name}::{payload}\n")


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def render_table(rows: Sequence[Row], axis_names: Sequence[str], console: Console) -> None:
    """Print rows as a table with one column per axis."""
    table = Table(title=f"Matrix ({len(rows)} jobs)", show_lines=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("name", style="bold cyan")
    for axis_name in axis_names:
        table.add_column(axis_name)

    for index, row in enumerate(rows, start=1):
        table.add_row(str(index), row.name, *(_cell(row[a]) for a in axis_names))

    console.print(table)
