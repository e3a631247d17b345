"""CLI commands for cimatrix."""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click
from rich.console import Console

from cimatrix.cli.output import emit_github, emit_json, render_table
from cimatrix.config import build_matrix, load_definition, load_settings
from cimatrix.errors import MatrixError
from cimatrix.sorting import sort_rows

# Above this size `validate` does not enumerate the allowed combinations.
MAX_ENUMERATED_COMBINATIONS = 100_000


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _fail(error: MatrixError) -> NoReturn:
    click.echo(error.format_verbose(), err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="cimatrix")
def cli() -> None:
    """cimatrix - combinatorial CI test matrix generator."""


@cli.command()
@click.argument("definition", type=click.Path(dir_okay=False))
@click.option("--jobs", "-n", type=int, default=None, help="Target number of rows (env: MATRIX_JOBS)")
@click.option("--seed", "-s", type=int, default=None, help="Seed for reproducible sampling")
@click.option("--strict", is_flag=True, help="Fail on unsatisfiable pinned rows (env: MATRIX_STRICT)")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "github", "table"]),
    default=None,
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def generate(
    definition: str,
    jobs: int | None,
    seed: int | None,
    strict: bool,
    output_format: str | None,
    verbose: bool,
) -> None:
    """Generate a matrix from a YAML DEFINITION file."""
    try:
        # Unset flags fall back to the environment.
        settings = load_settings(
            seed=seed,
            strict=strict or None,
            output_format=output_format,
            verbose=verbose or None,
        )
        setup_logging(settings.verbose)

        matrix_def = load_definition(definition)
        builder = build_matrix(matrix_def, seed=settings.seed)
        if settings.strict:
            builder.fail_on_unsatisfiable_filters(True)

        if jobs is not None:
            count = jobs
        elif "jobs" not in settings.model_fields_set and matrix_def.jobs is not None:
            count = matrix_def.jobs
        else:
            count = settings.jobs

        rows = sort_rows(builder.generate_rows(count))
    except MatrixError as e:
        _fail(e)

    if settings.output_format == "table":
        render_table(rows, [a.name for a in builder.axes], Console())
    elif settings.output_format == "github":
        emit_github(rows, sys.stdout)
    else:
        emit_json(rows, sys.stdout)


@cli.command()
@click.argument("definition", type=click.Path(dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def validate(definition: str, verbose: bool) -> None:
    """Check a DEFINITION file: schema, pinned rows and allowed space."""
    setup_logging(verbose)
    console = Console()
    try:
        builder = build_matrix(load_definition(definition))
        builder.fail_on_unsatisfiable_filters(True)
        pinned = builder.resolve_pins()
    except MatrixError as e:
        _fail(e)

    total = builder.total_combinations
    console.print(f"[green]OK[/green] {len(builder.axes)} axes, {total} combinations")
    console.print(f"  {len(builder.exclusions)} exclusion rules, {len(pinned)} pinned rows")
    for row in pinned:
        console.print(f"  pinned: {row.name}")

    if total <= MAX_ENUMERATED_COMBINATIONS:
        allowed = sum(1 for _ in builder.iter_allowed_rows())
        console.print(f"  {allowed} combinations allowed by the exclusion rules")
        if allowed == 0:
            console.print("[red]Every combination is excluded[/red]")
            sys.exit(1)
    else:
        console.print("  space too large to enumerate allowed combinations")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
