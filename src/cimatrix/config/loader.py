"""Load matrix definitions from YAML and turn them into builders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cimatrix.combinatorial.builder import MatrixBuilder
from cimatrix.config.schema import MatrixDefinition
from cimatrix.errors import ConfigLoadError, ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigLoadError(
            f"Matrix definition not found: {path}",
            context=ErrorContext(source=str(path)),
            suggestions=[
                "Check the path passed on the command line",
                "Create a matrix.yaml next to your workflow",
            ],
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            f"Failed to parse YAML matrix definition: {e}",
            context=ErrorContext(source=str(path)),
            cause=e,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Matrix definition must be a YAML mapping, got {type(data).__name__}",
            context=ErrorContext(source=str(path)),
        )
    return data


def parse_definition(data: dict[str, Any], source: str | None = None) -> MatrixDefinition:
    """Validate a raw definition mapping.

    Raises:
        ConfigurationError: If the mapping does not follow the schema.
    """
    try:
        return MatrixDefinition.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid matrix definition: {problems}",
            context=ErrorContext(source=source),
            cause=e,
        ) from e


def load_definition(path: str | Path) -> MatrixDefinition:
    """Read and validate a matrix definition file.

    Raises:
        ConfigLoadError: If the file is missing or is not a YAML mapping.
        ConfigurationError: If the content does not follow the schema.
    """
    path = Path(path)
    definition = parse_definition(_load_yaml(path), source=str(path))
    logger.debug(f"Loaded matrix definition with {len(definition.axes)} axes from {path}")
    return definition


def build_matrix(definition: MatrixDefinition, seed: int | None = None) -> MatrixBuilder:
    """Create a configured MatrixBuilder from a definition.

    Args:
        definition: Validated matrix definition.
        seed: Seed for the builder's default random source.

    Returns:
        A builder in the CONFIGURING state, ready for generate_rows().
    """
    builder = MatrixBuilder(seed=seed)
    for axis in definition.axes:
        builder.add_axis(axis.name, axis.values, title=axis.title_fn())
    for rule in definition.exclude:
        builder.exclude(rule)
    for pin in definition.pin:
        builder.generate_row(pin)
    if definition.name_pattern:
        builder.set_name_pattern(definition.name_pattern)
    builder.fail_on_unsatisfiable_filters(definition.fail_on_unsatisfiable)
    return builder
