"""Configuration management for cimatrix."""

from cimatrix.config.loader import build_matrix, load_definition, parse_definition
from cimatrix.config.schema import AxisDefinition, MatrixDefinition
from cimatrix.config.settings import MatrixSettings, OutputFormat, load_settings

__all__ = [
    "AxisDefinition",
    "MatrixDefinition",
    "MatrixSettings",
    "OutputFormat",
    "build_matrix",
    "load_definition",
    "load_settings",
    "parse_definition",
]
