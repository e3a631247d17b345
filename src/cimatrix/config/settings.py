"""Runtime settings for matrix generation."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cimatrix.errors import ConfigurationError

OutputFormat = Literal["json", "github", "table"]


class MatrixSettings(BaseSettings):
    """Settings read from ``MATRIX_*`` environment variables.

    ``MATRIX_JOBS`` is the target row count CI workflows already use.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATRIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    jobs: int = Field(default=5, ge=0, description="Target number of rows")
    seed: int | None = Field(default=None, description="Seed for reproducible sampling")
    strict: bool = Field(default=False, description="Fail on unsatisfiable pinned rows")
    output_format: OutputFormat = Field(default="json", description="Output format")
    verbose: bool = False


def load_settings(**overrides: Any) -> MatrixSettings:
    """Load settings from the environment, then apply explicit overrides.

    Priority: overrides (CLI args) > env vars > defaults. None values in
    ``overrides`` are ignored so unset CLI options keep the env value.
    """
    explicit = {k: v for k, v in overrides.items() if v is not None}
    try:
        return MatrixSettings(**explicit)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", cause=e) from e
