"""Pydantic models describing a matrix definition file.

Example definition (YAML)::

    axes:
      - name: java_version
        title: "Java {value}"
        values: ["8", "11", "17"]
      - name: hash
        values:
          - {value: regular, title: "", weight: 42}
          - {value: same, title: same hashcode, weight: 1}
    exclude:
      - {java_version: "8", hash: {value: same}}
    pin:
      - {hash: {value: same}}
    name_pattern: [java_version, hash]
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cimatrix.errors import ConfigurationError, ErrorContext


class AxisDefinition(BaseModel):
    """One axis of a matrix definition.

    Attributes:
        name: Unique axis name.
        title: ``str.format`` template applied to each value (``{value}``
            is the raw value, so ``{value[language]}`` reads a field of a
            mapping). An empty string hides the axis in job names. None
            uses the value's string form.
        values: Raw value declarations.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Unique axis name")
    title: str | None = Field(default=None, description="Title template")
    values: list[Any] = Field(..., min_length=1, description="Axis values")

    def title_fn(self) -> Any:
        """Title function for the builder, or None for the default."""
        if self.title is None or "{" not in self.title:
            return self.title
        template = self.title

        def render(value: Any) -> str:
            try:
                return template.format(value=value)
            except (KeyError, IndexError, AttributeError, TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Title template {template!r} of axis '{self.name}' failed for {value!r}: {e}",
                    context=ErrorContext(axis_name=self.name),
                    cause=e,
                ) from e

        return render


class MatrixDefinition(BaseModel):
    """A complete matrix definition.

    Attributes:
        axes: Axes in registration order.
        exclude: Exclusion rules.
        pin: Pinned row requests, resolved in order.
        name_pattern: Axis order for job names.
        fail_on_unsatisfiable: Strict mode for pinned rows.
        jobs: Default target row count, used when no count is given.
    """

    model_config = ConfigDict(extra="forbid")

    axes: list[AxisDefinition] = Field(..., min_length=1)
    exclude: list[dict[str, Any]] = Field(default_factory=list)
    pin: list[dict[str, Any]] = Field(default_factory=list)
    name_pattern: list[str] | None = None
    fail_on_unsatisfiable: bool = False
    jobs: int | None = Field(default=None, ge=0)

    @field_validator("exclude")
    @classmethod
    def validate_exclusions(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for constraint in v:
            if not constraint:
                raise ValueError("Exclusion rules must name at least one axis")
        return v

    @model_validator(mode="after")
    def validate_axis_names(self) -> MatrixDefinition:
        names = [a.name for a in self.axes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate axis names: {duplicates}")
        return self
