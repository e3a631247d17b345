"""Pytest fixtures for cimatrix tests."""

from __future__ import annotations

import pytest

from cimatrix.adapters import SeededRandomAdapter, SequenceRandomAdapter
from cimatrix.combinatorial import Axis, MatrixBuilder, RowComposer

MATRIX_ENV_VARS = (
    "MATRIX_JOBS",
    "MATRIX_SEED",
    "MATRIX_STRICT",
    "MATRIX_OUTPUT_FORMAT",
    "MATRIX_VERBOSE",
    "GITHUB_OUTPUT",
)


@pytest.fixture(autouse=True)
def clean_matrix_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CI environment variables from leaking into tests."""
    for name in MATRIX_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def seeded_rng() -> SeededRandomAdapter:
    return SeededRandomAdapter(seed=1234)


@pytest.fixture
def first_value_rng() -> SequenceRandomAdapter:
    """Random source that always picks the first positive-weight value."""
    return SequenceRandomAdapter([0.0])


@pytest.fixture
def ab_axes() -> list[Axis]:
    return [
        Axis.create("A", ["a1", "a2"]),
        Axis.create("B", ["b1", "b2"]),
    ]


@pytest.fixture
def ab_composer(ab_axes: list[Axis]) -> RowComposer:
    return RowComposer(ab_axes)


@pytest.fixture
def ab_builder() -> MatrixBuilder:
    """Two axes A=[a1, a2], B=[b1, b2] with (a1, b1) excluded."""
    builder = MatrixBuilder(seed=7)
    builder.add_axis("A", ["a1", "a2"])
    builder.add_axis("B", ["b1", "b2"])
    builder.exclude({"A": "a1", "B": "b1"})
    return builder


@pytest.fixture
def java_builder() -> MatrixBuilder:
    """A reduced version of a real Java CI matrix."""
    builder = MatrixBuilder(seed=42)
    builder.add_axis("java_distribution", ["zulu", "temurin", "microsoft"])
    builder.add_axis("jit", ["hotspot"], title="")
    builder.add_axis("java_version", ["8", "11", "17"], title=lambda x: "Java " + x)
    builder.add_axis(
        "os",
        ["ubuntu-latest", "windows-latest", "macos-latest"],
        title=lambda x: x.replace("-latest", ""),
    )
    builder.add_axis(
        "hash",
        [
            {"value": "regular", "title": "", "weight": 42},
            {"value": "same", "title": "same hashcode", "weight": 1},
        ],
    )
    builder.add_axis(
        "locale",
        [{"language": "de", "country": "DE"}, {"language": "tr", "country": "TR"}],
        title=lambda x: x["language"] + "_" + x["country"],
    )
    builder.set_name_pattern(["java_version", "java_distribution", "hash", "os", "locale"])
    builder.exclude({"java_distribution": "microsoft", "java_version": "8"})
    return builder
