"""Tests for MatrixBuilder."""

from __future__ import annotations

import pytest

from cimatrix.adapters import SequenceRandomAdapter
from cimatrix.combinatorial import BuilderState, MatrixBuilder
from cimatrix.errors import (
    BuilderStateError,
    ConfigurationError,
    EmptyMatrixError,
    UnsatisfiablePinError,
)


def as_dicts(rows) -> list[dict]:
    return [dict(r) for r in rows]


class TestConfiguration:
    """Tests for the configuration phase."""

    def test_add_axis_returns_axis(self):
        builder = MatrixBuilder()
        axis = builder.add_axis("os", ["ubuntu-latest"])
        assert axis.name == "os"
        assert builder.axis_by_name["os"] is axis

    def test_duplicate_axis_raises(self):
        builder = MatrixBuilder()
        builder.add_axis("os", ["ubuntu-latest"])
        with pytest.raises(ConfigurationError, match="already registered"):
            builder.add_axis("os", ["windows-latest"])

    def test_axes_keep_registration_order(self, java_builder):
        assert [a.name for a in java_builder.axes][:3] == ["java_distribution", "jit", "java_version"]

    def test_name_pattern_defaults_to_registration_order(self, ab_builder):
        assert ab_builder.name_pattern == ["A", "B"]

    def test_name_pattern_with_unknown_axis_raises(self, ab_builder):
        with pytest.raises(ConfigurationError, match="unregistered axes"):
            ab_builder.set_name_pattern(["A", "C"])

    def test_total_combinations(self, java_builder):
        assert java_builder.total_combinations == 3 * 1 * 3 * 3 * 2 * 2

    def test_iter_allowed_rows(self, ab_builder):
        assert as_dicts(ab_builder.iter_allowed_rows()) == [
            {"A": "a1", "B": "b2"},
            {"A": "a2", "B": "b1"},
            {"A": "a2", "B": "b2"},
        ]

    def test_strict_flag(self, ab_builder):
        assert not ab_builder.strict
        ab_builder.fail_on_unsatisfiable_filters()
        assert ab_builder.strict

    def test_exclusions_and_pins_are_copies(self, ab_builder):
        ab_builder.generate_row({"A": "a2"})
        ab_builder.pins.append({"A": "a1"})
        ab_builder.exclusions.clear()
        assert ab_builder.pins == [{"A": "a2"}]
        assert len(ab_builder.exclusions) == 1


class TestLifecycle:
    """Tests for the two-phase builder lifecycle."""

    def test_state_moves_to_built(self, ab_builder):
        assert ab_builder.state is BuilderState.CONFIGURING
        ab_builder.generate_rows(2)
        assert ab_builder.state is BuilderState.BUILT

    @pytest.mark.parametrize(
        "call",
        [
            lambda b: b.add_axis("C", ["c1"]),
            lambda b: b.exclude({"A": "a2"}),
            lambda b: b.generate_row({"A": "a2"}),
            lambda b: b.set_name_pattern(["B", "A"]),
            lambda b: b.fail_on_unsatisfiable_filters(),
            lambda b: b.generate_rows(1),
        ],
    )
    def test_calls_after_build_raise(self, ab_builder, call):
        ab_builder.generate_rows(1)
        with pytest.raises(BuilderStateError):
            call(ab_builder)

    def test_builder_state_error_is_configuration_error(self, ab_builder):
        ab_builder.generate_rows(1)
        with pytest.raises(ConfigurationError):
            ab_builder.exclude({"A": "a1"})

    def test_no_axes_raises(self):
        with pytest.raises(ConfigurationError, match="At least one axis"):
            MatrixBuilder().generate_rows(1)

    def test_negative_count_raises(self, ab_builder):
        with pytest.raises(ConfigurationError, match="must not be negative"):
            ab_builder.generate_rows(-1)
        assert ab_builder.state is BuilderState.CONFIGURING


class TestGenerateRows:
    """Tests for generate_rows."""

    def test_count_capped_by_allowed_space(self, ab_builder):
        rows = ab_builder.generate_rows(4)
        assert len(rows) == 3
        assert {"A": "a1", "B": "b1"} not in as_dicts(rows)

    def test_rows_are_distinct(self, java_builder):
        rows = java_builder.generate_rows(20)
        assert len(rows) == 20
        assert len(set(rows)) == 20

    def test_rows_respect_exclusions(self, java_builder):
        rows = java_builder.generate_rows(30)
        for row in rows:
            assert not (row["java_distribution"] == "microsoft" and row["java_version"] == "8")

    def test_every_row_has_every_axis(self, java_builder):
        names = [a.name for a in java_builder.axes]
        for row in java_builder.generate_rows(5):
            assert list(row) == names

    def test_weighted_pin_survives_sampling(self):
        builder = MatrixBuilder(seed=1)
        builder.add_axis(
            "color",
            [
                {"value": "red", "weight": 10},
                {"value": "blue", "weight": 10},
                {"value": "green", "weight": 0},
            ],
        )
        builder.add_axis("size", ["small", "large"])
        builder.exclude({"color": {"value": "green"}})
        builder.generate_row({"color": {"value": "blue"}})

        rows = builder.generate_rows(3)

        colors = [row["color"]["value"] for row in rows]
        assert len(set(rows)) == 3
        assert "blue" in colors
        assert "green" not in colors

    def test_scalar_constraints_on_weighted_values(self):
        builder = MatrixBuilder(seed=1)
        builder.add_axis(
            "color",
            [
                {"value": "red", "weight": 10},
                {"value": "blue", "weight": 10},
                {"value": "green", "weight": 0},
            ],
        )
        builder.add_axis("size", ["small", "large"])
        builder.exclude({"color": "green"})
        builder.generate_row({"color": "blue"})

        rows = builder.generate_rows(3, rng=SequenceRandomAdapter([0.0, 0.0, 0.6, 0.6]))

        colors = [row["color"]["value"] for row in rows]
        assert builder.unsatisfied_pins == []
        assert len(set(rows)) == 3
        assert "blue" in colors
        assert "green" not in colors

    def test_scalar_exclusion_on_structured_entry(self):
        builder = MatrixBuilder(seed=3)
        builder.add_axis("hash", [{"value": "regular", "weight": 1}, {"value": "same", "weight": 1}])
        builder.add_axis("os", ["ubuntu-latest", "windows-latest"])
        builder.exclude({"hash": "same", "os": "windows-latest"})
        for row in builder.generate_rows(10):
            assert not (row["hash"]["value"] == "same" and row["os"] == "windows-latest")

    def test_pin_with_axis_value(self, ab_builder):
        ab_builder.generate_row({"A": ab_builder.axis_by_name["A"].values[1]})
        rows = ab_builder.generate_rows(0)
        assert as_dicts(rows) == [{"A": "a2", "B": "b1"}]
        assert ab_builder.unsatisfied_pins == []

    def test_rows_only_use_declared_values(self, java_builder):
        java_builder.generate_row({"hash": "same"})
        java_builder.generate_row({"locale": {"language": "tr"}})
        rows = java_builder.generate_rows(25)
        assert len(rows) == 25
        for row in rows:
            for axis in java_builder.axes:
                assert row[axis.name] in axis.raw_values

    def test_non_string_titles(self):
        builder = MatrixBuilder(seed=2)
        builder.add_axis("major", [8, 11], title=lambda x: x)
        rows = builder.generate_rows(2)
        assert sorted(row.name for row in rows) == ["11", "8"]

    def test_unsatisfiable_pin_dropped_in_lenient_mode(self, ab_builder):
        ab_builder.generate_row({"A": "a1", "B": "b1"})
        rows = ab_builder.generate_rows(4)
        assert len(rows) == 3
        assert len(ab_builder.unsatisfied_pins) == 1
        assert ab_builder.unsatisfied_pins[0].constraint == {"A": "a1", "B": "b1"}

    def test_unsatisfiable_pin_raises_in_strict_mode(self, ab_builder):
        ab_builder.generate_row({"A": "a1", "B": "b1"})
        ab_builder.fail_on_unsatisfiable_filters()
        with pytest.raises(UnsatisfiablePinError):
            ab_builder.generate_rows(4)

    def test_pins_kept_beyond_count(self, ab_builder):
        ab_builder.generate_row({"A": "a2", "B": "b1"})
        ab_builder.generate_row({"A": "a2", "B": "b2"})
        rows = ab_builder.generate_rows(0)
        assert as_dicts(rows) == [{"A": "a2", "B": "b1"}, {"A": "a2", "B": "b2"}]

    def test_pinned_rows_come_first(self, java_builder):
        java_builder.generate_row({"os": "macos-latest"})
        rows = java_builder.generate_rows(6)
        assert rows[0]["os"] == "macos-latest"

    def test_satisfied_pin_reuses_row(self, ab_builder):
        ab_builder.generate_row({"A": "a2", "B": "b2"})
        ab_builder.generate_row({"B": "b2"})
        rows = ab_builder.generate_rows(0)
        assert as_dicts(rows) == [{"A": "a2", "B": "b2"}]

    def test_zero_count_without_pins_returns_one_row(self, ab_builder):
        rows = ab_builder.generate_rows(0)
        assert len(rows) == 1

    def test_seed_makes_generation_reproducible(self):
        def build() -> list:
            builder = MatrixBuilder(seed=99)
            builder.add_axis("A", ["a1", "a2", "a3"])
            builder.add_axis("B", ["b1", "b2", "b3"])
            return builder.generate_rows(4)

        first, second = build(), build()
        assert first == second
        assert [r.name for r in first] == [r.name for r in second]

    def test_injected_rng(self, ab_builder):
        rows = ab_builder.generate_rows(1, rng=SequenceRandomAdapter([0.75, 0.75]))
        assert as_dicts(rows) == [{"A": "a2", "B": "b2"}]

    def test_zero_weight_value_never_sampled(self):
        builder = MatrixBuilder(seed=5)
        builder.add_axis("A", ["a1", {"value": "a2", "weight": 0}])
        builder.add_axis("B", ["b1", "b2", "b3"])
        rows = builder.generate_rows(10)
        assert all(row["A"] == "a1" for row in rows)
        assert len(rows) == 3

    def test_zero_weight_value_can_be_pinned(self):
        builder = MatrixBuilder(seed=5)
        builder.add_axis("A", ["a1", {"value": "a2", "weight": 0}])
        builder.generate_row({"A": {"value": "a2"}})
        rows = builder.generate_rows(2)
        assert [row["A"] for row in rows] == [{"value": "a2", "weight": 0}, "a1"]

    def test_all_zero_axis_is_sampled_uniformly(self):
        builder = MatrixBuilder(seed=5)
        builder.add_axis("A", [{"value": "x", "weight": 0}, {"value": "y", "weight": 0}])
        rows = builder.generate_rows(2)
        assert len(rows) == 2

    def test_exclusion_on_unknown_axis_is_ignored(self, ab_builder):
        ab_builder.exclude({"jdk": {"distribution": "adopt-openj9"}})
        assert len(ab_builder.generate_rows(4)) == 3

    def test_everything_excluded_raises(self):
        builder = MatrixBuilder(seed=1)
        builder.add_axis("A", ["a1", "a2"])
        builder.exclude({"A": ["a1", "a2"]})
        with pytest.raises(EmptyMatrixError) as exc_info:
            builder.generate_rows(3)
        assert isinstance(exc_info.value.cause, UnsatisfiablePinError)

    def test_sampling_stats_recorded(self, ab_builder):
        ab_builder.generate_rows(2)
        assert ab_builder.sampling_stats is not None
        assert ab_builder.sampling_stats.accepted == 2

    def test_row_names_follow_pattern(self, java_builder):
        java_builder.generate_row({"hash": {"value": "same"}, "os": "windows-latest", "java_version": "17"})
        row = java_builder.generate_rows(1)[0]
        assert row.name == "Java 17, zulu, same hashcode, windows, de_DE"

    def test_repr(self, ab_builder):
        assert repr(ab_builder) == "MatrixBuilder([A(2), B(2)], state=configuring)"
