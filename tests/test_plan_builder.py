"""
Tests for the fill plan builder.

The builder is pure, so these tests need no spreadsheet backend.
"""

import pytest

from excel_fill.config import FillConfig
from excel_fill.models.fill_models import (
    FixedCellAssignment,
    PositionCellAssignment,
    RowCellAssignment,
)
from excel_fill.services.plan_builder import (
    build_fill_plan,
    coerce_row_number,
    normalize_value,
)


def plan_values(plan) -> dict[str, object]:
    """Collapse a plan into its final address -> value mapping."""
    values: dict[str, object] = {}
    for assignment in plan.assignments:
        values[assignment.address] = assignment.value
    return values


class TestDefaults:
    """Tests for defaulting of absent payload fields."""

    def test_empty_payload(self, fill_config: FillConfig) -> None:
        """Test that an empty payload gives an empty plan on the first sheet."""
        plan = build_fill_plan({}, fill_config)

        assert plan.sheet_selector is None
        assert plan.position_start_row == 15
        assert plan.assignments == []

    def test_default_columns(self, fill_config: FillConfig) -> None:
        """Test that positions use the default column mapping."""
        plan = build_fill_plan(
            {"positions": [{"title": "Spiegel", "desc": "Antik", "qty": "2 Stk", "dim": "69x90"}]},
            fill_config,
        )

        assert plan_values(plan) == {
            "A15": 1,
            "B15": "Spiegel",
            "C15": "Antik",
            "D15": "2 Stk",
            "E15": "69x90",
        }

    def test_configured_defaults_are_used(self) -> None:
        """Test that injected config replaces the built-in defaults."""
        config = FillConfig(default_columns={"title": "F"}, default_start_row=3)

        plan = build_fill_plan({"positions": [{"title": "x"}]}, config)

        assert plan.position_start_row == 3
        assert plan_values(plan) == {"F3": "x"}

    def test_blank_sheet_name_means_first_sheet(self, fill_config: FillConfig) -> None:
        """Test that an empty sheetName selects no sheet."""
        assert build_fill_plan({"sheetName": ""}, fill_config).sheet_selector is None
        assert build_fill_plan({"sheetName": 3}, fill_config).sheet_selector is None
        assert build_fill_plan({"sheetName": "Summary"}, fill_config).sheet_selector == "Summary"


class TestStartRowCoercion:
    """Tests for positionStartRow coercion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (20, 20),
            ("20", 20),
            (" 7 ", 7),
            (20.0, 20),
            ("abc", 15),
            ("", 15),
            (None, 15),
            (0, 15),
            (-3, 15),
            (2.5, 15),
            (True, 15),
            ([1], 15),
        ],
    )
    def test_start_row(self, raw, expected: int, fill_config: FillConfig) -> None:
        """Test numeric coercion with fallback to the default."""
        plan = build_fill_plan({"positionStartRow": raw}, fill_config)

        assert plan.position_start_row == expected

    def test_coerce_row_number(self) -> None:
        """Test the row coercion helper directly."""
        assert coerce_row_number("12") == 12
        assert coerce_row_number(float("nan")) is None
        assert coerce_row_number("1e3") == 1000


class TestPositionExpansion:
    """Tests for logical position records."""

    def test_row_offset_law(self, fill_config: FillConfig) -> None:
        """Test that position i lands on row start + i."""
        positions = [{"title": f"item {i}"} for i in range(5)]

        plan = build_fill_plan(
            {"positionStartRow": 40, "positions": positions, "columns": {"title": "B"}},
            fill_config,
        )

        assert plan.addresses() == ["B40", "B41", "B42", "B43", "B44"]
        assert [a.index for a in plan.assignments] == [0, 1, 2, 3, 4]

    def test_default_pos_numbering(self, fill_config: FillConfig) -> None:
        """Test that an absent or null pos becomes the 1-based index."""
        plan = build_fill_plan(
            {"positions": [{}, {"pos": None}, {"pos": "7a"}], "columns": {"pos": "A"}},
            fill_config,
        )

        assert plan_values(plan) == {"A15": 1, "A16": 2, "A17": "7a"}

    def test_absent_fields_become_empty_strings(self, fill_config: FillConfig) -> None:
        """Test that missing logical fields are written as empty strings."""
        plan = build_fill_plan({"positions": [{"title": "x", "desc": None}]}, fill_config)

        values = plan_values(plan)
        assert values["C15"] == ""
        assert values["D15"] == ""
        assert values["E15"] == ""

    def test_partial_columns_leave_other_columns_alone(self, fill_config: FillConfig) -> None:
        """Test that only mapped columns are targeted."""
        plan = build_fill_plan(
            {
                "positionStartRow": 15,
                "positions": [{"title": "Spiegel", "qty": "2 Stk"}],
                "columns": {"pos": "A", "title": "B", "qty": "D"},
            },
            fill_config,
        )

        assert plan_values(plan) == {"A15": 1, "B15": "Spiegel", "D15": "2 Stk"}

    def test_extra_mapped_field(self, fill_config: FillConfig) -> None:
        """Test that any field named in columns is expanded."""
        plan = build_fill_plan(
            {"positions": [{"price": 9.5}], "columns": {"price": "g"}},
            fill_config,
        )

        assert plan_values(plan) == {"G15": 9.5}

    def test_non_object_entry_is_an_empty_record(self, fill_config: FillConfig) -> None:
        """Test that a null entry still produces a numbered row."""
        plan = build_fill_plan(
            {"positions": [None], "columns": {"pos": "A", "title": "B"}},
            fill_config,
        )

        assert plan_values(plan) == {"A15": 1, "B15": ""}

    def test_non_list_positions_are_ignored(self, fill_config: FillConfig) -> None:
        """Test that a non-array positions value yields no rows."""
        plan = build_fill_plan({"positions": {"title": "x"}}, fill_config)

        assert plan.assignments == []

    def test_non_object_columns_use_defaults(self, fill_config: FillConfig) -> None:
        """Test that an unusable columns value falls back to the defaults."""
        plan = build_fill_plan({"positions": [{}], "columns": "ABCDE"}, fill_config)

        assert plan.addresses() == ["A15", "B15", "C15", "D15", "E15"]


class TestExplicitRows:
    """Tests for explicit {row, values} position records."""

    def test_explicit_row(self, fill_config: FillConfig) -> None:
        """Test direct row/column assignments."""
        plan = build_fill_plan(
            {"positions": [{"row": 30, "values": {"A": "Summe", "E": 1200, "F": None}}]},
            fill_config,
        )

        assert all(isinstance(a, RowCellAssignment) for a in plan.assignments)
        assert plan_values(plan) == {"A30": "Summe", "E30": 1200, "F30": ""}

    def test_explicit_row_wins_over_logical_fields(self, fill_config: FillConfig) -> None:
        """Test the precedence rule for records matching both shapes."""
        plan = build_fill_plan(
            {"positions": [{"row": 8, "values": {"C": "x"}, "title": "ignored"}]},
            fill_config,
        )

        assert plan_values(plan) == {"C8": "x"}

    def test_row_without_values_object_is_logical(self, fill_config: FillConfig) -> None:
        """Test that 'row' alone does not make an explicit record."""
        plan = build_fill_plan(
            {"positions": [{"row": 8, "values": "nope", "title": "t"}], "columns": {"title": "B"}},
            fill_config,
        )

        assert isinstance(plan.assignments[0], PositionCellAssignment)
        assert plan_values(plan) == {"B15": "t"}

    def test_mixed_shapes_keep_row_offsets(self, fill_config: FillConfig) -> None:
        """Test that explicit rows still consume an index for later records."""
        plan = build_fill_plan(
            {
                "positions": [
                    {"title": "first"},
                    {"row": 99, "values": {"A": "x"}},
                    {"title": "third"},
                ],
                "columns": {"title": "B"},
            },
            fill_config,
        )

        assert plan.addresses() == ["B15", "A99", "B17"]

    def test_numeric_string_row(self, fill_config: FillConfig) -> None:
        """Test that a numeric string row is coerced."""
        plan = build_fill_plan({"positions": [{"row": "12", "values": {"b": 1}}]}, fill_config)

        assert plan.assignments[0].address == "B12"
        assert plan.assignments[0].row == 12

    def test_unusable_row_is_kept_for_rejection(self, fill_config: FillConfig) -> None:
        """Test that a bad row produces an address the engine will reject."""
        plan = build_fill_plan({"positions": [{"row": "x", "values": {"A": 1}}]}, fill_config)

        assert plan.assignments[0].address == "Ax"


class TestOrdering:
    """Tests for assignment ordering."""

    def test_fixed_cells_precede_positions(self, fill_config: FillConfig) -> None:
        """Test that fixed cells come first so positions can overwrite them."""
        plan = build_fill_plan(
            {
                "cells": {"B15": "placeholder", "B5": "Max"},
                "positions": [{"title": "Spiegel"}],
                "columns": {"title": "B"},
            },
            fill_config,
        )

        kinds = [assignment.kind for assignment in plan.assignments]
        assert kinds == ["fixed", "fixed", "position"]
        assert isinstance(plan.assignments[0], FixedCellAssignment)
        assert plan_values(plan)["B15"] == "Spiegel"

    def test_fixed_cell_values_are_normalized(self, fill_config: FillConfig) -> None:
        """Test null and nested values in cells."""
        plan = build_fill_plan(
            {"cells": {"A1": None, "A2": True, "A3": {"k": [1, 2]}}},
            fill_config,
        )

        assert plan_values(plan) == {"A1": "", "A2": True, "A3": '{"k":[1,2]}'}

    def test_non_object_cells_are_ignored(self, fill_config: FillConfig) -> None:
        """Test that an array cells value produces no assignments."""
        plan = build_fill_plan({"cells": ["A1"]}, fill_config)

        assert plan.assignments == []


class TestNormalizeValue:
    """Tests for scalar normalization."""

    def test_scalars_pass_through(self) -> None:
        """Test that scalars keep their type."""
        assert normalize_value("x") == "x"
        assert normalize_value(3) == 3
        assert normalize_value(2.5) == 2.5
        assert normalize_value(False) is False

    def test_none_becomes_empty_string(self) -> None:
        """Test that None is never written."""
        assert normalize_value(None) == ""

    def test_nested_values_become_json(self) -> None:
        """Test that nested values are written as compact JSON text."""
        assert normalize_value(["ä", 1]) == '["ä",1]'
