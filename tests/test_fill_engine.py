"""
Tests for applying fill plans to workbooks.
"""

import pytest
from openpyxl import Workbook

from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter
from excel_fill.exceptions.fill_exceptions import (
    InvalidCellAddressError,
    WorksheetNotFoundError,
)
from excel_fill.models.fill_models import (
    FillPlan,
    FixedCellAssignment,
    PositionCellAssignment,
)
from excel_fill.services.fill_engine import apply_fill_plan, select_worksheet


class TestSelectWorksheet:
    """Tests for target sheet selection."""

    def test_named_sheet(
        self,
        openpyxl_adapter: OpenpyxlAdapter,
        multi_sheet_template: bytes,
    ) -> None:
        """Test selecting an existing sheet by name."""
        workbook = openpyxl_adapter.load(multi_sheet_template)

        assert select_worksheet(workbook, "Tabelle1", openpyxl_adapter).title == "Tabelle1"

    @pytest.mark.parametrize("selector", [None, "Missing", "tabelle1"])
    def test_fallback_to_first_sheet(
        self,
        openpyxl_adapter: OpenpyxlAdapter,
        multi_sheet_template: bytes,
        selector: str | None,
    ) -> None:
        """Test that absent or unknown names select the first sheet."""
        workbook = openpyxl_adapter.load(multi_sheet_template)

        assert select_worksheet(workbook, selector, openpyxl_adapter).title == "Summary"

    def test_no_worksheets_raises_error(self, openpyxl_adapter: OpenpyxlAdapter) -> None:
        """Test that a workbook without worksheets is rejected."""
        workbook = Workbook()
        workbook.remove(workbook.active)
        workbook.create_chartsheet("Chart")
        workbook.create_chartsheet("Umsatz")

        with pytest.raises(WorksheetNotFoundError) as exc_info:
            select_worksheet(workbook, "Tabelle1", openpyxl_adapter)

        assert exc_info.value.error_code == "WORKSHEET_NOT_FOUND"
        assert exc_info.value.details["available_sheets"] == workbook.sheetnames == ["Chart", "Umsatz"]


class TestApplyFillPlan:
    """Tests for plan application."""

    def test_assignments_applied_in_order(self, openpyxl_adapter: OpenpyxlAdapter) -> None:
        """Test that the last assignment to an address wins."""
        workbook = Workbook()
        plan = FillPlan(
            sheet_selector=None,
            position_start_row=15,
            assignments=[
                FixedCellAssignment(address="B15", value="placeholder"),
                PositionCellAssignment(address="B15", value="Spiegel", index=0, field="title"),
            ],
        )

        worksheet = apply_fill_plan(workbook, plan, openpyxl_adapter)

        assert worksheet["B15"].value == "Spiegel"

    def test_other_sheets_untouched(
        self,
        openpyxl_adapter: OpenpyxlAdapter,
        multi_sheet_template: bytes,
    ) -> None:
        """Test that only the selected sheet is written."""
        workbook = openpyxl_adapter.load(multi_sheet_template)
        plan = FillPlan(
            sheet_selector="Tabelle1",
            position_start_row=15,
            assignments=[FixedCellAssignment(address="B5", value="filled")],
        )

        apply_fill_plan(workbook, plan, openpyxl_adapter)

        assert workbook["Tabelle1"]["B5"].value == "filled"
        assert workbook["Summary"]["B5"].value == "summary-B5"

    def test_invalid_address_raises_error(self, openpyxl_adapter: OpenpyxlAdapter) -> None:
        """Test that a malformed address aborts the fill."""
        plan = FillPlan(
            sheet_selector=None,
            position_start_row=15,
            assignments=[FixedCellAssignment(address="not-a-cell", value="x")],
        )

        with pytest.raises(InvalidCellAddressError) as exc_info:
            apply_fill_plan(Workbook(), plan, openpyxl_adapter)

        assert exc_info.value.details["address"] == "not-a-cell"
