"""
Cell-fill engine.

Applies a FillPlan to a loaded workbook: select the target worksheet, then
set every assigned cell in plan order. The engine only sets values; it never
adds sheets, rows or columns, so styles, merged ranges, number formats and
formulas in untouched cells come through serialization as they were.
"""

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter
from excel_fill.exceptions.fill_exceptions import WorksheetNotFoundError
from excel_fill.models.fill_models import FillPlan
from excel_fill.utils.log import get_logger

logger = get_logger(__name__)


def select_worksheet(
    workbook: Workbook,
    sheet_selector: str | None,
    adapter: OpenpyxlAdapter,
) -> Worksheet:
    """
    Select the worksheet a plan is applied to.

    A missing or unknown sheet name falls back to the first worksheet.

    Args:
        workbook: Loaded template workbook.
        sheet_selector: Requested sheet name, or None.
        adapter: Spreadsheet adapter.

    Returns:
        The target worksheet.

    Raises:
        WorksheetNotFoundError: If the workbook has no worksheets at all.
    """
    if sheet_selector is not None:
        worksheet = adapter.sheet_by_name(workbook, sheet_selector)
        if worksheet is not None:
            return worksheet

    sheets = adapter.sheets(workbook)
    if not sheets:
        raise WorksheetNotFoundError(
            sheet_name=sheet_selector,
            available_sheets=list(workbook.sheetnames),
        )

    if sheet_selector is not None:
        logger.info(
            "Sheet %r not found, falling back to first sheet %r (available: %s)",
            sheet_selector,
            sheets[0].title,
            adapter.sheet_names(workbook),
        )
    return sheets[0]


def apply_fill_plan(
    workbook: Workbook,
    plan: FillPlan,
    adapter: OpenpyxlAdapter,
) -> Worksheet:
    """
    Apply every assignment of a plan to the workbook, in plan order.

    Later assignments to the same address overwrite earlier ones. The
    workbook is mutated in place.

    Args:
        workbook: Loaded template workbook.
        plan: The fill plan.
        adapter: Spreadsheet adapter.

    Returns:
        The worksheet that was filled.

    Raises:
        WorksheetNotFoundError: If the workbook has no worksheets.
        InvalidCellAddressError: If an assignment has a malformed address.
    """
    worksheet = select_worksheet(workbook, plan.sheet_selector, adapter)

    for assignment in plan.assignments:
        adapter.set_cell(worksheet, assignment.address, assignment.value)

    logger.debug("Applied %d assignments to %r", len(plan.assignments), worksheet.title)
    return worksheet
