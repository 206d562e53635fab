"""Assertion helpers shared by the test modules."""

from io import BytesIO

from openpyxl import Workbook, load_workbook


def load_result(data: bytes) -> Workbook:
    """Load filled workbook bytes for assertions."""
    return load_workbook(BytesIO(data))


def cell_values(workbook: Workbook, sheet_name: str) -> dict[str, object]:
    """Return every non-empty cell of a sheet keyed by address."""
    worksheet = workbook[sheet_name]
    return {
        cell.coordinate: cell.value
        for row in worksheet.iter_rows()
        for cell in row
        if cell.value is not None
    }
