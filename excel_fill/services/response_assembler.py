"""Packaging of a filled workbook for the transport layers."""

from openpyxl import Workbook

from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter
from excel_fill.config import DEFAULT_OUTPUT_FILENAME
from excel_fill.models.fill_models import XLSX_MEDIA_TYPE, FilledDocument


def assemble_response(
    workbook: Workbook,
    adapter: OpenpyxlAdapter,
    filename: str = DEFAULT_OUTPUT_FILENAME,
    sheet_name: str | None = None,
    cells_written: int = 0,
) -> FilledDocument:
    """
    Serialize the workbook and attach content type and filename.

    Args:
        workbook: The filled workbook.
        adapter: Spreadsheet adapter used for serialization.
        filename: Suggested download filename.
        sheet_name: Worksheet that was filled, for reporting.
        cells_written: Number of assignments applied, for reporting.

    Returns:
        FilledDocument ready to be sent or written to disk.

    Raises:
        SerializationError: If the workbook cannot be serialized.
    """
    return FilledDocument(
        content=adapter.serialize(workbook),
        media_type=XLSX_MEDIA_TYPE,
        filename=filename,
        sheet_name=sheet_name,
        cells_written=cells_written,
    )
