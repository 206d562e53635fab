"""
Openpyxl adapter for in-memory template filling.

This module provides the OpenpyxlAdapter class that wraps openpyxl as the
spreadsheet abstraction of the fill pipeline: load template bytes into a
mutable workbook, look up worksheets, set cell values and serialize the
workbook back to bytes.

openpyxl is used because it modifies existing workbooks while keeping their
formulas, number formats, merged ranges and row/column dimensions. Only cell
values are ever touched; the adapter issues no structural edits.

Supported formats:
    - .xlsx (Excel 2007+)
    - .xlsm (Excel Macro-Enabled)

Example:
    adapter = OpenpyxlAdapter()
    workbook = adapter.load(template_bytes)
    worksheet = adapter.sheet_by_name(workbook, "Tabelle1")
    adapter.set_cell(worksheet, "B5", "Max Mustermann")
    data = adapter.serialize(workbook)
"""

import re
from io import BytesIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import column_index_from_string
from openpyxl.worksheet.worksheet import Worksheet

from excel_fill.exceptions.fill_exceptions import (
    CorruptDocumentError,
    InvalidCellAddressError,
    SerializationError,
)
from excel_fill.utils.log import get_logger

logger = get_logger(__name__)


class OpenpyxlAdapter:
    """
    Adapter for openpyxl workbook loading, cell writes and serialization.

    All operations work on bytes and in-memory workbooks; nothing touches
    the filesystem. A workbook instance belongs to exactly one fill.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of supported file extensions.
        MAX_ROW: Last row of the .xlsx grid.
        MAX_COLUMN: Last column index (XFD) of the .xlsx grid.

    Example:
        adapter = OpenpyxlAdapter()
        workbook = adapter.load(data)
        for worksheet in adapter.sheets(workbook):
            print(worksheet.title)
    """

    SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm")
    MAX_ROW = 1_048_576
    MAX_COLUMN = 16_384

    _ADDRESS_PATTERN = re.compile(r"^\$?([A-Za-z]{1,3})\$?([0-9]+)$")

    def load(self, data: bytes) -> Workbook:
        """
        Load template bytes into a mutable workbook.

        Formulas are kept as formulas (``data_only=False``) so that they
        survive serialization unchanged.

        Args:
            data: Raw template bytes.

        Returns:
            Workbook instance.

        Raises:
            CorruptDocumentError: If openpyxl cannot parse the bytes.
        """
        if not data:
            raise CorruptDocumentError(
                reason="Template is empty",
                expected_formats=list(self.SUPPORTED_EXTENSIONS),
            )

        try:
            return load_workbook(BytesIO(data), data_only=False)
        except Exception as e:
            raise CorruptDocumentError(
                reason=str(e) or type(e).__name__,
                expected_formats=list(self.SUPPORTED_EXTENSIONS),
            ) from e

    def sheets(self, workbook: Workbook) -> list[Worksheet]:
        """Return the workbook's worksheets in workbook order."""
        return list(workbook.worksheets)

    def sheet_names(self, workbook: Workbook) -> list[str]:
        """Return the worksheet names in workbook order."""
        return [worksheet.title for worksheet in workbook.worksheets]

    def sheet_by_name(self, workbook: Workbook, name: str) -> Worksheet | None:
        """
        Look up a worksheet by its exact name.

        Chartsheets are not worksheets and are never returned.

        Args:
            workbook: Loaded workbook.
            name: Sheet name.

        Returns:
            The worksheet, or None if there is no worksheet with that name.
        """
        for worksheet in workbook.worksheets:
            if worksheet.title == name:
                return worksheet
        return None

    def parse_address(self, address: Any) -> tuple[int, int]:
        """
        Parse an A1 cell address into 1-based (row, column).

        Accepts lower-case letters and absolute markers (``$B$5``).

        Args:
            address: Cell address such as "F5".

        Returns:
            Tuple of (row, column), both 1-based.

        Raises:
            InvalidCellAddressError: If the address is malformed or outside
                the .xlsx grid.
        """
        if not isinstance(address, str):
            raise InvalidCellAddressError(address, reason="Address must be a string")

        match = self._ADDRESS_PATTERN.match(address.strip())
        if not match:
            raise InvalidCellAddressError(
                address,
                reason="Expected column letters followed by a row number, e.g. 'F5'",
            )

        column = column_index_from_string(match.group(1).upper())
        row = int(match.group(2))

        if not 1 <= row <= self.MAX_ROW:
            raise InvalidCellAddressError(address, reason=f"Row must be between 1 and {self.MAX_ROW}")
        if column > self.MAX_COLUMN:
            raise InvalidCellAddressError(address, reason="Column is beyond XFD")

        return row, column

    def set_cell(self, worksheet: Worksheet, address: Any, value: Any) -> None:
        """
        Set the value of a single cell.

        Writes to a covered cell of a merged range go to the range's
        top-left cell, since openpyxl merged cells are read-only. Strings
        are always written as text: control characters that .xlsx cannot
        hold are dropped and a leading "=" does not make a formula.

        Args:
            worksheet: Target worksheet.
            address: Cell address in A1 notation.
            value: Value to write.

        Raises:
            InvalidCellAddressError: If the address is malformed.
        """
        row, column = self.parse_address(address)

        for merged_range in worksheet.merged_cells.ranges:
            if (
                merged_range.min_row <= row <= merged_range.max_row
                and merged_range.min_col <= column <= merged_range.max_col
            ):
                if (row, column) != (merged_range.min_row, merged_range.min_col):
                    logger.debug("Redirecting %s to merged anchor of %s", address, merged_range.coord)
                row, column = merged_range.min_row, merged_range.min_col
                break

        if isinstance(value, str):
            value = ILLEGAL_CHARACTERS_RE.sub("", value)

        cell = worksheet.cell(row=row, column=column)
        cell.value = value
        # Caller text is stored as text, even when it starts with "=".
        if isinstance(value, str) and cell.data_type == "f":
            cell.data_type = "s"

    def serialize(self, workbook: Workbook) -> bytes:
        """
        Serialize a workbook to .xlsx bytes.

        Args:
            workbook: The workbook to serialize.

        Returns:
            The workbook bytes.

        Raises:
            SerializationError: If openpyxl fails to write the workbook.
        """
        buffer = BytesIO()
        try:
            workbook.save(buffer)
        except Exception as e:
            raise SerializationError(reason=str(e) or type(e).__name__) from e
        finally:
            workbook.close()
        return buffer.getvalue()
