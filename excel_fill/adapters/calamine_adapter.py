"""
Calamine adapter for fast template inspection.

This module provides the CalamineAdapter class that wraps python-calamine
for reading template metadata. python-calamine is a Rust-based reader that
lists sheets and their dimensions without building openpyxl's full object
model, which keeps the inspection endpoint cheap even for large templates.

The fill itself never goes through calamine: calamine cannot write, and
only openpyxl preserves styles and formulas on save.

Example:
    adapter = CalamineAdapter()
    info = adapter.get_template_info(template_bytes, filename="angebot.xlsx")
    print([sheet.name for sheet in info.sheets])
"""

from io import BytesIO

from python_calamine import CalamineWorkbook

from excel_fill.exceptions.fill_exceptions import CorruptDocumentError
from excel_fill.models.fill_models import SheetInfo, TemplateInfo


class CalamineAdapter:
    """
    Adapter for python-calamine template inspection.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of extensions calamine can read.

    Example:
        adapter = CalamineAdapter()
        info = adapter.get_template_info(template_bytes)
    """

    SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".xlsb", ".xlsm", ".ods")

    def _open_workbook(self, data: bytes) -> CalamineWorkbook:
        """
        Open template bytes using calamine.

        Args:
            data: Raw template bytes.

        Returns:
            CalamineWorkbook instance.

        Raises:
            CorruptDocumentError: If the bytes cannot be parsed.
        """
        if not data:
            raise CorruptDocumentError(
                reason="Template is empty",
                expected_formats=list(self.SUPPORTED_EXTENSIONS),
            )

        try:
            return CalamineWorkbook.from_filelike(BytesIO(data))
        except Exception as e:
            raise CorruptDocumentError(
                reason=str(e) or type(e).__name__,
                expected_formats=list(self.SUPPORTED_EXTENSIONS),
            ) from e

    def get_template_info(self, data: bytes, filename: str | None = None) -> TemplateInfo:
        """
        Get metadata about a template.

        Dimensions are taken from calamine's used range; a sheet whose
        range cannot be read is reported without dimensions.

        Args:
            data: Raw template bytes.
            filename: Original filename of the upload, if known.

        Returns:
            TemplateInfo containing per-sheet metadata.

        Raises:
            CorruptDocumentError: If the bytes cannot be parsed.
        """
        workbook = self._open_workbook(data)
        sheets: list[SheetInfo] = []

        for index, name in enumerate(workbook.sheet_names):
            try:
                rows = workbook.get_sheet_by_name(name).to_python()
                row_count = len(rows)
                column_count = max(len(row) for row in rows) if rows else 0
            except Exception:
                row_count = None
                column_count = None

            sheets.append(
                SheetInfo(
                    name=name,
                    index=index,
                    row_count=row_count,
                    column_count=column_count,
                )
            )

        return TemplateInfo(
            filename=filename,
            file_size_bytes=len(data),
            sheet_count=len(sheets),
            sheets=sheets,
        )
