"""
Pydantic models for template fill operations.

This module contains the canonical fill plan produced from a caller payload,
the document returned to the transport layers and the request/response
models of the HTTP and MCP interfaces.

The fill plan is a tagged union: every assignment carries a ``kind`` that
records which payload shape produced it. The shape is decided once by the
plan builder and never re-inspected downstream.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

Scalar = Union[str, int, float, bool]


class FixedCellAssignment(BaseModel):
    """
    Assignment taken from the payload's ``cells`` object.

    Attributes:
        address: Target cell in A1 notation.
        value: Value to write, already normalized (never None).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    address: str = Field(description="Target cell in A1 notation")
    value: Scalar = Field(description="Normalized value to write")


class PositionCellAssignment(BaseModel):
    """
    Assignment expanded from a logical position record through ``columns``.

    Attributes:
        address: Target cell in A1 notation.
        value: Value to write, already normalized (never None).
        index: 0-based index of the record within ``positions``.
        field: Logical field name the value came from.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["position"] = "position"
    address: str = Field(description="Target cell in A1 notation")
    value: Scalar = Field(description="Normalized value to write")
    index: int = Field(ge=0, description="0-based index within positions")
    field: str = Field(description="Logical field name")


class RowCellAssignment(BaseModel):
    """
    Assignment taken from an explicit ``{row, values}`` position record.

    Attributes:
        address: Target cell in A1 notation.
        value: Value to write, already normalized (never None).
        row: Row number given by the record.
        column: Column letters given by the record.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["row"] = "row"
    address: str = Field(description="Target cell in A1 notation")
    value: Scalar = Field(description="Normalized value to write")
    row: int | str = Field(description="Row number given by the record")
    column: str = Field(description="Column letters given by the record")


CellAssignment = Annotated[
    Union[FixedCellAssignment, PositionCellAssignment, RowCellAssignment],
    Field(discriminator="kind"),
]


class FillPlan(BaseModel):
    """
    Canonical, ordered list of cell assignments for one fill.

    Fixed-cell assignments precede position assignments, so a position row
    overwrites a fixed placeholder at the same address.

    Attributes:
        sheet_selector: Requested sheet name, or None for the first sheet.
        position_start_row: Resolved first row of the position block.
        assignments: Assignments in application order.
    """

    sheet_selector: str | None = Field(
        default=None,
        description="Requested sheet name, or None for the first sheet",
    )
    position_start_row: int = Field(
        ge=1,
        description="Resolved first row of the position block",
    )
    assignments: list[CellAssignment] = Field(
        default_factory=list,
        description="Assignments in application order",
    )

    def addresses(self) -> list[str]:
        """Return the target addresses in application order."""
        return [assignment.address for assignment in self.assignments]


class FilledDocument(BaseModel):
    """
    Serialized workbook plus the transport metadata attached to it.

    Attributes:
        content: The filled workbook bytes.
        media_type: MIME type of the spreadsheet format.
        filename: Suggested download filename.
        sheet_name: Worksheet the plan was applied to.
        cells_written: Number of assignments applied.
    """

    content: bytes = Field(description="The filled workbook bytes")
    media_type: str = Field(default=XLSX_MEDIA_TYPE, description="MIME type")
    filename: str = Field(description="Suggested download filename")
    sheet_name: str | None = Field(default=None, description="Worksheet that was filled")
    cells_written: int = Field(default=0, ge=0, description="Number of assignments applied")

    @property
    def content_disposition(self) -> str:
        """Value for the Content-Disposition response header."""
        return f'attachment; filename="{self.filename}"'


class SheetInfo(BaseModel):
    """
    Metadata about a single worksheet of a template.

    Attributes:
        name: The name of the sheet.
        index: The 0-based index of the sheet in the workbook.
        row_count: Number of rows with data (if known).
        column_count: Number of columns with data (if known).
    """

    name: str = Field(description="The name of the sheet")
    index: int = Field(ge=0, description="The 0-based index of the sheet in the workbook")
    row_count: int | None = Field(default=None, ge=0, description="Number of rows with data")
    column_count: int | None = Field(default=None, ge=0, description="Number of columns with data")


class TemplateInfo(BaseModel):
    """
    Metadata about an uploaded template.

    Attributes:
        filename: Original filename of the upload (if known).
        file_size_bytes: Size of the template in bytes.
        sheet_count: Number of sheets.
        sheets: Per-sheet metadata, in workbook order.
    """

    filename: str | None = Field(default=None, description="Original filename of the upload")
    file_size_bytes: int = Field(ge=0, description="Size of the template in bytes")
    sheet_count: int = Field(ge=0, description="Number of sheets")
    sheets: list[SheetInfo] = Field(default_factory=list, description="Per-sheet metadata")


class FillToolResult(BaseModel):
    """
    Result of a fill that was written to disk (MCP interface).

    Attributes:
        file_path: Absolute path of the written file.
        file_size_bytes: Size of the written file.
        sheet_name: Worksheet that was filled.
        cells_written: Number of assignments applied.
    """

    file_path: str = Field(description="Absolute path of the written file")
    file_size_bytes: int = Field(ge=0, description="Size of the written file")
    sheet_name: str | None = Field(default=None, description="Worksheet that was filled")
    cells_written: int = Field(ge=0, description="Number of assignments applied")


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime


class FillErrorResponse(BaseModel):
    """
    Standard error response model for the API.

    Attributes:
        success: Always False for error responses.
        error_code: Machine-readable error code.
        message: Human-readable error description.
        details: Additional error context.
    """

    success: bool = Field(default=False, description="Always False for error responses")
    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: dict | None = Field(default=None, description="Additional error context")
