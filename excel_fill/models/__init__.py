"""
Data models for the fill service.

Contains Pydantic models for the fill plan and for request/response
validation and serialization.
"""

from excel_fill.models.fill_models import (
    XLSX_MEDIA_TYPE,
    CellAssignment,
    FilledDocument,
    FillErrorResponse,
    FillPlan,
    FillToolResult,
    FixedCellAssignment,
    HealthResponse,
    PositionCellAssignment,
    RowCellAssignment,
    SheetInfo,
    TemplateInfo,
)

__all__ = [
    "XLSX_MEDIA_TYPE",
    "CellAssignment",
    "FixedCellAssignment",
    "PositionCellAssignment",
    "RowCellAssignment",
    "FillPlan",
    "FilledDocument",
    "SheetInfo",
    "TemplateInfo",
    "FillToolResult",
    "HealthResponse",
    "FillErrorResponse",
]
