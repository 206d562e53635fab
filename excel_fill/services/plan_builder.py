"""
Fill plan builder.

Turns a parsed, loosely-typed payload into a canonical FillPlan. All
defaulting and shape detection happens here, once; the engine only ever
sees the resulting ordered list of assignments.

Payload shape:
    {
      "sheetName": "Tabelle1",
      "cells": {"F5": "A26101", "B5": "Max Mustermann"},
      "positionStartRow": 15,
      "positions": [
        {"pos": 1, "title": "Spiegel", "desc": "Antikspiegel", "qty": "2 Stk", "dim": "69x90"},
        {"row": 30, "values": {"A": "Summe", "E": 1200}}
      ],
      "columns": {"pos": "A", "title": "B", "desc": "C", "qty": "D", "dim": "E"}
    }

A position entry with both ``row`` and an object-valued ``values`` is an
explicit row record, even if it also carries logical fields. Everything
else is a logical record expanded through ``columns``.

The builder has no side effects and needs no spreadsheet backend.
"""

import json
import math
from typing import Any, Mapping

from excel_fill.config import FillConfig
from excel_fill.models.fill_models import (
    CellAssignment,
    FillPlan,
    FixedCellAssignment,
    PositionCellAssignment,
    RowCellAssignment,
    Scalar,
)
from excel_fill.utils.log import get_logger

logger = get_logger(__name__)

POSITION_NUMBER_FIELD = "pos"


def normalize_value(value: Any) -> Scalar:
    """
    Normalize a payload value into something a cell can hold.

    None becomes an empty string; nested objects and arrays are written as
    compact JSON text.

    Args:
        value: Raw JSON value.

    Returns:
        A str, int, float or bool.
    """
    if value is None:
        return ""
    if isinstance(value, (str, bool, int, float)):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def coerce_row_number(value: Any) -> int | None:
    """
    Coerce a JSON value into a 1-based row number.

    Integers, integral floats and numeric strings are accepted. Booleans,
    fractions, non-finite numbers and values below 1 are rejected.

    Args:
        value: Raw JSON value.

    Returns:
        The row number, or None if the value is not a usable row.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        value = int(value)

    if isinstance(value, int) and value >= 1:
        return value
    return None


def _cell_address(column: Any, row: Any) -> str:
    """Join a column and a row into an A1 address without validating it."""
    column_text = column.strip().upper() if isinstance(column, str) else str(column)
    return f"{column_text}{row}"


def _is_explicit_row(entry: Any) -> bool:
    return isinstance(entry, Mapping) and "row" in entry and isinstance(entry.get("values"), Mapping)


def _resolve_sheet_selector(payload: Mapping[str, Any]) -> str | None:
    sheet_name = payload.get("sheetName")
    if isinstance(sheet_name, str) and sheet_name.strip():
        return sheet_name
    return None


def _resolve_columns(payload: Mapping[str, Any], config: FillConfig) -> Mapping[str, Any]:
    columns = payload.get("columns")
    if columns is None:
        return config.default_columns
    if not isinstance(columns, Mapping):
        logger.warning("Ignoring non-object 'columns' (%s), using defaults", type(columns).__name__)
        return config.default_columns
    return columns


def _resolve_start_row(payload: Mapping[str, Any], config: FillConfig) -> int:
    raw = payload.get("positionStartRow")
    start_row = coerce_row_number(raw)
    if start_row is None:
        if raw is not None:
            logger.warning("Unusable positionStartRow %r, using %d", raw, config.default_start_row)
        return config.default_start_row
    return start_row


def _fixed_assignments(payload: Mapping[str, Any]) -> list[CellAssignment]:
    cells = payload.get("cells")
    if cells is None:
        return []
    if not isinstance(cells, Mapping):
        logger.warning("Ignoring non-object 'cells' (%s)", type(cells).__name__)
        return []

    return [
        FixedCellAssignment(address=str(address), value=normalize_value(value))
        for address, value in cells.items()
    ]


def _explicit_row_assignments(entry: Mapping[str, Any]) -> list[CellAssignment]:
    raw_row = entry["row"]
    row = coerce_row_number(raw_row)
    # An unusable row is kept verbatim so the engine rejects the address.
    row_value: int | str = row if row is not None else str(raw_row)

    return [
        RowCellAssignment(
            address=_cell_address(column, row_value),
            value=normalize_value(value),
            row=row_value,
            column=str(column),
        )
        for column, value in entry["values"].items()
    ]


def _logical_assignments(
    entry: Any,
    index: int,
    row: int,
    columns: Mapping[str, Any],
) -> list[CellAssignment]:
    record = entry if isinstance(entry, Mapping) else {}
    assignments: list[CellAssignment] = []

    for field, column in columns.items():
        value = record.get(field)
        if value is None and field == POSITION_NUMBER_FIELD:
            value = index + 1
        assignments.append(
            PositionCellAssignment(
                address=_cell_address(column, row),
                value=normalize_value(value),
                index=index,
                field=field,
            )
        )

    return assignments


def build_fill_plan(payload: Mapping[str, Any], config: FillConfig | None = None) -> FillPlan:
    """
    Build the canonical fill plan for a parsed payload.

    Args:
        payload: Parsed payload JSON object.
        config: Defaults for absent fields. Uses FillConfig() if None.

    Returns:
        FillPlan with fixed-cell assignments first, then position
        assignments in list order.
    """
    config = config or FillConfig()

    sheet_selector = _resolve_sheet_selector(payload)
    start_row = _resolve_start_row(payload, config)
    columns = _resolve_columns(payload, config)

    positions = payload.get("positions")
    if positions is None:
        positions = []
    elif not isinstance(positions, list):
        logger.warning("Ignoring non-array 'positions' (%s)", type(positions).__name__)
        positions = []

    assignments = _fixed_assignments(payload)

    for index, entry in enumerate(positions):
        if _is_explicit_row(entry):
            assignments.extend(_explicit_row_assignments(entry))
        else:
            assignments.extend(_logical_assignments(entry, index, start_row + index, columns))

    logger.debug(
        "Built fill plan: sheet=%r start_row=%d positions=%d assignments=%d",
        sheet_selector,
        start_row,
        len(positions),
        len(assignments),
    )

    return FillPlan(
        sheet_selector=sheet_selector,
        position_start_row=start_row,
        assignments=assignments,
    )
