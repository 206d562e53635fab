"""
Test fixtures and utilities for the fill service tests.

This module provides shared fixtures including in-memory templates,
payloads and service instances.
"""

import tempfile
from collections.abc import Generator
from io import BytesIO
from pathlib import Path

import pytest
import xlsxwriter
from openpyxl import Workbook
from openpyxl.styles import Font

from excel_fill.adapters.calamine_adapter import CalamineAdapter
from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter
from excel_fill.config import FillConfig
from excel_fill.services.fill_service import TemplateFillService


@pytest.fixture
def fill_config() -> FillConfig:
    """
    Create the default FillConfig.

    Returns:
        FillConfig instance.
    """
    return FillConfig()


@pytest.fixture
def fill_service(fill_config: FillConfig) -> TemplateFillService:
    """
    Create a TemplateFillService instance for testing.

    Returns:
        TemplateFillService instance.
    """
    return TemplateFillService(fill_config)


@pytest.fixture
def openpyxl_adapter() -> OpenpyxlAdapter:
    """
    Create an OpenpyxlAdapter instance for testing.

    Returns:
        OpenpyxlAdapter instance.
    """
    return OpenpyxlAdapter()


@pytest.fixture
def calamine_adapter() -> CalamineAdapter:
    """
    Create a CalamineAdapter instance for testing.

    Returns:
        CalamineAdapter instance.
    """
    return CalamineAdapter()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def offer_template() -> bytes:
    """
    Create an offer template with placeholders, styles and a formula.

    Layout of sheet "Tabelle1":
        A1:C1  merged title
        B5     customer placeholder
        F5     offer number placeholder
        A14:E14 column headers (bold)
        C15, E15 pre-filled template text
        F15    formula
        G15    number format

    Returns:
        The template as .xlsx bytes.
    """
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Tabelle1"

    worksheet["A1"] = "Angebot"
    worksheet.merge_cells("A1:C1")
    worksheet["A1"].font = Font(bold=True, size=14)

    worksheet["A5"] = "Kunde:"
    worksheet["B5"] = "{{kunde}}"
    worksheet["E5"] = "Nr.:"
    worksheet["F5"] = "{{nummer}}"

    for column, header in zip("ABCDE", ["Pos", "Titel", "Beschreibung", "Menge", "Maße"]):
        cell = worksheet[f"{column}14"]
        cell.value = header
        cell.font = Font(bold=True)

    worksheet["C15"] = "template-C"
    worksheet["E15"] = "template-E"
    worksheet["F15"] = "=SUM(A15:A20)"
    worksheet["G15"] = 1234.5
    worksheet["G15"].number_format = "#,##0.00"
    worksheet.row_dimensions[15].height = 30

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def multi_sheet_template() -> bytes:
    """
    Create a template with sheets "Summary" and "Tabelle1", in that order.

    Returns:
        The template as .xlsx bytes.
    """
    buffer = BytesIO()
    workbook = xlsxwriter.Workbook(buffer, {"in_memory": True})

    summary = workbook.add_worksheet("Summary")
    summary.write("A1", "Summary")
    summary.write("B5", "summary-B5")

    details = workbook.add_worksheet("Tabelle1")
    details.write("A1", "Details")
    details.write("B5", "details-B5")

    workbook.close()
    return buffer.getvalue()


@pytest.fixture
def offer_payload() -> dict:
    """
    Return a complete offer payload.

    Returns:
        Payload dictionary.
    """
    return {
        "sheetName": "Tabelle1",
        "cells": {
            "F5": "A26101",
            "B5": "Max Mustermann",
            "B6": "Musterstraße 1",
            "B7": "Projekt XY",
        },
        "positionStartRow": 15,
        "positions": [
            {"pos": 1, "title": "Spiegel", "desc": "Antikspiegel", "qty": "2 Stk", "dim": "69x90"},
            {"title": "Rahmen", "desc": "Eiche", "qty": "1 Stk", "dim": "70x100"},
        ],
        "columns": {"pos": "A", "title": "B", "desc": "C", "qty": "D", "dim": "E"},
    }
