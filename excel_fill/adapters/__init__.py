"""
Adapters for spreadsheet engines.

Implements the adapter pattern for the two engines the service uses:
- OpenpyxlAdapter: load, fill and serialize templates (preserves styles and formulas)
- CalamineAdapter: fast, read-only template inspection using python-calamine (Rust-based)
"""

from excel_fill.adapters.calamine_adapter import CalamineAdapter
from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter

__all__ = [
    "CalamineAdapter",
    "OpenpyxlAdapter",
]
