"""Shared helpers for the excel_fill package."""
