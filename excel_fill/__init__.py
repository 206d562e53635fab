"""
excel-fill: Spreadsheet template fill service.

This package fills .xlsx templates with caller-supplied values through both
a REST API (FastAPI) and MCP (Model Context Protocol) interface.

Architecture:
    - Service Layer pattern: one fill pipeline shared by HTTP and MCP
    - openpyxl for loading, filling and saving templates with styles intact
    - python-calamine for fast, read-only template inspection
"""

__version__ = "0.1.0"
