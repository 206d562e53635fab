"""
Service layer for template fill operations.

Contains the core fill pipeline, decoupled from transport layers
(HTTP/MCP).
"""

from excel_fill.services.fill_service import TemplateFillService

__all__ = [
    "TemplateFillService",
]
