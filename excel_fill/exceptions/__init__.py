"""
Custom exceptions for the fill service.

Provides type-safe, descriptive exceptions for error handling throughout
the application.
"""

from excel_fill.exceptions.fill_exceptions import (
    CorruptDocumentError,
    FillInternalError,
    FillServiceError,
    InvalidCellAddressError,
    InvalidPayloadJsonError,
    MissingPayloadError,
    MissingTemplateError,
    OutputExistsError,
    PayloadTooLargeError,
    SerializationError,
    WorksheetNotFoundError,
)

__all__ = [
    "FillServiceError",
    "MissingTemplateError",
    "MissingPayloadError",
    "InvalidPayloadJsonError",
    "WorksheetNotFoundError",
    "CorruptDocumentError",
    "PayloadTooLargeError",
    "OutputExistsError",
    "InvalidCellAddressError",
    "SerializationError",
    "FillInternalError",
]
