"""
Custom exceptions for template fill operations.

This module defines a hierarchy of exceptions for the error conditions of
the fill pipeline. All exceptions inherit from FillServiceError so that the
HTTP and MCP layers can convert any of them with a single except clause.

Each exception declares the HTTP status class it maps to: caller-input
errors are 4xx and carry diagnostics the caller can act on, internal errors
are 500 and carry only a message.

Example:
    try:
        service.fill(parts)
    except WorksheetNotFoundError as e:
        logger.warning("No worksheet: %s", e.available_sheets)
    except FillServiceError as e:
        logger.error("Fill failed: %s", e)
"""

from typing import Any


class FillServiceError(Exception):
    """
    Base exception for all fill service errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code for API responses.
        details: Optional additional context about the error.
        status_code: HTTP status class for the transport layer.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "FILL_ERROR",
        details: dict | None = None,
    ) -> None:
        """
        Initialize the FillServiceError.

        Args:
            message: Human-readable error description.
            error_code: Machine-readable error code for API responses.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """
        Convert exception to a dictionary for API responses.

        Returns:
            Dictionary containing error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class MissingTemplateError(FillServiceError):
    """
    Raised when no usable template part was supplied.

    Attributes:
        accepted_fields: Field names that are accepted for the template.
        received_fields: Field names that were present in the request.
    """

    status_code = 400

    def __init__(
        self,
        accepted_fields: list[str],
        received_fields: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        self.accepted_fields = accepted_fields
        self.received_fields = received_fields or []

        message = f"Missing template file. Expected one of: {', '.join(accepted_fields)}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code="MISSING_TEMPLATE",
            details={
                "accepted_fields": accepted_fields,
                "received_fields": self.received_fields,
                "reason": reason,
            },
        )


class MissingPayloadError(FillServiceError):
    """
    Raised when the payload is supplied neither as text nor as a file.

    Attributes:
        received_fields: Field names that were present in the request.
    """

    status_code = 400

    def __init__(self, received_fields: list[str] | None = None) -> None:
        self.received_fields = received_fields or []

        super().__init__(
            message="Missing field 'payload' (json string or file)",
            error_code="MISSING_PAYLOAD",
            details={"received_fields": self.received_fields},
        )


class InvalidPayloadJsonError(FillServiceError):
    """
    Raised when the payload cannot be decoded into a JSON object.

    Attributes:
        reason: Decoder error message.
        raw_excerpt: Bounded prefix of the raw payload text.
    """

    status_code = 400
    EXCERPT_LENGTH = 300

    def __init__(self, reason: str, raw_text: str | None = None) -> None:
        self.reason = reason
        self.raw_excerpt = (raw_text or "")[: self.EXCERPT_LENGTH]

        super().__init__(
            message=f"Field 'payload' is not valid JSON - {reason}",
            error_code="INVALID_PAYLOAD_JSON",
            details={
                "reason": reason,
                "raw_excerpt": self.raw_excerpt,
            },
        )


class WorksheetNotFoundError(FillServiceError):
    """
    Raised when the template has no worksheet the fill could target.

    Attributes:
        sheet_name: The requested sheet name, if any.
        available_sheets: Worksheets present in the template.
    """

    status_code = 400

    def __init__(
        self,
        sheet_name: str | None,
        available_sheets: list[str] | None = None,
    ) -> None:
        self.sheet_name = sheet_name
        self.available_sheets = available_sheets or []

        requested = f"'{sheet_name}'" if sheet_name else "(first sheet)"
        message = f"Worksheet not found. Tried {requested} and fallback to first sheet"
        if self.available_sheets:
            message += f". Available sheets: {', '.join(self.available_sheets)}"

        super().__init__(
            message=message,
            error_code="WORKSHEET_NOT_FOUND",
            details={
                "sheet_name": sheet_name,
                "available_sheets": self.available_sheets,
            },
        )


class CorruptDocumentError(FillServiceError):
    """
    Raised when the spreadsheet codec cannot parse the template bytes.

    Attributes:
        reason: The codec's underlying message.
        expected_formats: Formats the codec can read.
    """

    status_code = 400

    def __init__(
        self,
        reason: str,
        expected_formats: list[str] | None = None,
    ) -> None:
        self.reason = reason
        self.expected_formats = expected_formats or [".xlsx", ".xlsm"]

        super().__init__(
            message=f"Template is not a readable spreadsheet - {reason}",
            error_code="CORRUPT_DOCUMENT",
            details={
                "reason": reason,
                "expected_formats": self.expected_formats,
            },
        )


class PayloadTooLargeError(FillServiceError):
    """
    Raised by the transport layer when an upload exceeds the size limit.

    Attributes:
        limit_bytes: Configured maximum upload size.
        field: Name of the offending part, or None for the whole request.
    """

    status_code = 413

    def __init__(self, limit_bytes: int, field: str | None = None) -> None:
        self.limit_bytes = limit_bytes
        self.field = field

        target = f"Field '{field}'" if field else "Request body"
        super().__init__(
            message=f"{target} exceeds the upload limit of {limit_bytes} bytes",
            error_code="PAYLOAD_TOO_LARGE",
            details={"limit_bytes": limit_bytes, "field": field},
        )


class InvalidCellAddressError(FillServiceError):
    """
    Raised when an assignment targets a malformed cell address.

    Attributes:
        address: The offending address.
    """

    def __init__(self, address: Any, reason: str | None = None) -> None:
        self.address = address
        self.reason = reason

        message = f"Invalid cell address: {address!r}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code="INVALID_CELL_ADDRESS",
            details={"address": str(address)},
        )


class SerializationError(FillServiceError):
    """Raised when the filled workbook cannot be written back to bytes."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            message=f"Failed to serialize filled workbook - {reason}",
            error_code="SERIALIZATION_ERROR",
        )


class FillInternalError(FillServiceError):
    """Raised for any unexpected failure inside the fill pipeline."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(
            message=f"Failed to {operation}: {reason}",
            error_code="INTERNAL_ERROR",
        )


class OutputExistsError(FillServiceError):
    """
    Raised when a fill would overwrite an existing output file.

    Attributes:
        file_path: The existing output path.
    """

    status_code = 400

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(
            message=f"Output file already exists and overwrite is False: {file_path}",
            error_code="OUTPUT_EXISTS",
            details={"file_path": file_path},
        )
