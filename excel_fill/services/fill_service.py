"""
Core template fill service layer.

This module provides the TemplateFillService class which encapsulates the
fill pipeline and serves as the single entry point for both the FastAPI and
the MCP interfaces:

    resolve inputs -> build plan -> load template -> apply plan -> serialize

Every stage either completes or raises a FillServiceError; nothing is
retried, and a workbook that fails half-way is simply dropped.

Example:
    service = TemplateFillService()

    document = service.fill({
        "file": template_bytes,
        "payload": '{"cells": {"B5": "Max Mustermann"}}',
    })
    print(document.filename, len(document.content))
"""

import time
from pathlib import Path
from typing import Any, Mapping

from excel_fill.adapters.calamine_adapter import CalamineAdapter
from excel_fill.adapters.openpyxl_adapter import OpenpyxlAdapter
from excel_fill.config import FillConfig
from excel_fill.exceptions.fill_exceptions import (
    FillInternalError,
    FillServiceError,
    MissingTemplateError,
    OutputExistsError,
)
from excel_fill.models.fill_models import FilledDocument, FillToolResult, TemplateInfo
from excel_fill.services.fill_engine import apply_fill_plan
from excel_fill.services.input_resolver import Part, parse_payload, resolve_inputs
from excel_fill.services.plan_builder import build_fill_plan
from excel_fill.services.response_assembler import assemble_response
from excel_fill.utils.log import get_logger

logger = get_logger(__name__)


class TemplateFillService:
    """
    Core service layer for template fill operations.

    The service is transport-agnostic: it receives already-separated parts
    and returns a FilledDocument. It holds no per-request state, so one
    instance can serve concurrent requests.

    Attributes:
        config: Defaults and limits injected into the pipeline.
        fill_adapter: OpenpyxlAdapter used to load, fill and serialize.
        inspect_adapter: CalamineAdapter used for template inspection.

    Example:
        service = TemplateFillService(FillConfig(default_start_row=20))
        info = service.inspect_template(template_bytes)
        document = service.fill_template(template_bytes, {"cells": {"A1": "x"}})
    """

    def __init__(
        self,
        config: FillConfig | None = None,
        fill_adapter: OpenpyxlAdapter | None = None,
        inspect_adapter: CalamineAdapter | None = None,
    ) -> None:
        """
        Initialize the TemplateFillService.

        Args:
            config: Optional FillConfig. If None, uses the built-in defaults.
            fill_adapter: Optional OpenpyxlAdapter instance.
            inspect_adapter: Optional CalamineAdapter instance.
        """
        self.config = config or FillConfig()
        self.fill_adapter = fill_adapter or OpenpyxlAdapter()
        self.inspect_adapter = inspect_adapter or CalamineAdapter()

    def fill(self, parts: Mapping[str, Part]) -> FilledDocument:
        """
        Fill a template from raw request parts.

        Args:
            parts: Mapping from part name to bytes (file parts) or str
                (text fields). The template is read from ``template`` or
                ``file``; the payload from ``payload``.

        Returns:
            FilledDocument containing the filled workbook.

        Raises:
            MissingTemplateError: If no template part was supplied.
            MissingPayloadError: If no payload was supplied.
            InvalidPayloadJsonError: If the payload is not a JSON object.
            CorruptDocumentError: If the template cannot be parsed.
            WorksheetNotFoundError: If the template has no worksheets.
            InvalidCellAddressError: If an assignment address is malformed.
            SerializationError: If the workbook cannot be serialized.
        """
        logger.info("Fill request with parts: %s", sorted(parts))

        inputs = resolve_inputs(parts)
        payload = parse_payload(inputs.payload_text)

        return self.fill_template(inputs.template_bytes, payload)

    def fill_template(
        self,
        template_bytes: bytes,
        payload: Mapping[str, Any],
    ) -> FilledDocument:
        """
        Fill template bytes with an already-parsed payload.

        Args:
            template_bytes: Raw template document.
            payload: Parsed payload JSON object.

        Returns:
            FilledDocument containing the filled workbook.

        Raises:
            FillServiceError: Any pipeline error, see ``fill``.
        """
        start_time = time.time()

        try:
            plan = build_fill_plan(payload, self.config)
            workbook = self.fill_adapter.load(template_bytes)
            worksheet = apply_fill_plan(workbook, plan, self.fill_adapter)

            document = assemble_response(
                workbook,
                self.fill_adapter,
                filename=self.config.output_filename,
                sheet_name=worksheet.title,
                cells_written=len(plan.assignments),
            )

        except FillServiceError:
            raise
        except Exception as e:
            raise FillInternalError(operation="fill template", reason=str(e)) from e

        processing_time = (time.time() - start_time) * 1000
        logger.info(
            "Filled sheet %r: %d cells, %d bytes in %.2f ms",
            document.sheet_name,
            document.cells_written,
            len(document.content),
            processing_time,
        )

        return document

    def fill_file(
        self,
        template_path: str,
        payload: Mapping[str, Any] | str,
        output_path: str,
        overwrite: bool = False,
    ) -> FillToolResult:
        """
        Fill a template file on disk and write the result to another file.

        Args:
            template_path: Path to the template.
            payload: Parsed payload object, or payload JSON text.
            output_path: Where the filled workbook is written.
            overwrite: Whether an existing output file may be replaced.

        Returns:
            FillToolResult describing the written file.

        Raises:
            MissingTemplateError: If the template file does not exist.
            OutputExistsError: If the output exists and overwrite is False.
            FillServiceError: Any pipeline error, see ``fill``.
        """
        source = Path(template_path)
        if not source.is_file():
            raise MissingTemplateError(
                accepted_fields=["template_path"],
                received_fields=["template_path"],
                reason=f"File not found: {template_path}",
            )

        target = Path(output_path)
        if target.exists() and not overwrite:
            raise OutputExistsError(file_path=output_path)

        if isinstance(payload, str):
            payload = parse_payload(payload)

        document = self.fill_template(source.read_bytes(), payload)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(document.content)
        except OSError as e:
            raise FillInternalError(operation="write output file", reason=str(e)) from e

        return FillToolResult(
            file_path=str(target.absolute()),
            file_size_bytes=len(document.content),
            sheet_name=document.sheet_name,
            cells_written=document.cells_written,
        )

    def inspect_template(
        self,
        template_bytes: bytes,
        filename: str | None = None,
    ) -> TemplateInfo:
        """
        Describe the sheets of a template.

        Args:
            template_bytes: Raw template document.
            filename: Original filename of the upload, if known.

        Returns:
            TemplateInfo with sheet names and dimensions.

        Raises:
            CorruptDocumentError: If the template cannot be parsed.
        """
        return self.inspect_adapter.get_template_info(template_bytes, filename=filename)
