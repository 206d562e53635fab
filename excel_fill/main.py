"""
FastAPI application for the template fill service.

This module provides the REST API of the service. The fill endpoint takes a
multipart form with the template and the JSON payload and answers with the
filled workbook as a download.

API Endpoints:
    - GET /: Plain-text liveness check
    - GET /health: Health check
    - POST /fill: Fill a template and download the result
    - POST /template/sheets: List the sheets of an uploaded template

Example:
    To run the server:
        uvicorn excel_fill.main:app --reload

    Or programmatically:
        from excel_fill.main import run_server
        run_server()

    Filling a template:
        curl -F file=@angebot.xlsx -F 'payload={"cells":{"B5":"Max"}}' \\
             http://localhost:3000/fill -o filled.xlsx
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from excel_fill import __version__
from excel_fill.config import get_settings
from excel_fill.exceptions.fill_exceptions import (
    FillInternalError,
    FillServiceError,
    PayloadTooLargeError,
)
from excel_fill.models.fill_models import (
    XLSX_MEDIA_TYPE,
    FillErrorResponse,
    HealthResponse,
    TemplateInfo,
)
from excel_fill.services.fill_service import TemplateFillService
from excel_fill.services.input_resolver import Part, resolve_template
from excel_fill.utils.log import configure_logging, get_logger

SERVICE_NAME = "excel-fill-service"

logger = get_logger(__name__)

fill_service: TemplateFillService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Configures logging and creates the fill service on startup, drops it
    on shutdown.

    Args:
        app: The FastAPI application instance.
    """
    global fill_service
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_dir)
    fill_service = TemplateFillService(settings.to_fill_config())
    logger.info("%s %s started", SERVICE_NAME, __version__)
    yield
    fill_service = None


app = FastAPI(
    title="Excel Fill Service",
    description="""
    Fills spreadsheet templates with caller-supplied values.

    ## Request

    `POST /fill` takes a multipart form:

    - **file** or **template**: the `.xlsx` template
    - **payload**: JSON as a text field or as a file

    ## Payload

    - `sheetName`: target sheet (defaults to the first sheet)
    - `cells`: fixed cell values, e.g. `{"B5": "Max Mustermann"}`
    - `positionStartRow`: first row of the position block (default 15)
    - `positions`: repeating rows, either logical records
      (`pos`, `title`, `desc`, `qty`, `dim`) or `{"row": 30, "values": {"A": "x"}}`
    - `columns`: field-to-column mapping for logical records
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_MULTIPART_FILL_SCHEMA = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "file": {"type": "string", "format": "binary", "description": "Template (.xlsx)"},
                        "template": {"type": "string", "format": "binary", "description": "Template, alternative field name"},
                        "payload": {"type": "string", "description": "Fill payload JSON (text or file)"},
                    },
                }
            }
        },
    }
}

_MULTIPART_TEMPLATE_SCHEMA = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "file": {"type": "string", "format": "binary", "description": "Template (.xlsx)"},
                        "template": {"type": "string", "format": "binary", "description": "Template, alternative field name"},
                    },
                }
            }
        },
    }
}


def get_service() -> TemplateFillService:
    """
    Get the fill service instance.

    Returns:
        The global TemplateFillService instance.

    Raises:
        HTTPException: If the service is not initialized.
    """
    if fill_service is None:
        raise HTTPException(
            status_code=503,
            detail="Fill service is not initialized",
        )
    return fill_service


@app.exception_handler(FillServiceError)
async def handle_fill_error(request: Request, error: FillServiceError) -> JSONResponse:
    """
    Convert FillServiceError to the matching HTTP error response.

    Caller-input errors keep their diagnostic details; internal errors are
    reduced to their message.

    Args:
        request: The request that failed.
        error: The FillServiceError to convert.

    Returns:
        JSONResponse with the error's status code and details.
    """
    if error.status_code >= 500:
        logger.error("Internal error on %s: %s", request.url.path, error.message)
        details = None
    else:
        logger.warning("Rejected %s: %s", request.url.path, error.message)
        details = error.details

    return JSONResponse(
        status_code=error.status_code,
        content=FillErrorResponse(
            success=False,
            error_code=error.error_code,
            message=error.message,
            details=details,
        ).model_dump(),
    )


async def read_form_parts(request: Request, limit: int) -> tuple[dict[str, Part], dict[str, str]]:
    """
    Read a multipart form into a part-name mapping.

    File parts become bytes, plain fields stay text. Only the first part of
    each name is kept.

    Args:
        request: The incoming request.
        limit: Maximum size of a single part in bytes.

    Returns:
        Tuple of (parts, filenames of the file parts).

    Raises:
        PayloadTooLargeError: If any part exceeds the limit.
    """
    parts: dict[str, Part] = {}
    filenames: dict[str, str] = {}

    try:
        async with request.form(max_part_size=limit) as form:
            for name, value in form.multi_items():
                if name in parts:
                    continue
                if isinstance(value, UploadFile):
                    if value.size is not None and value.size > limit:
                        raise PayloadTooLargeError(limit_bytes=limit, field=name)
                    parts[name] = await value.read()
                    if len(parts[name]) > limit:
                        raise PayloadTooLargeError(limit_bytes=limit, field=name)
                    if value.filename:
                        filenames[name] = value.filename
                else:
                    parts[name] = value
    except StarletteHTTPException as e:
        # Oversized text fields are rejected by the multipart parser itself.
        if "maximum size" not in str(e.detail):
            raise
        raise PayloadTooLargeError(limit_bytes=limit) from e

    return parts, filenames


@app.get(
    "/",
    tags=["System"],
    summary="Liveness check",
    response_class=PlainTextResponse,
)
async def root() -> str:
    """Answer with a plain-text liveness message."""
    return f"OK - {SERVICE_NAME} is running"


@app.get(
    "/health",
    tags=["System"],
    summary="Health check",
    response_model=HealthResponse,
)
async def health_check() -> HealthResponse:
    """
    Check the health status of the service.

    Returns:
        HealthResponse containing status and timestamp.
    """
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    )


@app.post(
    "/fill",
    tags=["Fill"],
    summary="Fill a template",
    response_class=Response,
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}, "description": "The filled workbook"},
        400: {"model": FillErrorResponse, "description": "Invalid template or payload"},
        413: {"model": FillErrorResponse, "description": "Upload too large"},
        500: {"model": FillErrorResponse, "description": "Fill error"},
    },
    openapi_extra=_MULTIPART_FILL_SCHEMA,
)
async def fill_template(request: Request) -> Response:
    """
    Fill an uploaded template with the payload and return the result.

    The template is read from the ``template`` or ``file`` part, the payload
    from a ``payload`` text field or file part. The pipeline runs in the
    threadpool since openpyxl is synchronous.

    Args:
        request: The multipart request.

    Returns:
        The filled workbook as an attachment.

    Raises:
        FillServiceError: Converted to a JSON error by handle_fill_error.
    """
    service = get_service()
    parts, _ = await read_form_parts(request, service.config.max_upload_bytes)

    try:
        document = await run_in_threadpool(service.fill, parts)
    except FillServiceError:
        raise
    except Exception as e:
        logger.exception("Unexpected error while filling template")
        raise FillInternalError(operation="process request", reason=str(e)) from e

    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": document.content_disposition},
    )


@app.post(
    "/template/sheets",
    tags=["Template"],
    summary="List the sheets of a template",
    response_model=TemplateInfo,
    responses={
        400: {"model": FillErrorResponse, "description": "Missing or unreadable template"},
        413: {"model": FillErrorResponse, "description": "Upload too large"},
    },
    openapi_extra=_MULTIPART_TEMPLATE_SCHEMA,
)
async def inspect_template(request: Request) -> TemplateInfo:
    """
    Describe the sheets of an uploaded template.

    Lets callers check which ``sheetName`` values a template accepts
    before filling it.

    Args:
        request: The multipart request.

    Returns:
        TemplateInfo with sheet names and dimensions.
    """
    service = get_service()
    parts, filenames = await read_form_parts(request, service.config.max_upload_bytes)

    field, template_bytes = resolve_template(parts)
    return await run_in_threadpool(
        service.inspect_template,
        template_bytes,
        filenames.get(field),
    )


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server.

    Args:
        host: Host to bind to. Defaults to the configured host.
        port: Port to listen on. Defaults to the configured port.
        reload: Whether to enable auto-reload. Defaults to False.

    Example:
        from excel_fill.main import run_server
        run_server(host="127.0.0.1", port=8080)
    """
    settings = get_settings()
    uvicorn.run(
        "excel_fill.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
