"""
MCP (Model Context Protocol) server for template fill operations.

This module exposes the fill pipeline as MCP tools so that AI agents can
fill templates stored on the local filesystem. It provides the same
functionality as the REST API but works on file paths instead of uploads.

MCP Tools:
    - fill_template: Fill a template file and write the result to disk
    - list_template_sheets: List the sheets of a template file

Example:
    To run the MCP server:
        python -m excel_fill.mcp_server

    Or programmatically:
        from excel_fill.mcp_server import run_mcp_server
        run_mcp_server()
"""

import asyncio
import json
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
)

from excel_fill.config import get_settings
from excel_fill.exceptions.fill_exceptions import FillServiceError, MissingTemplateError
from excel_fill.services.fill_service import TemplateFillService
from excel_fill.utils.log import configure_logging, get_logger

logger = get_logger(__name__)


class MCPFillServer:
    """
    MCP server implementation for template fill operations.

    This class wraps the TemplateFillService and exposes it through the MCP
    protocol.

    Attributes:
        service: The underlying TemplateFillService instance.
        server: The MCP Server instance.

    Example:
        mcp_server = MCPFillServer()
        await mcp_server.run()
    """

    def __init__(self, service: TemplateFillService | None = None) -> None:
        """
        Initialize the MCP Fill Server.

        Args:
            service: Optional TemplateFillService instance. If None, creates
                one from the process settings.
        """
        self.service = service or TemplateFillService(get_settings().to_fill_config())
        self.server = Server("excel-fill-mcp-server")
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP request handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return the list of available fill tools."""
            return self._get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Execute a tool and return the result."""
            result = await self._execute_tool(name, arguments)
            return [TextContent(type="text", text=json.dumps(result, default=str, indent=2))]

    def _get_tools(self) -> list[Tool]:
        """
        Get the list of available fill tools.

        Returns:
            List of MCP Tool definitions.
        """
        return [
            Tool(
                name="fill_template",
                description=(
                    "Fill an .xlsx template with values and write the result to a new file. "
                    "The payload sets fixed cells ('cells': {'B5': 'Max'}) and repeating "
                    "rows ('positions') starting at 'positionStartRow' (default 15). "
                    "Only the addressed cells change; styles and formulas are kept."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "template_path": {
                            "type": "string",
                            "description": "Path to the .xlsx template",
                        },
                        "payload": {
                            "type": ["object", "string"],
                            "description": (
                                "Fill payload as an object or JSON string with optional keys "
                                "sheetName, cells, positionStartRow, positions and columns"
                            ),
                        },
                        "output_path": {
                            "type": "string",
                            "description": "Path where the filled workbook will be written",
                        },
                        "overwrite": {
                            "type": "boolean",
                            "description": "Whether to overwrite an existing output file (default: false)",
                        },
                    },
                    "required": ["template_path", "payload", "output_path"],
                },
            ),
            Tool(
                name="list_template_sheets",
                description=(
                    "List the sheets of an .xlsx template with their dimensions, "
                    "to choose a 'sheetName' for fill_template."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "template_path": {
                            "type": "string",
                            "description": "Path to the template",
                        },
                    },
                    "required": ["template_path"],
                },
            ),
        ]

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a tool by name with the given arguments.

        Args:
            name: The name of the tool to execute.
            arguments: The arguments to pass to the tool.

        Returns:
            Dictionary containing the tool execution result.
        """
        try:
            if name == "fill_template":
                result = await asyncio.to_thread(
                    self.service.fill_file,
                    template_path=arguments["template_path"],
                    payload=arguments["payload"],
                    output_path=arguments["output_path"],
                    overwrite=arguments.get("overwrite", False),
                )
                return {"success": True, "data": result.model_dump()}

            elif name == "list_template_sheets":
                path = Path(arguments["template_path"])
                if not path.is_file():
                    raise MissingTemplateError(
                        accepted_fields=["template_path"],
                        received_fields=["template_path"],
                        reason=f"File not found: {path}",
                    )
                result = await asyncio.to_thread(
                    self.service.inspect_template,
                    path.read_bytes(),
                    path.name,
                )
                return {"success": True, "data": result.model_dump()}

            else:
                return {
                    "success": False,
                    "error": {
                        "error_code": "UNKNOWN_TOOL",
                        "message": f"Unknown tool: {name}",
                    },
                }

        except FillServiceError as e:
            logger.warning("Tool %s failed: %s", name, e.message)
            return {
                "success": False,
                "error": e.to_dict(),
            }
        except Exception as e:
            logger.exception("Tool %s failed unexpectedly", name)
            return {
                "success": False,
                "error": {
                    "error_code": "INTERNAL_ERROR",
                    "message": str(e),
                },
            }

    async def run(self) -> None:
        """
        Run the MCP server using stdio transport.

        This method starts the server and blocks until it is terminated.
        It uses stdin/stdout for communication with the MCP client.
        """
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def run_mcp_server() -> None:
    """
    Run the MCP fill server.

    This is the entry point for running the MCP server from the command line.

    Example:
        python -m excel_fill.mcp_server
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_dir)
    server = MCPFillServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    run_mcp_server()
