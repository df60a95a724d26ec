"""MCP tool surface for Copilot Compass reports."""

import json
import logging
import time
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server
from pydantic import ValidationError

from ..reports.generator import ReportGenerator
from ..reports.models import ReportRequest
from ..reports.schemas import format_validation_errors

logger = logging.getLogger(__name__)

SERVER_NAME = "copilot-compass"

GENERATE_REPORT_TOOL = "generate_copilot_report"
REFRESH_REPORT_TOOL = "refresh_report"
# app-only tools are callable from the report view and hidden from the model
APP_ONLY_META = {"ui": {"visibility": ["app"]}}

REPORT_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "enterpriseSlug": {
            "type": "string",
            "description": "The GitHub Enterprise slug (e.g., 'my-enterprise')",
        },
        "orgName": {
            "type": "string",
            "description": "Optional organization name to filter metrics to a single org",
        },
        "dateRange": {
            "type": "object",
            "description": "Date range for the report",
            "properties": {
                "from": {"type": "string", "format": "date", "description": "Start date (YYYY-MM-DD)"},
                "to": {"type": "string", "format": "date", "description": "End date (YYYY-MM-DD)"},
            },
            "required": ["from", "to"],
        },
    },
    "required": ["enterpriseSlug", "dateRange"],
}


class CompassServer:
    """MCP server exposing the report tools for one ReportGenerator."""

    def __init__(self, generator: ReportGenerator):
        self.generator = generator
        self.server = Server(SERVER_NAME)
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=GENERATE_REPORT_TOOL,
                title="Generate Copilot Report",
                description=(
                    "Generate a comprehensive GitHub Copilot usage report for an enterprise "
                    "or organization. Returns usage metrics including active users, code "
                    "completions, chat activity, language and editor breakdowns and daily trends."
                ),
                inputSchema=REPORT_INPUT_SCHEMA,
            ),
            types.Tool(
                name=REFRESH_REPORT_TOOL,
                title="Refresh Report",
                description="Refresh the Copilot metrics report with new parameters",
                inputSchema=REPORT_INPUT_SCHEMA,
                _meta=APP_ONLY_META,
            ),
        ]

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """Run a report tool and return the report JSON as a single text block."""
        if name not in (GENERATE_REPORT_TOOL, REFRESH_REPORT_TOOL):
            return [_error_content(f"Unknown tool: {name}")]

        try:
            request = ReportRequest.model_validate(arguments or {})
        except ValidationError as e:
            message = "Invalid arguments: " + "; ".join(format_validation_errors(e.errors(include_url=False)))
            logger.warning("Tool call rejected: %s - %s", name, message)
            return [_error_content(message)]

        logger.info(
            "Tool call: %s (%s %s, %s..%s)",
            name,
            request.scope_type,
            request.scope_id,
            request.date_range.from_,
            request.date_range.to,
        )

        start = time.perf_counter()
        report = await self.generator.generate_report(request)
        logger.info(
            "Tool call complete: %s (%d day(s), %s data, %.0f ms)",
            name,
            len(report.daily_metrics),
            report.data_source,
            (time.perf_counter() - start) * 1000,
        )
        return [types.TextContent(type="text", text=report.to_json())]


def _error_content(message: str) -> types.TextContent:
    return types.TextContent(type="text", text=json.dumps({"error": message}))


def create_server(generator: ReportGenerator) -> Server:
    """Build the low-level MCP server with the report tools registered."""
    return CompassServer(generator).server
