"""Copilot Compass MCP server entry point (stdio transport)."""

import asyncio
import logging

from mcp.server.stdio import stdio_server

from .config import get_settings
from .github.http_client import close_http_client
from .mcp.server import create_server
from .observability.logging import configure_logging
from .observability.metrics import set_metrics_enabled
from .reports.generator import build_report_generator

logger = logging.getLogger(__name__)


async def run_stdio():
    """Serve the report tools over stdio until the client disconnects."""
    settings = get_settings()
    generator = build_report_generator(settings)
    server = create_server(generator)

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set: every report will use mock data")

    logger.info("Starting %s v%s (%s)", settings.app_name, settings.app_version, settings.environment)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await close_http_client()
        logger.info("Server stopped")


def main():
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level=settings.get_log_level(),
    )
    set_metrics_enabled(settings.enable_metrics)
    asyncio.run(run_stdio())


if __name__ == "__main__":
    main()
