"""MCP server exposing Ergo query tools and discovered skills over stdio."""

from __future__ import annotations

import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool

from ergomcp.config import Settings, get_settings
from ergomcp.runtime import build_application
from ergomcp.tools import ToolDispatcher

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "ergo-mcp-server"
SERVER_VERSION = "0.1.0"


def build_server(dispatcher: ToolDispatcher) -> Server:
    """Create the MCP server and bind its handlers to the dispatcher."""

    app = Server(SERVER_NAME, version=SERVER_VERSION)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List built-in and discovered tools."""
        return dispatcher.list_tools()

    # Argument contracts are enforced by the dispatcher, not the protocol layer
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> CallToolResult:
        """Handle tool calls."""
        return await dispatcher.call_tool(name, arguments)

    return app


async def run_server(settings: Optional[Settings] = None) -> None:
    """Discover skills, then serve MCP requests on stdin/stdout until EOF."""

    application = build_application(settings or get_settings())
    try:
        await application.registry.load_skills()
        server = build_server(application.dispatcher)

        async with stdio_server() as (read_stream, write_stream):
            LOGGER.info("Ergo MCP Server running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )
    finally:
        await application.aclose()
