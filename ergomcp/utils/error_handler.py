"""Unified error handling for the dispatch façade, skills and executors."""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable

from mcp.types import CallToolResult, TextContent
from pydantic import ValidationError

LOGGER = logging.getLogger(__name__)


class ErgoMCPError(Exception):
    """Base exception for Ergo MCP errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class DiscoveryError(ErgoMCPError):
    """A directory or file of the remote skill source could not be read."""
    pass


class SkillNotFoundError(ErgoMCPError):
    """No catalog entry matches the requested tool name."""

    def __init__(self, tool_name: str):
        super().__init__(f"Skill not found: {tool_name}", f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ArgumentValidationError(ErgoMCPError):
    """Tool arguments violate the tool's declared input contract."""
    pass


class ExplorerError(ErgoMCPError):
    """Block explorer or price API request failed."""
    pass


class ArtifactNotFoundError(ErgoMCPError):
    """No downloadable node binary exists for the requested release."""
    pass


class DownloadError(ErgoMCPError):
    """Release lookup or artifact download failed in transport."""
    pass


class SpawnError(ErgoMCPError):
    """The external node process could not be started."""
    pass


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into "field: reason; ..." text."""

    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


def error_result(message: str) -> CallToolResult:
    """Build the uniform protocol error envelope."""

    return CallToolResult(
        content=[TextContent(type="text", text=f"Error: {message}")],
        isError=True,
    )


def safe_tool_call(scope: str):
    """Decorator turning any exception of an async tool handler into an error envelope.

    Expected failures (ErgoMCPError) are logged without a traceback and surface
    their user_message; anything else is logged with the full traceback.

    Args:
        scope: Name used in log records

    Example:
        @safe_tool_call("dispatcher")
        async def call_tool(self, name, arguments) -> CallToolResult:
            ...
    """
    def decorator(func: Callable[..., Awaitable[CallToolResult]]) -> Callable[..., Awaitable[CallToolResult]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> CallToolResult:
            try:
                return await func(*args, **kwargs)
            except ErgoMCPError as e:
                LOGGER.error(f"{scope} tool error: {e}")
                return error_result(e.user_message)
            except Exception as e:
                LOGGER.exception(f"{scope} unexpected error", exc_info=e)
                return error_result(str(e) or type(e).__name__)
        return wrapper
    return decorator
