"""Dispatch façade merging built-in tools with registry-provided skills."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from mcp.types import CallToolResult, TextContent, Tool
from pydantic import ValidationError

from ergomcp.skills.registry import SkillRegistry
from ergomcp.utils.error_handler import (
    ArgumentValidationError,
    format_validation_error,
    safe_tool_call,
)
from ergomcp.utils.logging_utils import log_tool_call, log_tool_result

from .builtin import BUILTIN_TOOLS, BuiltinTool
from .explorer import ExplorerClient

LOGGER = logging.getLogger(__name__)


def success_result(result: Any) -> CallToolResult:
    """Wrap a tool result as JSON text in the protocol envelope."""

    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(result, indent=2, ensure_ascii=False, default=str))],
    )


class ToolDispatcher:
    """One name -> handler table over built-in query tools and discovered skills.

    Built-ins take precedence over a skill published under the same name.
    call_tool() never raises: every failure becomes an error envelope.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        explorer: ExplorerClient,
        builtins: Optional[Iterable[BuiltinTool]] = None,
    ) -> None:
        self.registry = registry
        self.explorer = explorer
        self._builtins: Dict[str, BuiltinTool] = {
            tool.name: tool for tool in (BUILTIN_TOOLS if builtins is None else builtins)
        }

    def list_tools(self) -> List[Tool]:
        tools = [
            Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in self._builtins.values()
        ]
        for entry in self.registry.list_tools():
            if entry.name in self._builtins:
                LOGGER.debug(f"Skill tool '{entry.name}' shadowed by built-in, not listed")
                continue
            tools.append(Tool(name=entry.name, description=entry.description, inputSchema=entry.input_schema))
        return tools

    @safe_tool_call("dispatcher")
    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> CallToolResult:
        arguments = arguments or {}
        log_tool_call(LOGGER, name, arguments)

        builtin = self._builtins.get(name)
        if builtin is not None:
            try:
                args = builtin.args_model.model_validate(arguments)
            except ValidationError as e:
                raise ArgumentValidationError(
                    f"Invalid arguments for {name}: {format_validation_error(e)}"
                ) from e
            result = await builtin.handler(self.explorer, args)
        else:
            result = await self.registry.execute(name, arguments)

        log_tool_result(LOGGER, name, result)
        return success_result(result)
