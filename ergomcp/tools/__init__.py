"""Built-in query tools and the dispatch façade."""

from .builtin import BUILTIN_TOOLS, BuiltinTool
from .dispatcher import ToolDispatcher, success_result
from .explorer import ExplorerClient

__all__ = [
    "BUILTIN_TOOLS",
    "BuiltinTool",
    "ExplorerClient",
    "ToolDispatcher",
    "success_result",
]
