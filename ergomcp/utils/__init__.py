"""Utilities for the Ergo MCP server."""

from .logging_utils import (
    log_error,
    log_tool_call,
    log_tool_result,
    setup_logging,
)
from .error_handler import (
    safe_tool_call,
    error_result,
    format_validation_error,
    ErgoMCPError,
    DiscoveryError,
    SkillNotFoundError,
    ArgumentValidationError,
    ExplorerError,
    ArtifactNotFoundError,
    DownloadError,
    SpawnError,
)

__all__ = [
    "setup_logging",
    "log_tool_call",
    "log_tool_result",
    "log_error",
    "safe_tool_call",
    "error_result",
    "format_validation_error",
    "ErgoMCPError",
    "DiscoveryError",
    "SkillNotFoundError",
    "ArgumentValidationError",
    "ExplorerError",
    "ArtifactNotFoundError",
    "DownloadError",
    "SpawnError",
]
