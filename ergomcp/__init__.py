"""Top-level package exports for ergomcp."""

from .runtime.app import build_application
from .server import build_server, run_server

__all__ = ["build_application", "build_server", "run_server"]
