#!/usr/bin/env python3
"""Ergo MCP server entry point.

Usage:
    python main.py                 # serve MCP over stdio
    python main.py --list-tools    # discover skills, print the tool listing and exit

MCP client config (stdio):
    command: python
    args: ["main.py"]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from ergomcp.config import get_settings
from ergomcp.runtime import build_application
from ergomcp.server import run_server
from ergomcp.utils import log_error, setup_logging


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Ergo MCP server - blockchain queries and remote skills over stdio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Discover skills, print the merged tool listing as JSON and exit",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ...); overrides LOG_LEVEL",
    )
    return parser.parse_args(argv)


async def list_tools(settings) -> int:
    application = build_application(settings)
    try:
        await application.registry.load_skills()
        tools = application.dispatcher.list_tools()
        print(json.dumps([tool.model_dump(exclude_none=True) for tool in tools], indent=2, ensure_ascii=False))
    finally:
        await application.aclose()
    return 0


def main(argv=None) -> int:
    """Entry point that runs the server (or the listing) on a fresh event loop."""
    args = parse_args(argv)
    settings = get_settings()
    logger = setup_logging(
        level=args.log_level or settings.observability.log_level,
        log_dir=settings.observability.log_dir,
    )

    try:
        if args.list_tools:
            return asyncio.run(list_tools(settings))
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        log_error(logger, e, context="main()")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
