"""Runtime assembly for the Ergo MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ergomcp.config import Settings, get_settings
from ergomcp.skills import GitHubSkillSource, SkillRegistry
from ergomcp.skills.native import build_native_executors
from ergomcp.tools import ExplorerClient, ToolDispatcher

LOGGER = logging.getLogger(__name__)


@dataclass
class Application:
    """Wired components sharing one process lifetime."""

    settings: Settings
    registry: SkillRegistry
    explorer: ExplorerClient
    dispatcher: ToolDispatcher

    async def aclose(self) -> None:
        await self.registry.aclose()
        await self.explorer.aclose()


def _create_skill_registry(settings: Settings) -> SkillRegistry:
    source = GitHubSkillSource(
        repo_url=settings.skills.repo_url,
        token=settings.skills.token,
        api_url=settings.skills.api_url,
        timeout=settings.explorer.http_timeout,
    )
    return SkillRegistry(
        source,
        executors=build_native_executors(settings),
        root_path=settings.skills.root_path,
        marker_file=settings.skills.marker_file,
    )


def build_application(settings: Optional[Settings] = None) -> Application:
    """Create the registry, explorer client and dispatcher.

    Skills are not discovered here; call `await app.registry.load_skills()`.
    """
    settings = settings or get_settings()

    registry = _create_skill_registry(settings)
    explorer = ExplorerClient(
        api_url=settings.explorer.api_url,
        price_url=settings.explorer.price_url,
        timeout=settings.explorer.http_timeout,
    )
    dispatcher = ToolDispatcher(registry, explorer)

    LOGGER.debug(f"Application assembled (skills source: {registry.source.label})")
    return Application(
        settings=settings,
        registry=registry,
        explorer=explorer,
        dispatcher=dispatcher,
    )
