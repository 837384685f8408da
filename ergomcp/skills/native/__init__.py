"""Native skill executors."""

from __future__ import annotations

from typing import List

from ergomcp.config.settings import Settings

from .base import NativeSkill
from .node_deployment import DeployNodeArgs, ErgoNodeDeployer, LaunchedProcess


def build_native_executors(settings: Settings) -> List[NativeSkill]:
    """Instantiate every native executor with process-wide settings."""

    return [
        ErgoNodeDeployer(
            base_dir=settings.node.base_dir,
            release_repo=settings.node.release_repo,
            java_bin=settings.node.java_bin,
            api_url=settings.skills.api_url,
            timeout=settings.explorer.http_timeout,
        ),
    ]


__all__ = [
    "NativeSkill",
    "ErgoNodeDeployer",
    "DeployNodeArgs",
    "LaunchedProcess",
    "build_native_executors",
]
