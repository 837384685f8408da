"""Configuration exports."""

from .settings import (
    ExplorerSettings,
    NodeSettings,
    ObservabilitySettings,
    Settings,
    SkillSourceSettings,
    get_settings,
)

__all__ = [
    "Settings",
    "SkillSourceSettings",
    "ExplorerSettings",
    "NodeSettings",
    "ObservabilitySettings",
    "get_settings",
]
