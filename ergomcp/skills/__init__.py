"""Skill registry exports."""

from .md_loader import parse_skill, parse_skill_md
from .registry import SkillRegistry
from .remote import GitHubSkillSource
from .schema import Catalog, DispatchEntry, SkillDescriptor, normalize_tool_name

__all__ = [
    "SkillRegistry",
    "GitHubSkillSource",
    "SkillDescriptor",
    "DispatchEntry",
    "Catalog",
    "normalize_tool_name",
    "parse_skill",
    "parse_skill_md",
]
