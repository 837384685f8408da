"""Skill registry supporting remote discovery and tool dispatch."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional

from ergomcp.utils.error_handler import SkillNotFoundError

from .md_loader import parse_skill
from .native.base import NativeSkill
from .remote import GitHubSkillSource
from .schema import (
    Catalog,
    DiscoveryReport,
    DispatchBinding,
    DispatchEntry,
    InstructionFallback,
    NativeHandler,
    RemoteEntry,
    SkillDescriptor,
)

LOGGER = logging.getLogger(__name__)


def generic_input_schema() -> Dict[str, Any]:
    """Free-text contract for skills executed as manual instructions."""

    return {
        "type": "object",
        "properties": {
            "context": {
                "type": "string",
                "description": "Context or arguments for the skill execution.",
            }
        },
    }


class SkillRegistry:
    """Remote-backed registry publishing an immutable catalog snapshot.

    The catalog is rebuilt wholesale by reload() and swapped in with a single
    assignment; callers of list_tools()/execute() always see one consistent
    snapshot, even while a rebuild is in progress.
    """

    def __init__(
        self,
        source: GitHubSkillSource,
        executors: Optional[Iterable[NativeSkill]] = None,
        root_path: str = "skills",
        marker_file: str = "SKILL.md",
    ) -> None:
        self.source = source
        self.root_path = root_path
        self.marker_file = marker_file
        self._executors: Dict[str, NativeSkill] = {}
        for executor in executors or ():
            self._executors[executor.executor_id] = executor
        self._catalog = Catalog.empty()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    async def load_skills(self) -> None:
        """Discover skills and replace the catalog. Never raises."""

        LOGGER.info(f"Loading skills from GitHub: {self.source.label}/{self.root_path}")
        try:
            catalog = await self.reload()
        except Exception as e:
            LOGGER.error(f"Failed to load skills from GitHub: {e}")
            return

        LOGGER.info(f"Loaded {len(catalog)} skills from GitHub registry.")
        if catalog.report.errors:
            LOGGER.warning(
                f"Skill discovery incomplete: {len(catalog.report.errors)} location(s) could not be read"
            )

    async def reload(self) -> Catalog:
        """Traverse the remote source and publish a new catalog snapshot."""

        skills, report = await self._discover()
        catalog = self._build_catalog(skills, report)
        self._catalog = catalog
        return catalog

    def list_tools(self) -> List[DispatchEntry]:
        """Return tool cards for the current snapshot, in discovery order."""

        return [binding.to_entry() for binding in self._catalog.bindings.values()]

    def get(self, skill_name: str) -> Optional[SkillDescriptor]:
        """Return a skill by its declared name."""

        return self._catalog.skills.get(skill_name)

    async def execute(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a skill tool.

        Natively bound skills are delegated to their executor; any other skill
        returns its document as manual instructions without being performed.

        Raises:
            SkillNotFoundError: If no skill is published under tool_name
        """
        catalog = self._catalog
        binding = catalog.resolve(tool_name)
        if binding is None:
            raise SkillNotFoundError(tool_name)

        skill = catalog.skills[binding.skill_name]
        if isinstance(binding.executor, NativeHandler):
            executor = self._executors[binding.executor.executor_id]
            LOGGER.info(f"Executing skill '{skill.name}' natively via {executor.executor_id}")
            return await executor.run(arguments or {})

        return {
            "status": "manual_instructions",
            "description": f"No automated implementation for {skill.name} yet.",
            "instructions": skill.raw_content,
        }

    async def aclose(self) -> None:
        for executor in self._executors.values():
            await executor.aclose()
        await self.source.aclose()

    # Discovery

    async def _discover(self) -> tuple[Dict[str, SkillDescriptor], DiscoveryReport]:
        skills: Dict[str, SkillDescriptor] = {}
        errors: List[str] = []
        directories = 0

        async def scan(path: str) -> None:
            nonlocal directories
            listing = await self.source.list_directory(path)
            directories += 1
            if not listing.ok:
                errors.append(listing.error)
                return

            for entry in listing.entries:
                if entry.type == "dir":
                    await scan(entry.path)
                elif entry.name == self.marker_file:
                    skill = await self._fetch_skill(entry, errors)
                    if skill is not None:
                        skills[skill.name] = skill

        await scan(self.root_path)
        report = DiscoveryReport(
            directories_scanned=directories,
            files_parsed=len(skills),
            errors=tuple(errors),
        )
        return skills, report

    async def _fetch_skill(self, entry: RemoteEntry, errors: List[str]) -> Optional[SkillDescriptor]:
        if not entry.content_ref:
            errors.append(f"No content reference for {entry.path}")
            return None

        content = await self.source.fetch_content(entry.content_ref)
        if content is None:
            errors.append(f"Failed to fetch {entry.path}")
            return None

        skill = parse_skill(content, entry.path)
        if skill is not None:
            LOGGER.debug(f"Loaded skill '{skill.name}' from {entry.path}")
        return skill

    # Dispatch table

    def _match_executor(self, skill: SkillDescriptor) -> Optional[NativeSkill]:
        for executor in self._executors.values():
            if skill.name == executor.skill_name or skill.tool_name == executor.tool_name:
                return executor
        return None

    def _build_catalog(self, skills: Dict[str, SkillDescriptor], report: DiscoveryReport) -> Catalog:
        bindings: Dict[str, DispatchBinding] = {}
        aliases: Dict[str, str] = {}

        for skill in skills.values():
            tool_name = skill.tool_name
            if not tool_name:
                LOGGER.warning(f"Skill '{skill.name}' has no usable tool name, skipping")
                continue

            executor = self._match_executor(skill)
            if executor is not None:
                binding = DispatchBinding(
                    tool_name=executor.tool_name,
                    skill_name=skill.name,
                    description=skill.description,
                    input_schema=executor.input_schema,
                    executor=NativeHandler(executor.executor_id),
                )
                if tool_name != executor.tool_name:
                    aliases[tool_name] = executor.tool_name
            else:
                binding = DispatchBinding(
                    tool_name=tool_name,
                    skill_name=skill.name,
                    description=skill.description,
                    input_schema=generic_input_schema(),
                    executor=InstructionFallback(),
                )

            # Colliding tool names: the later skill replaces the earlier entry
            bindings[binding.tool_name] = binding

        return Catalog(
            version=self._catalog.version + 1,
            skills=MappingProxyType(dict(skills)),
            bindings=MappingProxyType(bindings),
            aliases=MappingProxyType(aliases),
            report=report,
        )
