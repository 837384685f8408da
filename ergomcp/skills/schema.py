"""Skill metadata, dispatch table and catalog schema definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DESCRIPTION = "No description provided"

_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def normalize_tool_name(name: str) -> str:
    """Derive the public dispatch key from a declared skill name.

    "Local-Ergo Node_Deployment" -> "local_ergo_node_deployment"
    """
    return _SEPARATOR_RE.sub("_", name.lower()).strip("_")


class SkillDescriptor(BaseModel):
    """A skill discovered in the remote source.

    Identity is the `name` declared in the SKILL.md header, not the file path.
    Descriptors are immutable; re-discovery replaces them wholesale.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = DEFAULT_DESCRIPTION
    raw_content: str
    source_path: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def tool_name(self) -> str:
        return normalize_tool_name(self.name)


class DispatchEntry(BaseModel):
    """Lightweight tool card returned by tool listing."""

    name: str
    description: str
    input_schema: Dict[str, Any]


class RemoteEntry(BaseModel):
    """One item of a remote directory listing."""

    name: str
    path: str
    type: Literal["file", "dir"]
    content_ref: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DirectoryListing:
    """Result of listing a remote directory; `error` is set when the listing failed."""

    path: str
    entries: List[RemoteEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class NativeHandler:
    """Execution is delegated to a registered native executor."""

    executor_id: str


@dataclass(frozen=True, slots=True)
class InstructionFallback:
    """Execution returns the skill document for the caller to act on."""


ExecutorRef = Union[NativeHandler, InstructionFallback]


@dataclass(frozen=True, slots=True)
class DispatchBinding:
    """Dispatch table row: public tool name to contract and executor."""

    tool_name: str
    skill_name: str
    description: str
    input_schema: Mapping[str, Any]
    executor: ExecutorRef

    def to_entry(self) -> DispatchEntry:
        return DispatchEntry(
            name=self.tool_name,
            description=self.description,
            input_schema=dict(self.input_schema),
        )


@dataclass(frozen=True, slots=True)
class DiscoveryReport:
    """Outcome of one traversal of the remote source."""

    directories_scanned: int = 0
    files_parsed: int = 0
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class Catalog:
    """Immutable, versioned snapshot of discovered skills and their dispatch table."""

    version: int
    skills: Mapping[str, SkillDescriptor]
    bindings: Mapping[str, DispatchBinding]
    aliases: Mapping[str, str]
    report: DiscoveryReport = DiscoveryReport()

    @classmethod
    def empty(cls) -> "Catalog":
        return cls(
            version=0,
            skills=MappingProxyType({}),
            bindings=MappingProxyType({}),
            aliases=MappingProxyType({}),
        )

    def __len__(self) -> int:
        return len(self.skills)

    def resolve(self, tool_name: str) -> Optional[DispatchBinding]:
        """Look up a binding by public name or alias."""

        binding = self.bindings.get(tool_name)
        if binding is None and tool_name in self.aliases:
            binding = self.bindings.get(self.aliases[tool_name])
        return binding

    def tool_names(self) -> List[str]:
        return list(self.bindings)
