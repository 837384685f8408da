"""Interface for skills backed by a local, automated implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class NativeSkill(ABC):
    """A skill action performed locally instead of returned as instructions.

    A discovered skill is bound to an executor when its declared name equals
    `skill_name` or its normalized tool name equals `tool_name`. Bound skills
    are published under `tool_name` with `input_schema` as their contract.
    """

    executor_id: str
    skill_name: str
    tool_name: str

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the arguments accepted by run()."""
        pass

    @abstractmethod
    async def run(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Perform the action. Failures are reported in the result, never raised."""
        pass

    async def aclose(self) -> None:
        """Release any resources held by the executor."""
        pass
