"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ergomcp.skills.schema import DirectoryListing, RemoteEntry  # noqa: E402


NODE_SKILL_MD = """---
name: local-ergo-node-deployment
description: Deploy a local Ergo node
---

# Local Ergo Node Deployment

1. Download the node jar.
2. Write ergo.conf.
3. Start the node.
"""

PRICE_ALERT_MD = """---
name: price-alert
description: Alert on ERG price moves
---

# Price Alert

Poll the price API and notify when ERG crosses a threshold.
"""


class FakeSkillSource:
    """In-memory stand-in for GitHubSkillSource.

    `tree` maps a directory path to its entries; `files` maps a content ref to
    file text. Paths listed in `failing` return an errored listing.
    """

    label = "test/skills"

    def __init__(
        self,
        tree: Dict[str, List[RemoteEntry]],
        files: Dict[str, str],
        failing: Optional[List[str]] = None,
    ):
        self.tree = tree
        self.files = files
        self.failing = set(failing or [])
        self.listed: List[str] = []
        self.closed = False

    async def list_directory(self, path: str) -> DirectoryListing:
        self.listed.append(path)
        if path in self.failing:
            return DirectoryListing(path=path, error=f"HTTP 500 listing '{path}'")
        return DirectoryListing(path=path, entries=list(self.tree.get(path, [])))

    async def fetch_content(self, content_ref: str) -> Optional[str]:
        return self.files.get(content_ref)

    async def aclose(self) -> None:
        self.closed = True


def dir_entry(path: str) -> RemoteEntry:
    return RemoteEntry(name=path.rsplit("/", 1)[-1], path=path, type="dir")


def file_entry(path: str) -> RemoteEntry:
    return RemoteEntry(
        name=path.rsplit("/", 1)[-1],
        path=path,
        type="file",
        content_ref=f"raw://{path}",
    )


@pytest.fixture
def two_skill_source():
    """Remote tree with the node deployment skill and one instruction-only skill."""
    tree = {
        "skills": [dir_entry("skills/node"), dir_entry("skills/alerts"), file_entry("skills/README.md")],
        "skills/node": [file_entry("skills/node/SKILL.md")],
        "skills/alerts": [dir_entry("skills/alerts/price")],
        "skills/alerts/price": [file_entry("skills/alerts/price/SKILL.md")],
    }
    files = {
        "raw://skills/node/SKILL.md": NODE_SKILL_MD,
        "raw://skills/alerts/price/SKILL.md": PRICE_ALERT_MD,
        "raw://skills/README.md": "# Skills\n",
    }
    return FakeSkillSource(tree, files)
