"""SKILL.md Markdown + frontmatter parser.

A skill document starts with a YAML header delimited by lines containing
exactly three dashes, followed by free-form instructional text.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import yaml

from .schema import DEFAULT_DESCRIPTION, SkillDescriptor

LOGGER = logging.getLogger(__name__)

BOM = "\ufeff"

# Header delimiters must be lines of exactly "---"; both LF and CRLF are accepted
_FRONTMATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---(?:\r?\n|\Z)(.*)\Z", re.DOTALL)


def parse_skill_md(content: str) -> tuple[dict, str]:
    """Parse SKILL.md content into frontmatter and body.

    Args:
        content: The full content of a SKILL.md file

    Returns:
        Tuple of (frontmatter_dict, markdown_body)

    Raises:
        ValueError: If frontmatter is missing or invalid
    """
    match = _FRONTMATTER_RE.match(content.removeprefix(BOM))
    if not match:
        raise ValueError("SKILL.md must start with YAML frontmatter (--- ... ---)")

    frontmatter_str = match.group(1)
    body = match.group(2).strip()

    try:
        frontmatter = yaml.safe_load(frontmatter_str)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e

    if not isinstance(frontmatter, dict):
        raise ValueError("Frontmatter must be a YAML dictionary")

    return frontmatter, body


def parse_skill(content: str, source_path: str) -> Optional[SkillDescriptor]:
    """Build a SkillDescriptor from raw SKILL.md text.

    Returns None (the file is skipped) when the header is missing or
    malformed, or lacks a `name`. Never raises.
    """
    if not _FRONTMATTER_RE.match(content.removeprefix(BOM)):
        LOGGER.debug(f"No frontmatter in {source_path}, skipping")
        return None

    try:
        frontmatter, _ = parse_skill_md(content)
    except ValueError as e:
        LOGGER.warning(f"Failed to parse skill header at {source_path}: {e}")
        return None

    name = frontmatter.get("name")
    if name is None or not str(name).strip():
        LOGGER.debug(f"Skill header at {source_path} has no 'name', skipping")
        return None

    description = frontmatter.get("description")
    if description is None or not str(description).strip():
        description = DEFAULT_DESCRIPTION

    return SkillDescriptor(
        name=str(name).strip(),
        description=str(description).strip(),
        raw_content=content,
        source_path=source_path,
        metadata={str(key): value for key, value in frontmatter.items()},
    )
