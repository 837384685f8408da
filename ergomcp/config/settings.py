"""Environment-bound configuration objects.

This module provides Pydantic BaseSettings-based configuration loading from .env files.
Settings are process-wide: they are read once at startup and never re-read.

Example:
    from ergomcp.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    repo_url = settings.skills.repo_url
    explorer = settings.explorer.api_url
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


DEFAULT_SKILLS_REPO_URL = "https://github.com/Degens-World/Ergo-Skills"


class SkillSourceSettings(BaseSettings):
    """Remote skill repository location and credentials.

    - GITHUB_REPO_URL: repository hosting the skill tree
    - GITHUB_TOKEN: optional token, attached to every request (raises rate limits)
    - SKILLS_ROOT_PATH / SKILL_MARKER_FILE: traversal root and marker filename
    """

    repo_url: str = Field(default=DEFAULT_SKILLS_REPO_URL, alias="GITHUB_REPO_URL")
    token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_TOKEN", "GH_TOKEN"),
    )
    api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    root_path: str = Field(default="skills", alias="SKILLS_ROOT_PATH")
    marker_file: str = Field(default="SKILL.md", alias="SKILL_MARKER_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ExplorerSettings(BaseSettings):
    """Block explorer and price API endpoints."""

    api_url: str = Field(default="https://api.ergoplatform.com/api/v1", alias="ERGO_EXPLORER_API")
    price_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price?ids=ergo&vs_currencies=usd,eur",
        alias="PRICE_API_URL",
    )
    http_timeout: float = Field(default=30.0, gt=0, alias="HTTP_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class NodeSettings(BaseSettings):
    """Local node bootstrap settings.

    - NODE_BASE_DIR: directory node folders are created under (default: cwd)
    - NODE_RELEASE_REPO: GitHub repository publishing node releases
    - JAVA_BIN: java executable used to launch the node
    """

    base_dir: Optional[str] = Field(default=None, alias="NODE_BASE_DIR")
    release_repo: str = Field(default="ergoplatform/ergo", alias="NODE_RELEASE_REPO")
    java_bin: str = Field(default="java", alias="JAVA_BIN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Root application settings loaded from .env file.

    Hierarchical structure containing four nested settings groups:
    - skills: Remote skill source (SkillSourceSettings)
    - explorer: Explorer and price endpoints (ExplorerSettings)
    - node: Node bootstrap (NodeSettings)
    - observability: Logging (ObservabilitySettings)

    Use get_settings() to obtain a cached singleton instance.
    """

    skills: SkillSourceSettings = Field(default_factory=SkillSourceSettings)
    explorer: ExplorerSettings = Field(default_factory=ExplorerSettings)
    node: NodeSettings = Field(default_factory=NodeSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses LRU cache to ensure only one Settings object is created per process.

    Returns:
        Settings: Cached application settings instance
    """
    return Settings()
