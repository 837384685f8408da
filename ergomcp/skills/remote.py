"""GitHub contents API client for the remote skill tree."""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import httpx

from ergomcp.config.settings import DEFAULT_SKILLS_REPO_URL
from ergomcp.utils.error_handler import DiscoveryError

from .schema import DirectoryListing, RemoteEntry

LOGGER = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "Ergo-MCP-Server"

_REPO_URL_RE = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s#?]+)")


def parse_repo_url(repo_url: str) -> Tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL.

    Falls back to the default skills repository when the URL is not recognised.
    """
    match = _REPO_URL_RE.search(repo_url.strip()) if repo_url else None
    if match:
        repo = match.group(2)
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return match.group(1), repo

    LOGGER.warning(f"Unrecognised skills repository URL '{repo_url}', using default")
    return parse_repo_url(DEFAULT_SKILLS_REPO_URL)


class GitHubSkillSource:
    """Lists directories and fetches files of a GitHub-hosted skill repository.

    Failures never raise: a failed listing comes back as a DirectoryListing with
    `error` set and no entries, a failed fetch as None.
    """

    def __init__(
        self,
        repo_url: str = DEFAULT_SKILLS_REPO_URL,
        token: Optional[str] = None,
        api_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.owner, self.repo = parse_repo_url(repo_url)
        self.api_url = api_url.rstrip("/")
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _headers(self, accept: str = "application/vnd.github.v3+json") -> dict[str, str]:
        headers = {"Accept": accept, "User-Agent": USER_AGENT}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get(self, url: str, accept: str) -> httpx.Response:
        """GET with the source's headers; any failure is raised as DiscoveryError."""

        try:
            response = await self._client.get(url, headers=self._headers(accept))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DiscoveryError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DiscoveryError(f"{type(e).__name__}: {e}") from e
        return response

    async def list_directory(self, path: str) -> DirectoryListing:
        """List one repository directory (repository-relative, slash-separated path)."""

        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/{path.strip('/')}"
        try:
            response = await self._get(url, accept="application/vnd.github.v3+json")
            items = response.json()
        except DiscoveryError as e:
            error = f"{e} listing '{path}'"
            LOGGER.error(f"Error scanning {path}: {error}")
            return DirectoryListing(path=path, error=error)
        except ValueError as e:
            error = f"Invalid JSON listing '{path}': {e}"
            LOGGER.error(f"Error scanning {path}: {error}")
            return DirectoryListing(path=path, error=error)

        # A file path returns a metadata object, not a list
        if not isinstance(items, list):
            return DirectoryListing(path=path)

        entries = []
        for item in items:
            if not isinstance(item, dict) or item.get("type") not in ("file", "dir"):
                continue
            entries.append(RemoteEntry(
                name=item.get("name") or "",
                path=item.get("path") or "",
                type=item["type"],
                content_ref=item.get("download_url"),
            ))
        return DirectoryListing(path=path, entries=entries)

    async def fetch_content(self, content_ref: str) -> Optional[str]:
        """Fetch raw text behind a listing entry's content reference."""

        try:
            response = await self._get(content_ref, accept="*/*")
        except DiscoveryError as e:
            LOGGER.error(f"Error fetching {content_ref}: {e}")
            return None
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubSkillSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
