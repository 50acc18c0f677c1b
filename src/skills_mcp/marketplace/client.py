"""Read-only GitHub client for marketplace listings.

Every call degrades to an empty/absent result on failure: an unreachable
marketplace behaves like an empty one. Errors are logged, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

import httpx

from skills_mcp.config import GitHubSettings
from skills_mcp.core.logging.logger import get_logger

if TYPE_CHECKING:
    from types import TracebackType

logger = get_logger(__name__)

EntryKind = Literal["file", "directory"]


@dataclass(frozen=True)
class CatalogDirEntry:
    name: str
    kind: EntryKind


def _entry_kind(raw_type: Any) -> EntryKind:
    return "directory" if raw_type == "dir" else "file"


class GitHubCatalogClient:
    """Contents, raw-file and commit-history lookups against GitHub."""

    def __init__(
        self,
        settings: GitHubSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or GitHubSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def settings(self) -> GitHubSettings:
        return self._settings

    def _api_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self._settings.user_agent,
        }
        if self._settings.token:
            headers["Authorization"] = f"Bearer {self._settings.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GitHubCatalogClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def list_directory(self, owner: str, repo: str, path: str) -> list[CatalogDirEntry]:
        base = f"{self._settings.api_base}/repos/{owner}/{repo}/contents"
        url = f"{base}/{quote(path)}" if path else base

        try:
            response = await self._get_client().get(url, headers=self._api_headers())
        except httpx.HTTPError as exc:
            logger.error(
                "Error fetching GitHub directory",
                data={"url": url, "error": str(exc)},
            )
            return []

        if not response.is_success:
            logger.warning(
                "GitHub API request failed",
                data={"url": url, "status": response.status_code},
            )
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning(
                "GitHub API returned invalid JSON",
                data={"url": url, "error": str(exc)},
            )
            return []

        if not isinstance(payload, list):
            return []

        entries: list[CatalogDirEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if not isinstance(name, str) or not name:
                continue
            entries.append(CatalogDirEntry(name=name, kind=_entry_kind(item.get("type"))))
        return entries

    async def fetch_raw_file(self, owner: str, repo: str, branch: str, path: str) -> str | None:
        url = f"{self._settings.raw_base}/{owner}/{repo}/{branch}/{quote(path)}"
        try:
            response = await self._get_client().get(
                url, headers={"User-Agent": self._settings.user_agent}
            )
        except httpx.HTTPError as exc:
            logger.debug("Raw file fetch failed", data={"url": url, "error": str(exc)})
            return None

        if not response.is_success:
            logger.debug(
                "Raw file not available",
                data={"url": url, "status": response.status_code},
            )
            return None
        return response.text

    async def fetch_latest_commit(
        self, owner: str, repo: str, branch: str, path: str
    ) -> str | None:
        """Return the newest commit SHA touching ``path`` on ``branch``."""
        url = f"{self._settings.api_base}/repos/{owner}/{repo}/commits"
        params = {"path": path, "sha": branch, "per_page": "1"}

        try:
            response = await self._get_client().get(
                url, params=params, headers=self._api_headers()
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Error fetching latest commit",
                data={"path": path, "error": str(exc)},
            )
            return None

        if not response.is_success:
            logger.warning(
                "GitHub commits API request failed",
                data={"url": url, "path": path, "status": response.status_code},
            )
            return None

        try:
            commits = response.json()
        except ValueError:
            return None

        if not isinstance(commits, list) or not commits:
            return None
        first = commits[0]
        sha = first.get("sha") if isinstance(first, dict) else None
        if not isinstance(sha, str) or not sha:
            return None

        logger.debug("Got latest commit", data={"path": path, "commit": sha})
        return sha
