"""Marketplace catalogs: fetching, merging, filtering and update checks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.marketplace.source_utils import (
    DEFAULT_CATALOG_HOST,
    parse_catalog_url,
)
from skills_mcp.skills.registry import SKILL_FILENAME, SkillMetadata, parse_skill_frontmatter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from skills_mcp.marketplace.cache import MarketplaceCache
    from skills_mcp.marketplace.client import GitHubCatalogClient
    from skills_mcp.skills.source import SkillSource

logger = get_logger(__name__)

INSTALL_TOOL_NAME = "skills_install"
LATEST_COMMIT_ERROR = "Could not fetch latest commit from marketplace"

UpdateCheckStatus = Literal["update_available", "up_to_date", "check_failed"]


@dataclass(frozen=True)
class MarketplaceSkill:
    metadata: SkillMetadata
    marketplace_url: str
    skill_path: str

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def install_command(self) -> str:
        return f"{INSTALL_TOOL_NAME} {self.metadata.name}"


@dataclass(frozen=True)
class SkillUpdateStatus:
    """Result of comparing an installed commit against the marketplace.

    ``has_update`` is only meaningful when ``error`` is ``None``.
    """

    has_update: bool
    local_revision: str
    remote_revision: str | None = None
    error: str | None = None

    @property
    def status(self) -> UpdateCheckStatus:
        if self.error is not None:
            return "check_failed"
        return "update_available" if self.has_update else "up_to_date"


class MarketplaceManager:
    def __init__(
        self,
        client: GitHubCatalogClient,
        cache: MarketplaceCache[MarketplaceSkill],
        *,
        host: str = DEFAULT_CATALOG_HOST,
    ) -> None:
        self._client = client
        self._cache = cache
        self._host = host

    @property
    def host(self) -> str:
        return self._host

    async def fetch_catalog(self, url: str) -> list[MarketplaceSkill]:
        """List the skills published under a marketplace URL.

        Directories without a readable, valid ``SKILL.md`` are left out.
        Results (empty ones included) are cached per URL; an unresolvable URL
        yields ``[]`` and is not cached.
        """
        cached = self._cache.get(url)
        if cached is not None:
            logger.debug("Using cached marketplace data", data={"url": url})
            return cached

        async with self._cache.lock(url):
            cached = self._cache.get(url)
            if cached is not None:
                logger.debug("Using cached marketplace data", data={"url": url})
                return cached

            coords = parse_catalog_url(url, host=self._host)
            if coords is None:
                logger.error("Invalid marketplace URL", data={"url": url})
                return []

            logger.info("Fetching skills from marketplace", data={"url": url})
            entries = await self._client.list_directory(coords.owner, coords.repo, coords.subpath)

            skills: list[MarketplaceSkill] = []
            for entry in entries:
                if entry.kind != "directory":
                    continue
                content = await self._client.fetch_raw_file(
                    coords.owner,
                    coords.repo,
                    coords.branch,
                    coords.join(f"{entry.name}/{SKILL_FILENAME}"),
                )
                if content is None:
                    continue
                parsed = parse_skill_frontmatter(content)
                if parsed.metadata is None:
                    logger.debug(
                        "Skipping marketplace entry with invalid SKILL.md",
                        data={"url": url, "path": entry.name, "error": parsed.error},
                    )
                    continue
                skills.append(
                    MarketplaceSkill(
                        metadata=parsed.metadata,
                        marketplace_url=url,
                        skill_path=entry.name,
                    )
                )

            self._cache.set(url, skills)
            logger.info(
                "Fetched skills from marketplace",
                data={"url": url, "count": len(skills)},
            )
            return list(skills)

    async def fetch_all_catalogs(self, urls: Sequence[str]) -> list[MarketplaceSkill]:
        """Merge several marketplaces; the first one listing a name wins."""
        merged: dict[str, MarketplaceSkill] = {}
        for url in urls:
            for skill in await self.fetch_catalog(url):
                merged.setdefault(skill.name, skill)
        return list(merged.values())

    @staticmethod
    def filter_skills(
        skills: Sequence[MarketplaceSkill], query: str | None
    ) -> list[MarketplaceSkill]:
        if not query or not query.strip():
            return list(skills)
        needle = query.strip().lower()
        return [
            skill
            for skill in skills
            if needle in skill.name.lower() or needle in skill.description.lower()
        ]

    @staticmethod
    def find_skill(skills: Sequence[MarketplaceSkill], name: str) -> MarketplaceSkill | None:
        for skill in skills:
            if skill.name == name:
                return skill
        return None

    async def get_latest_revision(
        self, url: str, skill_path: str, *, branch: str | None = None
    ) -> str | None:
        """Newest commit touching the skill directory; ``branch`` overrides the URL's."""
        coords = parse_catalog_url(url, host=self._host)
        if coords is None:
            logger.error("Invalid marketplace URL", data={"url": url})
            return None
        return await self._client.fetch_latest_commit(
            coords.owner,
            coords.repo,
            branch or coords.branch,
            coords.join(skill_path),
        )

    async def check_for_updates(self, source: SkillSource) -> SkillUpdateStatus:
        latest = await self.get_latest_revision(
            source.marketplace_url, source.skill_path, branch=source.branch
        )
        if latest is None:
            return SkillUpdateStatus(
                has_update=False,
                local_revision=source.commit_hash,
                error=LATEST_COMMIT_ERROR,
            )
        return SkillUpdateStatus(
            has_update=latest != source.commit_hash,
            local_revision=source.commit_hash,
            remote_revision=latest,
        )

    async def check_all_for_updates(
        self, sources: Sequence[SkillSource]
    ) -> list[SkillUpdateStatus]:
        """Run read-only update checks concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.check_for_updates(source) for source in sources)))
