"""Shared collaborators for the skills tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from skills_mcp.config import Settings, get_settings
from skills_mcp.marketplace.cache import MarketplaceCache
from skills_mcp.marketplace.client import GitHubCatalogClient
from skills_mcp.marketplace.registry_store import MarketplaceRegistryStore
from skills_mcp.marketplace.registry_urls import resolve_registry_urls
from skills_mcp.paths import (
    default_install_path,
    marketplace_config_path,
    resolve_skill_directories,
)
from skills_mcp.skills.checkout import GitSparseCheckout
from skills_mcp.skills.installer import SkillInstaller
from skills_mcp.skills.manager import MarketplaceManager
from skills_mcp.skills.registry import SkillRegistry
from skills_mcp.skills.source import SkillSourceTracker

if TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from skills_mcp.skills.checkout import SparseCheckout


@dataclass(frozen=True)
class ToolOutcome:
    """Text for the agent plus optional structured data."""

    text: str
    structured: dict[str, Any] | None = None
    is_error: bool = False


def tool_error(text: str) -> ToolOutcome:
    return ToolOutcome(text=text, is_error=True)


@dataclass
class SkillsContext:
    settings: Settings
    client: GitHubCatalogClient
    manager: MarketplaceManager
    registry: SkillRegistry
    store: MarketplaceRegistryStore
    installer: SkillInstaller
    tracker: SkillSourceTracker = field(default_factory=SkillSourceTracker)

    @property
    def default_marketplaces(self) -> list[str]:
        return list(self.settings.skills.default_marketplaces)

    def marketplace_urls(self, override: str | None = None) -> list[str]:
        return resolve_registry_urls(
            self.store.marketplaces(),
            default_urls=self.default_marketplaces,
            active_url=override,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def build_context(
    settings: Settings | None = None,
    *,
    cwd: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    checkout: SparseCheckout | None = None,
) -> SkillsContext:
    resolved = settings or get_settings()
    client = GitHubCatalogClient(resolved.github, transport=transport)
    cache: MarketplaceCache = MarketplaceCache(resolved.skills.cache_ttl_seconds)
    manager = MarketplaceManager(client, cache, host=resolved.github.host)
    tracker = SkillSourceTracker()
    registry = SkillRegistry(resolve_skill_directories(resolved, cwd=cwd), tracker=tracker)
    store = MarketplaceRegistryStore(
        marketplace_config_path(resolved),
        default_urls=resolved.skills.default_marketplaces,
    )
    installer = SkillInstaller(
        manager,
        tracker,
        checkout or GitSparseCheckout(),
        default_install_path(resolved, cwd=cwd),
    )
    return SkillsContext(
        settings=resolved,
        client=client,
        manager=manager,
        registry=registry,
        store=store,
        installer=installer,
        tracker=tracker,
    )
