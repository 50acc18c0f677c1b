"""Persisted list of configured marketplaces."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.marketplace.source_utils import read_json_file, write_json_file

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

REGISTRY_CONFIG_VERSION = "1.0"


class MarketplaceRegistryStore:
    """JSON-backed marketplace list (``{"version": ..., "marketplaces": [...]}``).

    A missing or unreadable file yields the defaults; nothing is written until
    the list is changed.
    """

    def __init__(self, path: Path | str, *, default_urls: Sequence[str]) -> None:
        self._path = Path(path)
        self._default_urls = list(default_urls)
        self._cached: list[str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def default_urls(self) -> list[str]:
        return list(self._default_urls)

    def marketplaces(self) -> list[str]:
        if self._cached is None:
            self._cached = self._load()
        return list(self._cached)

    def add(self, url: str) -> bool:
        marketplaces = self.marketplaces()
        if url in marketplaces:
            logger.debug("Marketplace already exists", data={"url": url})
            return False
        marketplaces.append(url)
        self._save(marketplaces)
        logger.info("Marketplace added", data={"url": url})
        return True

    def remove(self, url: str) -> bool:
        marketplaces = self.marketplaces()
        if url not in marketplaces:
            logger.debug("Marketplace not found", data={"url": url})
            return False
        if len(marketplaces) <= 1:
            logger.warning("Cannot remove the only marketplace", data={"url": url})
            return False
        marketplaces.remove(url)
        self._save(marketplaces)
        logger.info("Marketplace removed", data={"url": url})
        return True

    def reset(self) -> list[str]:
        self._save(list(self._default_urls))
        logger.info("Marketplaces reset to default")
        return self.marketplaces()

    def _load(self) -> list[str]:
        if not self._path.exists():
            return list(self._default_urls)
        try:
            payload: Any = read_json_file(self._path)
        except (OSError, ValueError) as exc:
            logger.warning(
                "Failed to read marketplace config",
                data={"path": str(self._path), "error": str(exc)},
            )
            return list(self._default_urls)

        if not isinstance(payload, dict):
            return list(self._default_urls)
        raw = payload.get("marketplaces")
        if not isinstance(raw, list):
            return list(self._default_urls)
        urls = [value for value in raw if isinstance(value, str) and value.strip()]
        return urls or list(self._default_urls)

    def _save(self, marketplaces: list[str]) -> None:
        payload = {"version": REGISTRY_CONFIG_VERSION, "marketplaces": marketplaces}
        try:
            write_json_file(self._path, payload)
        except OSError as exc:
            logger.error(
                "Failed to save marketplace config",
                data={"path": str(self._path), "error": str(exc)},
            )
            raise
        self._cached = list(marketplaces)
        logger.debug("Marketplace config saved", data={"path": str(self._path)})
