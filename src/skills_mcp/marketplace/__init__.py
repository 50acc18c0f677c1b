"""Marketplace access: URL parsing, GitHub client, cache and registry list."""

from skills_mcp.marketplace.cache import MarketplaceCache
from skills_mcp.marketplace.client import CatalogDirEntry, GitHubCatalogClient
from skills_mcp.marketplace.registry_urls import (
    format_marketplace_display_url,
    resolve_registry_urls,
)
from skills_mcp.marketplace.source_utils import CatalogCoordinates, parse_catalog_url

__all__ = [
    "CatalogCoordinates",
    "CatalogDirEntry",
    "GitHubCatalogClient",
    "MarketplaceCache",
    "format_marketplace_display_url",
    "parse_catalog_url",
    "resolve_registry_urls",
]
