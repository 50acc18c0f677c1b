"""Helpers for formatting and de-duplicating marketplace URL lists."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from collections.abc import Sequence


def format_marketplace_display_url(url: str) -> str:
    """Shorten a marketplace URL to ``owner/repo[/path]`` for listings."""
    parsed = urlparse(url)
    if parsed.netloc in {"github.com", "www.github.com"}:
        parts = [part for part in parsed.path.split("/") if part]
        if len(parts) >= 4 and parts[2] == "tree":
            owner, repo, _, ref = parts[:4]
            label = f"{owner}/{repo}@{ref}"
            rest = "/".join(parts[4:])
            return f"{label}:{rest}" if rest else label
        if len(parts) >= 2:
            return f"{parts[0]}/{parts[1]}"
    return url


def canonical_marketplace_url(url: str) -> str:
    """Return a key under which equivalent marketplace URLs compare equal."""
    normalized = url.strip()
    parsed = urlparse(normalized)
    if parsed.netloc in {"github.com", "www.github.com"}:
        parts = [part for part in parsed.path.split("/") if part]
        return "https://github.com/" + "/".join(parts)
    return normalized.rstrip("/")


def resolve_registry_urls(
    configured_urls: Sequence[str] | None,
    *,
    default_urls: Sequence[str],
    active_url: str | None = None,
) -> list[str]:
    """Build the ordered marketplace list, dropping equivalent duplicates.

    ``active_url`` (an explicit per-request marketplace) replaces the configured
    list entirely. Order is preserved because earlier marketplaces win name
    collisions.
    """
    if active_url:
        registry_urls = [active_url]
    else:
        registry_urls = list(configured_urls) if configured_urls else list(default_urls)

    deduped: list[str] = []
    seen: set[str] = set()
    for url in registry_urls:
        if not url or not url.strip():
            continue
        key = canonical_marketplace_url(url)
        if key in seen:
            continue
        seen.add(key)
        deduped.append(url.strip())
    return deduped
