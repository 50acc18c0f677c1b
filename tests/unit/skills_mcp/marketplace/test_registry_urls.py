from skills_mcp.marketplace.registry_urls import (
    canonical_marketplace_url,
    format_marketplace_display_url,
    resolve_registry_urls,
)

DEFAULT = "https://github.com/anthropics/skills/tree/main/skills"


def test_format_marketplace_display_url_for_tree_urls() -> None:
    assert format_marketplace_display_url(DEFAULT) == "anthropics/skills@main:skills"
    assert (
        format_marketplace_display_url("https://github.com/acme/skills/tree/dev")
        == "acme/skills@dev"
    )


def test_format_marketplace_display_url_leaves_other_hosts() -> None:
    url = "https://example.com/skills"

    assert format_marketplace_display_url(url) == url


def test_canonical_marketplace_url_ignores_trailing_slashes() -> None:
    assert canonical_marketplace_url(f"{DEFAULT}/") == canonical_marketplace_url(DEFAULT)
    assert canonical_marketplace_url(
        "https://www.github.com/anthropics/skills/tree/main/skills"
    ) == canonical_marketplace_url(DEFAULT)


def test_resolve_registry_urls_dedupes_equivalent_sources_in_order() -> None:
    resolved = resolve_registry_urls(
        [
            "https://github.com/acme/skills/tree/main/skills",
            DEFAULT,
            "https://github.com/acme/skills/tree/main/skills/",
        ],
        default_urls=[DEFAULT],
    )

    assert resolved == ["https://github.com/acme/skills/tree/main/skills", DEFAULT]


def test_resolve_registry_urls_preserves_distinct_branches() -> None:
    resolved = resolve_registry_urls(
        [
            "https://github.com/acme/skills/tree/main/skills",
            "https://github.com/acme/skills/tree/dev/skills",
        ],
        default_urls=[DEFAULT],
    )

    assert len(resolved) == 2


def test_resolve_registry_urls_falls_back_to_defaults() -> None:
    assert resolve_registry_urls([], default_urls=[DEFAULT]) == [DEFAULT]


def test_resolve_registry_urls_active_url_replaces_configured() -> None:
    resolved = resolve_registry_urls(
        [DEFAULT],
        default_urls=[DEFAULT],
        active_url="https://github.com/acme/skills/tree/main",
    )

    assert resolved == ["https://github.com/acme/skills/tree/main"]
