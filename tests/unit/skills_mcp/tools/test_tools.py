from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from skills_mcp.config import Settings, SkillsSettings
from skills_mcp.server import build_server, to_call_tool_result
from skills_mcp.skills.source import SOURCE_FILENAME, SkillSourceTracker
from skills_mcp.tools import (
    SkillsContext,
    ToolOutcome,
    build_context,
    configure_marketplace,
    discover,
    get_info,
    install,
    list_installed,
    onboarding,
    update,
)

ACME = "https://github.com/acme/skills/tree/main/skills"
OTHER = "https://github.com/other/catalog/tree/main"


def _skill_md(name: str, description: str, body: str = "v1") -> str:
    return f"---\nname: {name}\ndescription: {description}\n---\n\n{body}\n"


def _settings(tmp_path: Path) -> Settings:
    return Settings(
        skills=SkillsSettings(
            install_directory=str(tmp_path / "skills"),
            search_paths=[],
            marketplace_config_path=str(tmp_path / "config" / "marketplaces.json"),
            default_marketplaces=[ACME],
        )
    )


@pytest.fixture
def checkout(checkout_factory):
    return checkout_factory(
        {
            "skills/pdf/SKILL.md": _skill_md("pdf", "Work with PDF files"),
            "skills/pdf/scripts/extract.py": "print('extract')\n",
            "skills/xlsx/SKILL.md": _skill_md("xlsx", "Spreadsheet helpers"),
        },
        revision="head",
    )


@pytest.fixture
def ctx(github, checkout, tmp_path: Path) -> SkillsContext:
    github.add_skill("pdf", description="Work with PDF files", commit="c1")
    github.add_skill("xlsx", description="Spreadsheet helpers", commit="x1")
    return build_context(
        _settings(tmp_path),
        cwd=tmp_path,
        transport=httpx.MockTransport(github.handler),
        checkout=checkout,
    )


def _write_local_skill(root: Path, name: str, description: str = "Hand written") -> Path:
    skill_dir = root / name
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(_skill_md(name, description), encoding="utf-8")
    return skill_dir


# discover


@pytest.mark.asyncio
async def test_discover_lists_marketplace_skills(ctx: SkillsContext) -> None:
    outcome = await discover(ctx)

    assert not outcome.is_error
    assert outcome.text.startswith("Found 2 skill(s) in marketplace(s):")
    assert "- Install: `skills_install pdf`" in outcome.text
    assert outcome.structured is not None
    assert [skill["name"] for skill in outcome.structured["skills"]] == ["pdf", "xlsx"]
    assert outcome.structured["marketplaces"] == [ACME]


@pytest.mark.asyncio
async def test_discover_filters_by_query(ctx: SkillsContext) -> None:
    outcome = await discover(ctx, query="spreadsheet")

    assert outcome.structured is not None
    assert [skill["name"] for skill in outcome.structured["skills"]] == ["xlsx"]
    assert 'Filter: "spreadsheet"' in outcome.text


@pytest.mark.asyncio
async def test_discover_reports_no_matches(ctx: SkillsContext) -> None:
    outcome = await discover(ctx, query="nothing-matches")

    assert not outcome.is_error
    assert "No skills found. Try a different filter or add more marketplaces." in outcome.text


@pytest.mark.asyncio
async def test_discover_uses_explicit_marketplace(github, ctx: SkillsContext) -> None:
    github.add_skill("docx", owner="other", repo="catalog", base="")

    outcome = await discover(ctx, marketplace_url=OTHER)

    assert outcome.structured is not None
    assert outcome.structured["marketplaces"] == [OTHER]
    assert [skill["name"] for skill in outcome.structured["skills"]] == ["docx"]


# install


@pytest.mark.asyncio
async def test_install_reports_location_and_revision(ctx: SkillsContext, tmp_path: Path) -> None:
    outcome = await install(ctx, "pdf")

    target = tmp_path / "skills" / "pdf"
    assert not outcome.is_error, outcome.text
    assert outcome.text.startswith(f'Successfully installed "pdf" to {target} at c1')
    assert outcome.structured is not None
    assert outcome.structured["commitHash"] == "c1"
    assert outcome.structured["source"] == ACME
    assert (target / "scripts" / "extract.py").is_file()
    assert (target / SOURCE_FILENAME).is_file()


@pytest.mark.asyncio
async def test_install_unknown_skill(ctx: SkillsContext) -> None:
    outcome = await install(ctx, "nope")

    assert outcome.is_error
    assert outcome.text.startswith('Error: Skill "nope" not found in configured marketplaces.')


@pytest.mark.asyncio
async def test_install_refuses_existing_directory(ctx: SkillsContext, tmp_path: Path) -> None:
    _write_local_skill(tmp_path / "skills", "pdf")

    outcome = await install(ctx, "pdf")

    assert outcome.is_error
    assert 'Skill "pdf" already exists' in outcome.text


@pytest.mark.asyncio
async def test_install_surfaces_checkout_failure(
    ctx: SkillsContext, checkout, tmp_path: Path
) -> None:
    checkout.fail_on = "clone_narrow"

    outcome = await install(ctx, "pdf")

    assert outcome.is_error
    assert outcome.text.startswith('Error installing skill "pdf": Git command failed')
    assert list((tmp_path / "skills").iterdir()) == []


# update


@pytest.mark.asyncio
async def test_update_without_tracked_skills(ctx: SkillsContext, tmp_path: Path) -> None:
    _write_local_skill(tmp_path / "skills", "manual")

    outcome = await update(ctx)

    assert not outcome.is_error
    assert outcome.text.startswith("No skills with marketplace source tracking found.")


@pytest.mark.asyncio
async def test_update_named_untracked_skill(ctx: SkillsContext, tmp_path: Path) -> None:
    _write_local_skill(tmp_path / "skills", "manual")

    outcome = await update(ctx, "manual")

    assert not outcome.is_error
    assert "was not installed via marketplace" in outcome.text
    assert outcome.structured == {"name": "manual", "tracked": False}


@pytest.mark.asyncio
async def test_update_named_missing_skill(ctx: SkillsContext) -> None:
    outcome = await update(ctx, "ghost")

    assert outcome.is_error
    assert outcome.text.startswith('Error: Skill "ghost" not found.')


@pytest.mark.asyncio
async def test_update_all_after_remote_change(github, ctx: SkillsContext, tmp_path: Path) -> None:
    await install(ctx, "pdf")
    await install(ctx, "xlsx")
    _write_local_skill(tmp_path / "skills", "manual")
    github.commits["acme/skills/main/skills/pdf"] = "c2"

    outcome = await update(ctx)

    assert not outcome.is_error
    assert "✅ Updated:\n  - pdf: c1 → c2" in outcome.text
    assert "⏭️ Already up to date:\n  - xlsx" in outcome.text
    assert "⏭️ Skipped:\n  - manual:" in outcome.text
    assert "❌ Failed:" not in outcome.text
    assert outcome.structured is not None
    assert outcome.structured["summary"] == {"updated": 1, "skipped": 2, "failed": 0}
    source = SkillSourceTracker().load(tmp_path / "skills" / "pdf")
    assert source is not None
    assert source.commit_hash == "c2"


@pytest.mark.asyncio
async def test_update_all_up_to_date(ctx: SkillsContext) -> None:
    await install(ctx, "pdf")

    outcome = await update(ctx)

    assert outcome.text.startswith("All skills are up to date.")


@pytest.mark.asyncio
async def test_update_reports_check_failure(github, ctx: SkillsContext) -> None:
    await install(ctx, "pdf")
    del github.commits["acme/skills/main/skills/pdf"]

    outcome = await update(ctx, "pdf")

    assert "❌ Failed:\n  - pdf: Could not fetch latest commit from marketplace" in outcome.text
    assert outcome.structured is not None
    assert outcome.structured["summary"]["failed"] == 1


# configure


def test_configure_list_shows_defaults(ctx: SkillsContext) -> None:
    outcome = configure_marketplace(ctx, "list")

    assert outcome.text == f"Configured marketplaces:\n\n1. {ACME} (default)"
    assert outcome.structured == {"action": "list", "marketplaces": [ACME], "default": [ACME]}


def test_configure_add_remove_and_reset(ctx: SkillsContext) -> None:
    added = configure_marketplace(ctx, "add", OTHER)
    duplicate = configure_marketplace(ctx, "add", OTHER)
    removed = configure_marketplace(ctx, "remove", ACME)
    only = configure_marketplace(ctx, "remove", OTHER)
    reset = configure_marketplace(ctx, "reset")

    assert added.text == f"Added marketplace: {OTHER}\n\nTotal marketplaces: 2"
    assert duplicate.text.startswith(f"Marketplace already configured: {OTHER}")
    assert not duplicate.is_error
    assert removed.text == f"Removed marketplace: {ACME}\n\nRemaining marketplaces: 1"
    assert only.is_error
    assert only.text == "Error: Cannot remove the only configured marketplace"
    assert reset.text == f"Reset to default marketplace:\n{ACME}"
    assert ctx.store.path.is_file()


def test_configure_persists_across_contexts(
    ctx: SkillsContext, github, checkout, tmp_path: Path
) -> None:
    configure_marketplace(ctx, "add", OTHER)

    reopened = build_context(
        _settings(tmp_path),
        cwd=tmp_path,
        transport=httpx.MockTransport(github.handler),
        checkout=checkout,
    )

    assert reopened.marketplace_urls() == [ACME, OTHER]


@pytest.mark.parametrize(
    ("action", "url", "expected"),
    [
        ("add", None, "Error: URL is required for add action"),
        ("remove", None, "Error: URL is required for remove action"),
        ("add", "https://example.com/not/a/catalog", "Error: Cannot parse marketplace URL"),
        ("remove", OTHER, f"Error: Marketplace not configured: {OTHER}"),
        ("explode", None, "Unknown action: explode"),
    ],
)
def test_configure_rejects_bad_requests(
    ctx: SkillsContext, action: str, url: str | None, expected: str
) -> None:
    outcome = configure_marketplace(ctx, action, url)  # type: ignore[arg-type]

    assert outcome.is_error
    assert outcome.text.startswith(expected)


# get_info and listing


@pytest.mark.asyncio
async def test_get_info_local_shows_install_source(ctx: SkillsContext) -> None:
    await install(ctx, "pdf")

    outcome = await get_info(ctx, "pdf")

    assert not outcome.is_error
    assert "**Installed from:** acme/skills@main:skills (pdf @ c1," in outcome.text
    assert "- scripts/" in outcome.text
    assert "## Full SKILL.md Content" in outcome.text
    assert outcome.structured is not None
    assert outcome.structured["installedFrom"]["commitHash"] == "c1"


@pytest.mark.asyncio
async def test_get_info_local_missing(ctx: SkillsContext) -> None:
    outcome = await get_info(ctx, "pdf")

    assert outcome.is_error
    assert outcome.text.startswith('Skill "pdf" not found locally.')


@pytest.mark.asyncio
async def test_get_info_from_marketplace(ctx: SkillsContext) -> None:
    outcome = await get_info(ctx, "xlsx", source="marketplace")

    assert not outcome.is_error
    assert "Run: `skills_install xlsx`" in outcome.text
    assert outcome.structured is not None
    assert outcome.structured["marketplace"] == ACME

    missing = await get_info(ctx, "ghost", source="marketplace")
    assert missing.is_error


@pytest.mark.asyncio
async def test_list_installed_with_update_check(
    github, ctx: SkillsContext, tmp_path: Path
) -> None:
    await install(ctx, "pdf")
    _write_local_skill(tmp_path / "skills", "manual")
    broken = tmp_path / "skills" / "broken"
    broken.mkdir()
    (broken / "SKILL.md").write_text("no frontmatter", encoding="utf-8")
    github.commits["acme/skills/main/skills/pdf"] = "c2"

    outcome = await list_installed(ctx, check_updates=True)

    assert outcome.text.startswith("Found 2 valid skill(s):")
    assert "- Update available: c1 → c2" in outcome.text
    assert "1 skill(s) with errors" in outcome.text
    assert outcome.structured is not None
    assert (outcome.structured["total"], outcome.structured["invalid"]) == (3, 1)
    by_name = {entry["name"]: entry for entry in outcome.structured["skills"]}
    assert by_name["pdf"]["updateStatus"] == "update_available"
    assert by_name["pdf"]["tracked"] is True
    assert "updateStatus" not in by_name["manual"]


# onboarding and server


def test_onboarding_describes_tools() -> None:
    outcome = onboarding()

    assert outcome.text.startswith("# Welcome to Skills!")
    assert "`skills_update` - Update installed skills" in outcome.text
    assert outcome.structured is not None
    assert outcome.structured["title"] == "Skills Onboarding Guide"
    assert "Available Tools" in outcome.structured["sections"]


def test_to_call_tool_result_maps_fields() -> None:
    result = to_call_tool_result(ToolOutcome(text="boom", structured={"a": 1}, is_error=True))

    assert result.isError is True
    assert result.structuredContent == {"a": 1}
    assert result.content[0].type == "text"
    assert result.content[0].text == "boom"


@pytest.mark.asyncio
async def test_server_registers_all_tools(ctx: SkillsContext) -> None:
    server = build_server(context=ctx)

    tools = await server.list_tools()

    assert sorted(tool.name for tool in tools) == [
        "skills_configure_marketplace",
        "skills_discover",
        "skills_get_info",
        "skills_install",
        "skills_list_installed",
        "skills_onboarding",
        "skills_update",
    ]
