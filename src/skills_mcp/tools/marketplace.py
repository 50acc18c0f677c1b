"""Marketplace tools: discover, install and marketplace configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from skills_mcp.marketplace.formatting import format_revision_short
from skills_mcp.marketplace.source_utils import parse_catalog_url
from skills_mcp.tools.context import ToolOutcome, tool_error

if TYPE_CHECKING:
    from skills_mcp.tools.context import SkillsContext

ConfigureAction = Literal["list", "add", "remove", "reset"]


async def discover(
    ctx: SkillsContext,
    query: str | None = None,
    marketplace_url: str | None = None,
) -> ToolOutcome:
    urls = ctx.marketplace_urls(marketplace_url)
    all_skills = await ctx.manager.fetch_all_catalogs(urls)
    skills = ctx.manager.filter_skills(all_skills, query)

    structured: dict[str, Any] = {
        "total": len(skills),
        "filter": query or None,
        "marketplaces": urls,
        "skills": [
            {
                "name": skill.name,
                "description": skill.description,
                "installCommand": skill.install_command,
                "marketplace": skill.marketplace_url,
                **({"license": skill.metadata.license} if skill.metadata.license else {}),
            }
            for skill in skills
        ],
    }

    lines = [f"Found {len(skills)} skill(s) in marketplace(s):"]
    if query:
        lines.append(f'Filter: "{query}"')
    lines.append("")
    for skill in skills:
        lines.append(f"## {skill.name}")
        lines.append(skill.description)
        lines.append(f"- Install: `{skill.install_command}`")
        lines.append("")
    if not skills:
        lines.append("No skills found. Try a different filter or add more marketplaces.")

    return ToolOutcome(text="\n".join(lines).rstrip(), structured=structured)


async def install(
    ctx: SkillsContext,
    skill_name: str,
    marketplace_url: str | None = None,
) -> ToolOutcome:
    target = ctx.installer.install_root / skill_name
    if target.exists():
        return tool_error(
            f'Error: Skill "{skill_name}" already exists at {target}. '
            "Remove it first if you want to reinstall."
        )

    skills = await ctx.manager.fetch_all_catalogs(ctx.marketplace_urls(marketplace_url))
    skill = ctx.manager.find_skill(skills, skill_name)
    if skill is None:
        return tool_error(
            f'Error: Skill "{skill_name}" not found in configured marketplaces. '
            "Run skills_discover to see available skills."
        )

    result = await ctx.installer.install(skill)
    if not result.success or result.path is None:
        return tool_error(
            f'Error installing skill "{skill_name}": {result.error}\n\n'
            "Make sure git is installed and you have network access."
        )

    installed = ctx.registry.load_skill(result.path)
    if installed is None or not installed.is_valid:
        errors = "; ".join(installed.validation_errors) if installed else "SKILL.md missing"
        return ToolOutcome(
            text=(
                f"Warning: Skill installed but SKILL.md validation failed: {errors}\n"
                f"Location: {result.path}"
            ),
            structured={
                "success": True,
                "valid": False,
                "location": str(result.path),
                "errors": installed.validation_errors if installed else [errors],
            },
        )

    structured = {
        "success": True,
        "skill": {
            "name": installed.name,
            "description": installed.metadata.description,
            "location": str(result.path),
        },
        "source": skill.marketplace_url,
        "commitHash": result.commit_hash,
    }
    return ToolOutcome(
        text=(
            f'Successfully installed "{skill_name}" to {result.path} '
            f"at {format_revision_short(result.commit_hash)}\n\n"
            f"Description: {installed.metadata.description}\n\n"
            "To use this skill, read its SKILL.md file and follow the instructions."
        ),
        structured=structured,
    )


def _list_marketplaces(ctx: SkillsContext) -> ToolOutcome:
    marketplaces = ctx.store.marketplaces()
    defaults = ctx.default_marketplaces
    lines = ["Configured marketplaces:", ""]
    for index, url in enumerate(marketplaces, start=1):
        suffix = " (default)" if url in defaults else ""
        lines.append(f"{index}. {url}{suffix}")
    return ToolOutcome(
        text="\n".join(lines),
        structured={"action": "list", "marketplaces": marketplaces, "default": defaults},
    )


def configure_marketplace(
    ctx: SkillsContext,
    action: ConfigureAction,
    url: str | None = None,
) -> ToolOutcome:
    try:
        return _configure(ctx, action, url)
    except OSError as exc:
        return tool_error(f"Error: Could not save marketplace config: {exc}")


def _configure(ctx: SkillsContext, action: str, url: str | None) -> ToolOutcome:
    if action == "list":
        return _list_marketplaces(ctx)

    if action == "reset":
        marketplaces = ctx.store.reset()
        return ToolOutcome(
            text="Reset to default marketplace:\n" + "\n".join(marketplaces),
            structured={"action": "reset", "marketplaces": marketplaces},
        )

    if action not in ("add", "remove"):
        return tool_error(f"Unknown action: {action}")
    if not url:
        return tool_error(f"Error: URL is required for {action} action")

    if action == "add":
        if parse_catalog_url(url, host=ctx.manager.host) is None:
            return tool_error(
                f"Error: Cannot parse marketplace URL: {url}\n"
                f"Expected https://{ctx.manager.host}/<owner>/<repo>/tree/<branch>/<path>"
            )
        added = ctx.store.add(url)
        marketplaces = ctx.store.marketplaces()
        heading = f"Added marketplace: {url}" if added else f"Marketplace already configured: {url}"
        return ToolOutcome(
            text=f"{heading}\n\nTotal marketplaces: {len(marketplaces)}",
            structured={"action": "add", "url": url, "added": added, "marketplaces": marketplaces},
        )

    current = ctx.store.marketplaces()
    if url not in current:
        return tool_error(f"Error: Marketplace not configured: {url}")
    if not ctx.store.remove(url):
        return tool_error("Error: Cannot remove the only configured marketplace")
    marketplaces = ctx.store.marketplaces()
    return ToolOutcome(
        text=f"Removed marketplace: {url}\n\nRemaining marketplaces: {len(marketplaces)}",
        structured={"action": "remove", "url": url, "marketplaces": marketplaces},
    )
