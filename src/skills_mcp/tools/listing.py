"""Read-only tools: installed skill listing and skill details."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from skills_mcp.marketplace.formatting import (
    format_installed_at_display,
    format_revision_change,
    format_revision_short,
)
from skills_mcp.marketplace.registry_urls import format_marketplace_display_url
from skills_mcp.skills.registry import SKILL_FILENAME
from skills_mcp.tools.context import ToolOutcome, tool_error

if TYPE_CHECKING:
    from skills_mcp.skills.manager import SkillUpdateStatus
    from skills_mcp.skills.registry import InstalledSkill
    from skills_mcp.tools.context import SkillsContext


def _skill_summary(skill: InstalledSkill) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "name": skill.name,
        "description": skill.metadata.description,
        "location": str(skill.location),
        "hasScripts": skill.has_scripts,
        "hasReferences": skill.has_references,
        "hasAssets": skill.has_assets,
        "tracked": skill.source is not None,
    }
    if skill.metadata.license:
        summary["license"] = skill.metadata.license
    if skill.metadata.compatibility:
        summary["compatibility"] = skill.metadata.compatibility
    return summary


def _update_line(status: SkillUpdateStatus) -> str:
    if status.status == "check_failed":
        return f"- Update check failed: {status.error}"
    if status.status == "update_available":
        change = format_revision_change(status.local_revision, status.remote_revision)
        return f"- Update available: {change}"
    return "- Up to date"


async def list_installed(ctx: SkillsContext, *, check_updates: bool = False) -> ToolOutcome:
    skills = ctx.registry.discover()
    valid = [skill for skill in skills if skill.is_valid]
    invalid = [skill for skill in skills if not skill.is_valid]

    statuses: dict[str, SkillUpdateStatus] = {}
    if check_updates:
        tracked = [skill for skill in valid if skill.source is not None]
        results = await ctx.manager.check_all_for_updates(
            [skill.source for skill in tracked if skill.source is not None]
        )
        statuses = {skill.name: status for skill, status in zip(tracked, results)}

    entries = []
    for skill in valid:
        entry = _skill_summary(skill)
        status = statuses.get(skill.name)
        if status is not None:
            entry["updateStatus"] = status.status
            if status.remote_revision:
                entry["remoteCommit"] = status.remote_revision
            if status.error:
                entry["updateError"] = status.error
        entries.append(entry)

    structured: dict[str, Any] = {
        "total": len(skills),
        "valid": len(valid),
        "invalid": len(invalid),
        "skills": entries,
    }
    if invalid:
        structured["invalidSkills"] = [
            {"location": str(skill.location), "errors": skill.validation_errors}
            for skill in invalid
        ]

    lines = [f"Found {len(valid)} valid skill(s):", ""]
    for skill in valid:
        lines.append(f"## {skill.name}")
        lines.append(skill.metadata.description)
        lines.append(f"- Location: {skill.location}")
        if skill.has_scripts:
            lines.append("- Has scripts/")
        if skill.has_references:
            lines.append("- Has references/")
        if skill.has_assets:
            lines.append("- Has assets/")
        if skill.name in statuses:
            lines.append(_update_line(statuses[skill.name]))
        lines.append("")

    if invalid:
        lines.append(
            f"{len(invalid)} skill(s) with errors (see invalidSkills in the structured output)"
        )

    return ToolOutcome(text="\n".join(lines).rstrip(), structured=structured)


def _directory_listing(skill: InstalledSkill) -> list[str]:
    try:
        entries = sorted(skill.location.iterdir())
    except OSError:
        return ["(Could not list directory)"]
    return [f"{entry.name}/" if entry.is_dir() else entry.name for entry in entries]


def _get_local_info(ctx: SkillsContext, skill_name: str) -> ToolOutcome:
    skill = ctx.registry.find(skill_name)
    if skill is None:
        return tool_error(
            f'Skill "{skill_name}" not found locally. Try source="marketplace" '
            "or run skills_list_installed to see available skills."
        )

    try:
        content = (skill.location / SKILL_FILENAME).read_text(encoding="utf-8")
    except OSError:
        content = f"(Could not read {SKILL_FILENAME} content)"

    structure = _directory_listing(skill)
    structured: dict[str, Any] = {
        "source": "local",
        **_skill_summary(skill),
        "isValid": skill.is_valid,
        "structure": structure,
        "metadata": skill.metadata.to_dict(),
    }

    lines = [
        f"# {skill.name}",
        "",
        f"**Description:** {skill.metadata.description}",
        f"**Location:** {skill.location}",
    ]
    if skill.source is not None:
        structured["installedFrom"] = skill.source.to_payload()
        lines.append(
            f"**Installed from:** {format_marketplace_display_url(skill.source.marketplace_url)}"
            f" ({skill.source.skill_path} @ {format_revision_short(skill.source.commit_hash)},"
            f" {format_installed_at_display(skill.source.installed_at)})"
        )
    lines.extend(
        [
            "",
            "## Structure",
            *(f"- {entry}" for entry in structure),
            "",
            f"## Full {SKILL_FILENAME} Content",
            "```markdown",
            content,
            "```",
        ]
    )
    return ToolOutcome(text="\n".join(lines), structured=structured)


async def _get_marketplace_info(ctx: SkillsContext, skill_name: str) -> ToolOutcome:
    skills = await ctx.manager.fetch_all_catalogs(ctx.marketplace_urls())
    skill = ctx.manager.find_skill(skills, skill_name)
    if skill is None:
        return tool_error(
            f'Skill "{skill_name}" not found in marketplace. '
            "Run skills_discover to see available skills."
        )

    structured = {
        "source": "marketplace",
        "name": skill.name,
        "description": skill.description,
        "marketplace": skill.marketplace_url,
        "installCommand": skill.install_command,
        "metadata": skill.metadata.to_dict(),
    }
    lines = [
        f"# {skill.name}",
        "",
        f"**Description:** {skill.description}",
        f"**Marketplace:** {skill.marketplace_url}",
        "",
        "## Installation",
        f"Run: `{skill.install_command}`",
    ]
    if skill.metadata.license:
        lines.append(f"**License:** {skill.metadata.license}")
    if skill.metadata.compatibility:
        lines.append(f"**Compatibility:** {skill.metadata.compatibility}")
    return ToolOutcome(text="\n".join(lines), structured=structured)


async def get_info(
    ctx: SkillsContext,
    skill_name: str,
    source: Literal["local", "marketplace"] = "local",
) -> ToolOutcome:
    if source == "marketplace":
        return await _get_marketplace_info(ctx, skill_name)
    return _get_local_info(ctx, skill_name)
