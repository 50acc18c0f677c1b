"""The ``skills_update`` tool."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from skills_mcp.marketplace.formatting import format_revision_change
from skills_mcp.skills.installer import UP_TO_DATE_REASON, UpdateReport
from skills_mcp.tools.context import ToolOutcome, tool_error

if TYPE_CHECKING:
    from skills_mcp.tools.context import SkillsContext


def format_update_report(report: UpdateReport) -> str:
    lines: list[str] = []

    if report.updated:
        lines.append("✅ Updated:")
        for item in report.updated:
            change = format_revision_change(item.previous_revision, item.new_revision)
            lines.append(f"  - {item.name}: {change}")
        lines.append("")

    current = [item for item in report.skipped if item.reason == UP_TO_DATE_REASON]
    untracked = [item for item in report.skipped if item.reason != UP_TO_DATE_REASON]
    if current:
        lines.append("⏭️ Already up to date:")
        lines.extend(f"  - {item.name}" for item in current)
        lines.append("")
    if untracked:
        lines.append("⏭️ Skipped:")
        lines.extend(f"  - {item.name}: {item.reason}" for item in untracked)
        lines.append("")

    if report.failed:
        lines.append("❌ Failed:")
        lines.extend(f"  - {item.name}: {item.error}" for item in report.failed)
        lines.append("")

    if not report.updated and not report.failed and current:
        lines.insert(0, "All skills are up to date.\n")

    return "\n".join(lines).strip()


def _report_payload(report: UpdateReport) -> dict[str, object]:
    return {
        "updated": [asdict(item) for item in report.updated],
        "skipped": [asdict(item) for item in report.skipped],
        "failed": [asdict(item) for item in report.failed],
        "summary": {
            "updated": len(report.updated),
            "skipped": len(report.skipped),
            "failed": len(report.failed),
        },
    }


async def update(ctx: SkillsContext, skill_name: str | None = None) -> ToolOutcome:
    installed = ctx.registry.discover()

    if skill_name:
        skill = next((item for item in installed if item.name == skill_name), None)
        if skill is None:
            return tool_error(
                f'Error: Skill "{skill_name}" not found. '
                "Run skills_list_installed to see available skills."
            )
        if skill.source is None:
            return ToolOutcome(
                text=(
                    f'Skill "{skill_name}" was not installed via marketplace '
                    "and cannot be updated automatically."
                ),
                structured={"name": skill_name, "tracked": False},
            )
        targets = [skill]
    else:
        if not any(item.source is not None for item in installed):
            return ToolOutcome(
                text=(
                    "No skills with marketplace source tracking found. "
                    "Only skills installed via skills_install can be updated."
                ),
                structured=_report_payload(UpdateReport()),
            )
        targets = installed

    report = await ctx.installer.update_all(targets)
    return ToolOutcome(text=format_update_report(report), structured=_report_payload(report))
