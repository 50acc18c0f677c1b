"""Handlers behind the skills MCP tools."""

from skills_mcp.tools.context import SkillsContext, ToolOutcome, build_context
from skills_mcp.tools.listing import get_info, list_installed
from skills_mcp.tools.marketplace import configure_marketplace, discover, install
from skills_mcp.tools.onboarding import onboarding
from skills_mcp.tools.update import update

__all__ = [
    "SkillsContext",
    "ToolOutcome",
    "build_context",
    "configure_marketplace",
    "discover",
    "get_info",
    "install",
    "list_installed",
    "onboarding",
    "update",
]
