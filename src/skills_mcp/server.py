"""MCP server exposing the skills tools over stdio."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Literal

import mcp.types as types
from mcp.server.fastmcp import FastMCP

from skills_mcp import __version__
from skills_mcp.core.logging.logger import get_logger
from skills_mcp.tools import (
    build_context,
    configure_marketplace,
    discover,
    get_info,
    install,
    list_installed,
    onboarding,
    update,
)

if TYPE_CHECKING:
    from skills_mcp.config import Settings
    from skills_mcp.tools import SkillsContext, ToolOutcome

logger = get_logger(__name__)

SERVER_NAME = "skills-mcp-local"


def to_call_tool_result(outcome: ToolOutcome) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=outcome.text)],
        structuredContent=outcome.structured,
        isError=outcome.is_error,
    )


def build_server(
    settings: Settings | None = None,
    *,
    context: SkillsContext | None = None,
) -> FastMCP:
    ctx = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        logger.info("Skills MCP server started", data={"version": __version__})
        try:
            yield
        finally:
            await ctx.aclose()

    mcp = FastMCP(SERVER_NAME, log_level="WARNING", lifespan=lifespan)

    @mcp.tool(
        name="skills_list_installed",
        description="List locally installed skills with their metadata.",
    )
    async def skills_list_installed(check_updates: bool = False) -> types.CallToolResult:
        return to_call_tool_result(await list_installed(ctx, check_updates=check_updates))

    @mcp.tool(
        name="skills_discover",
        description="Browse skills available in the configured marketplaces.",
    )
    async def skills_discover(
        filter: str | None = None,  # noqa: A002
        marketplace_url: str | None = None,
    ) -> types.CallToolResult:
        return to_call_tool_result(
            await discover(ctx, query=filter, marketplace_url=marketplace_url)
        )

    @mcp.tool(
        name="skills_install",
        description="Install a skill from a marketplace into the local skills directory.",
    )
    async def skills_install(
        skill_name: str,
        marketplace_url: str | None = None,
    ) -> types.CallToolResult:
        return to_call_tool_result(
            await install(ctx, skill_name, marketplace_url=marketplace_url)
        )

    @mcp.tool(
        name="skills_update",
        description="Update one installed skill, or all marketplace-installed skills.",
    )
    async def skills_update(skill_name: str | None = None) -> types.CallToolResult:
        return to_call_tool_result(await update(ctx, skill_name))

    @mcp.tool(
        name="skills_configure_marketplace",
        description="List, add, remove or reset the configured marketplaces.",
    )
    async def skills_configure_marketplace(
        action: Literal["list", "add", "remove", "reset"],
        url: str | None = None,
    ) -> types.CallToolResult:
        return to_call_tool_result(configure_marketplace(ctx, action, url))

    @mcp.tool(
        name="skills_get_info",
        description="Show details for an installed or marketplace skill.",
    )
    async def skills_get_info(
        skill_name: str,
        source: Literal["local", "marketplace"] = "local",
    ) -> types.CallToolResult:
        return to_call_tool_result(await get_info(ctx, skill_name, source))

    @mcp.tool(
        name="skills_onboarding",
        description="Explain what skills are and how to use these tools.",
    )
    async def skills_onboarding() -> types.CallToolResult:
        return to_call_tool_result(onboarding())

    return mcp
