"""Typer application for ``skills-mcp``."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from skills_mcp import __version__
from skills_mcp.config import get_settings, update_settings
from skills_mcp.core.logging import configure_logging
from skills_mcp.tools import build_context, discover, install, list_installed, update

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from skills_mcp.tools import SkillsContext, ToolOutcome

console = Console()
error_console = Console(stderr=True)

app = typer.Typer(
    name="skills-mcp",
    help="Discover, install and update agent skills; serve them over MCP.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"skills-mcp {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a skills-mcp.config.yaml file",
        exists=True,
        dir_okay=False,
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level (debug, info, warning, error)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    settings = get_settings(config)
    if log_level:
        settings = settings.model_copy(
            update={"logger": settings.logger.model_copy(update={"level": log_level.lower()})}
        )
        update_settings(settings)
    configure_logging(settings.logger.level)


def _run(handler: Callable[[SkillsContext], Awaitable[ToolOutcome]]) -> None:
    async def _invoke() -> ToolOutcome:
        ctx = build_context(get_settings())
        try:
            return await handler(ctx)
        finally:
            await ctx.aclose()

    outcome = asyncio.run(_invoke())
    if outcome.is_error:
        error_console.print(outcome.text, markup=False, highlight=False)
        raise typer.Exit(1)
    console.print(outcome.text, markup=False, highlight=False)


@app.command()
def serve() -> None:
    """Run the MCP server on stdio."""
    from skills_mcp.server import build_server

    build_server(get_settings()).run(transport="stdio")


@app.command("list")
def list_command(
    check_updates: bool = typer.Option(
        False, "--check-updates", help="Compare tracked skills against their marketplace"
    ),
) -> None:
    """List installed skills."""
    _run(lambda ctx: list_installed(ctx, check_updates=check_updates))


@app.command("discover")
def discover_command(
    query: str | None = typer.Argument(None, help="Filter by name or description"),
    marketplace: str | None = typer.Option(
        None, "--marketplace", "-m", help="Search only this marketplace URL"
    ),
) -> None:
    """Browse marketplace skills."""
    _run(lambda ctx: discover(ctx, query=query, marketplace_url=marketplace))


@app.command("install")
def install_command(
    name: str = typer.Argument(..., help="Skill name"),
    marketplace: str | None = typer.Option(
        None, "--marketplace", "-m", help="Install from this marketplace URL"
    ),
) -> None:
    """Install a skill from a marketplace."""
    _run(lambda ctx: install(ctx, name, marketplace_url=marketplace))


@app.command("update")
def update_command(
    name: str | None = typer.Argument(None, help="Skill to update; omit to update all"),
) -> None:
    """Update marketplace-installed skills."""
    _run(lambda ctx: update(ctx, name))
