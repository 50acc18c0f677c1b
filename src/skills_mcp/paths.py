"""Filesystem locations for skills and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from skills_mcp.config import Settings, get_settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def expand_path(value: str, *, cwd: Path | None = None) -> Path:
    """Expand ``~`` and resolve relative paths against ``cwd``."""
    if not value:
        return (cwd or Path.cwd()).resolve()
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = ((cwd or Path.cwd()) / path).resolve()
    return path


def skill_search_paths(
    settings: Settings | None = None,
    *,
    cwd: Path | None = None,
    override: Sequence[str] | None = None,
) -> list[Path]:
    resolved_settings = settings or get_settings()
    entries = override if override is not None else resolved_settings.skills.search_paths
    paths: list[Path] = []
    for entry in entries:
        path = expand_path(entry, cwd=cwd)
        if path not in paths:
            paths.append(path)
    return paths


def default_install_path(settings: Settings | None = None, *, cwd: Path | None = None) -> Path:
    resolved_settings = settings or get_settings()
    return expand_path(resolved_settings.skills.install_directory, cwd=cwd)


def resolve_skill_directories(
    settings: Settings | None = None, *, cwd: Path | None = None
) -> list[Path]:
    """Search paths with the install directory appended when not already present."""
    resolved_settings = settings or get_settings()
    directories = skill_search_paths(resolved_settings, cwd=cwd)
    install_dir = default_install_path(resolved_settings, cwd=cwd)
    if install_dir not in directories:
        directories.append(install_dir)
    return directories


def marketplace_config_path(settings: Settings | None = None) -> Path:
    resolved_settings = settings or get_settings()
    return expand_path(resolved_settings.skills.marketplace_config_path)
