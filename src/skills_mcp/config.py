"""Settings for skills-mcp.

Values come from (lowest to highest priority) the field defaults, an optional
``skills-mcp.config.yaml`` file and ``SKILLS_MCP_*`` environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MARKETPLACE = "https://github.com/anthropics/skills/tree/main/skills"
CONFIG_FILE_NAME = "skills-mcp.config.yaml"
CONFIG_FILE_ENV = "SKILLS_MCP_CONFIG_FILE"

DEFAULT_SEARCH_PATHS = [
    "~/skills",
    "~/.claude/skills",
    ".claude/skills",
    "~/Documents/skills",
    "~/.local/share/skills",
    "/usr/local/share/skills",
]


class SkillsSettings(BaseModel):
    """Local skill locations and marketplace defaults."""

    install_directory: str = "~/skills"
    search_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_SEARCH_PATHS))
    marketplace_config_path: str = "~/.config/skills-mcp/config.json"
    default_marketplaces: list[str] = Field(default_factory=lambda: [DEFAULT_MARKETPLACE])
    cache_ttl_seconds: float = 3600.0


class GitHubSettings(BaseModel):
    """Remote catalog endpoints."""

    host: str = "github.com"
    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"
    token: str | None = None
    timeout_seconds: float = 10.0
    user_agent: str = "skills-mcp-local"


class LoggerSettings(BaseModel):
    level: Literal["debug", "info", "warning", "error"] = "info"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SKILLS_MCP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    skills: SkillsSettings = Field(default_factory=SkillsSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    logger: LoggerSettings = Field(default_factory=LoggerSettings)


_settings: Settings | None = None


def find_config_file(cwd: Path | None = None) -> Path | None:
    override = os.getenv(CONFIG_FILE_ENV)
    if override:
        path = Path(override).expanduser()
        return path if path.is_file() else None
    candidate = (cwd or Path.cwd()) / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    return None


def _load_yaml_config(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return payload


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(config_path: Path | None = None, *, cwd: Path | None = None) -> Settings:
    """Build settings from the YAML file (if any) overlaid by the environment."""
    path = config_path or find_config_file(cwd)
    file_values = _load_yaml_config(path) if path is not None else {}
    env_values = Settings().model_dump(exclude_unset=True)
    return Settings.model_validate(_merge(file_values, env_values))


def get_settings(config_path: Path | None = None) -> Settings:
    global _settings
    if _settings is None or config_path is not None:
        _settings = load_settings(config_path)
    return _settings


def update_settings(settings: Settings | None) -> None:
    global _settings
    _settings = settings
