"""SKILL.md parsing and discovery of locally installed skills."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.skills.source import SkillSource, SkillSourceTracker

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

SKILL_FILENAME = "SKILL.md"

_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
_MAX_NAME_LENGTH = 64
_MAX_DESCRIPTION_LENGTH = 1024
_MAX_COMPATIBILITY_LENGTH = 500


@dataclass(frozen=True)
class SkillMetadata:
    name: str
    description: str
    license: str | None = None
    compatibility: str | None = None
    metadata: dict[str, Any] | None = None
    allowed_tools: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.license is not None:
            payload["license"] = self.license
        if self.compatibility is not None:
            payload["compatibility"] = self.compatibility
        if self.metadata is not None:
            payload["metadata"] = self.metadata
        if self.allowed_tools is not None:
            payload["allowedTools"] = self.allowed_tools
        return payload


@dataclass(frozen=True)
class FrontmatterResult:
    metadata: SkillMetadata | None = None
    body: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.metadata is not None


@dataclass
class InstalledSkill:
    metadata: SkillMetadata
    location: Path
    has_scripts: bool = False
    has_references: bool = False
    has_assets: bool = False
    is_valid: bool = True
    validation_errors: list[str] = field(default_factory=list)
    source: SkillSource | None = None

    @property
    def name(self) -> str:
        return self.metadata.name


def _split_frontmatter(content: str) -> tuple[str, str] | None:
    lines = content.split("\n")
    if not lines or lines[0].strip() != "---":
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() == "---":
            return "\n".join(lines[1:index]), "\n".join(lines[index + 1 :])
    return None


def _validate_name(name: Any) -> str | None:
    if not isinstance(name, str) or not name:
        return "name is required and must be a non-empty string"
    if len(name) > _MAX_NAME_LENGTH:
        return f"name must not exceed {_MAX_NAME_LENGTH} characters"
    if name.startswith("-"):
        return "name must not start with a hyphen"
    if name.endswith("-"):
        return "name must not end with a hyphen"
    if "--" in name:
        return "name must not contain consecutive hyphens"
    if not _NAME_PATTERN.match(name):
        return "name must contain only lowercase letters, numbers, and hyphens"
    return None


def _validate_description(description: Any) -> str | None:
    if not isinstance(description, str) or not description:
        return "description is required and must be a non-empty string"
    if len(description) > _MAX_DESCRIPTION_LENGTH:
        return f"description must not exceed {_MAX_DESCRIPTION_LENGTH} characters"
    return None


def _validate_compatibility(compatibility: Any) -> str | None:
    if compatibility is None:
        return None
    if not isinstance(compatibility, str):
        return "compatibility must be a string"
    if len(compatibility) > _MAX_COMPATIBILITY_LENGTH:
        return f"compatibility must not exceed {_MAX_COMPATIBILITY_LENGTH} characters"
    return None


def parse_skill_frontmatter(content: str) -> FrontmatterResult:
    """Parse and validate the YAML header of a SKILL.md document."""
    split = _split_frontmatter(content)
    if split is None:
        return FrontmatterResult(
            error="No valid YAML frontmatter found. File must start with --- and have a closing ---"
        )
    header, body = split

    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        return FrontmatterResult(error=f"Invalid YAML syntax: {exc}")

    if not isinstance(data, dict):
        return FrontmatterResult(error="Frontmatter must be a YAML object with key-value pairs")

    for check in (
        _validate_name(data.get("name")),
        _validate_description(data.get("description")),
        _validate_compatibility(data.get("compatibility")),
    ):
        if check:
            return FrontmatterResult(error=check)

    license_value = data.get("license")
    extra = data.get("metadata")
    allowed_tools = data.get("allowed-tools")
    metadata = SkillMetadata(
        name=data["name"],
        description=data["description"].strip(),
        license=license_value if isinstance(license_value, str) else None,
        compatibility=data.get("compatibility"),
        metadata=dict(extra) if isinstance(extra, dict) else None,
        allowed_tools=allowed_tools if isinstance(allowed_tools, str) else None,
    )
    return FrontmatterResult(metadata=metadata, body=body)


class SkillRegistry:
    """Scans search paths for ``<dir>/SKILL.md`` bundles.

    Earlier search paths take priority when two bundles share a name.
    """

    def __init__(
        self,
        search_paths: Sequence[Path],
        *,
        tracker: SkillSourceTracker | None = None,
    ) -> None:
        self._search_paths = list(search_paths)
        self._tracker = tracker or SkillSourceTracker()

    @property
    def search_paths(self) -> list[Path]:
        return list(self._search_paths)

    def load_skill(self, skill_dir: Path) -> InstalledSkill | None:
        skill_file = skill_dir / SKILL_FILENAME
        if not skill_file.is_file():
            return None
        try:
            content = skill_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning(
                "Failed to read skill file",
                data={"path": str(skill_file), "error": str(exc)},
            )
            return None

        result = parse_skill_frontmatter(content)
        skill = InstalledSkill(
            metadata=result.metadata
            or SkillMetadata(name=skill_dir.name, description="Invalid skill - parsing failed"),
            location=skill_dir,
            has_scripts=(skill_dir / "scripts").is_dir(),
            has_references=(skill_dir / "references").is_dir(),
            has_assets=(skill_dir / "assets").is_dir(),
            is_valid=result.success,
            validation_errors=[] if result.success else [result.error or "Unknown parsing error"],
            source=self._tracker.load(skill_dir),
        )
        return skill

    def load_directory(self, directory: Path) -> list[InstalledSkill]:
        if not directory.is_dir():
            logger.debug("Search path does not exist", data={"path": str(directory)})
            return []

        skills: list[InstalledSkill] = []
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            logger.error(
                "Error reading directory",
                data={"path": str(directory), "error": str(exc)},
            )
            return []

        for entry in entries:
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            skill = self.load_skill(entry)
            if skill is None:
                continue
            logger.debug(
                "Discovered skill",
                data={"name": skill.name, "valid": skill.is_valid, "path": str(entry)},
            )
            skills.append(skill)
        return skills

    def discover(self) -> list[InstalledSkill]:
        discovered: dict[str, InstalledSkill] = {}
        for search_path in self._search_paths:
            for skill in self.load_directory(search_path):
                discovered.setdefault(skill.name, skill)
        return list(discovered.values())

    def find(self, name: str) -> InstalledSkill | None:
        for skill in self.discover():
            if skill.name == name:
                return skill
        return None
