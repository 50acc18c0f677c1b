"""Install provenance stored beside each marketplace-installed skill."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.marketplace.formatting import utc_timestamp
from skills_mcp.marketplace.source_utils import read_json_file, write_json_file

logger = get_logger(__name__)

SOURCE_FILENAME = ".skill-source.json"


class SkillSource(BaseModel):
    """Where and at which commit a skill was installed from.

    Serialized with camelCase keys:
    ``{marketplaceUrl, skillPath, installedAt, commitHash, branch?}``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    marketplace_url: str = Field(alias="marketplaceUrl")
    skill_path: str = Field(alias="skillPath")
    installed_at: str = Field(alias="installedAt")
    commit_hash: str = Field(alias="commitHash")
    branch: str | None = None

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


def get_source_path(skill_dir: Path) -> Path:
    return skill_dir / SOURCE_FILENAME


class SkillSourceTracker:
    """Reads and writes ``.skill-source.json``.

    A missing or unreadable record means the skill is untracked; only ``save``
    reports failures to the caller.
    """

    def create_record(
        self,
        marketplace_url: str,
        skill_path: str,
        commit_hash: str,
        branch: str | None = None,
    ) -> SkillSource:
        return SkillSource(
            marketplace_url=marketplace_url,
            skill_path=skill_path,
            installed_at=utc_timestamp(),
            commit_hash=commit_hash,
            branch=branch,
        )

    def save(self, skill_dir: Path, source: SkillSource) -> None:
        path = get_source_path(skill_dir)
        try:
            write_json_file(path, source.to_payload())
        except OSError as exc:
            logger.error(
                "Failed to save skill source",
                data={"path": str(path), "error": str(exc)},
            )
            raise
        logger.debug(
            "Saved skill source",
            data={"path": str(path), "commit": source.commit_hash},
        )

    def load(self, skill_dir: Path) -> SkillSource | None:
        path = get_source_path(skill_dir)
        if not path.exists():
            return None
        try:
            payload = read_json_file(path)
            return SkillSource.model_validate(payload)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Failed to read skill source",
                data={"path": str(path), "error": str(exc)},
            )
            return None

    def exists(self, skill_dir: Path) -> bool:
        return get_source_path(skill_dir).is_file()
