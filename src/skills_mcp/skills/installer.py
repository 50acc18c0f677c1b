"""Install and update marketplace skills on disk.

Both flows stage a sparse checkout in a ``.temp-*`` sibling of the final
directory and move it into place with ``os.replace``. Updates keep the
previous version in a ``.backup-*`` sibling until the swap succeeds and put it
back when it does not. Staging directories are removed on every exit path.
A backup is kept only when it could not be renamed back.
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.marketplace.formatting import format_revision_change
from skills_mcp.marketplace.source_utils import (
    BACKUP_DIR_PREFIX,
    TEMP_DIR_PREFIX,
    CatalogCoordinates,
    atomic_replace_directory,
    parse_catalog_url,
    remove_tree,
    unique_sibling,
)
from skills_mcp.skills.checkout import stage_subpath
from skills_mcp.skills.errors import (
    CatalogUrlError,
    SkillInstallError,
    SkillsMcpError,
    SkillUpdateError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from skills_mcp.skills.checkout import SparseCheckout
    from skills_mcp.skills.manager import MarketplaceManager, MarketplaceSkill
    from skills_mcp.skills.registry import InstalledSkill
    from skills_mcp.skills.source import SkillSource, SkillSourceTracker

logger = get_logger(__name__)

UNTRACKED_REASON = "not installed from a marketplace; cannot be updated automatically"
UP_TO_DATE_REASON = "already up to date"

UpdateOutcomeStatus = Literal["updated", "up_to_date", "untracked", "failed"]


@dataclass(frozen=True)
class InstallResult:
    name: str
    success: bool
    path: Path | None = None
    commit_hash: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class UpdateOutcome:
    name: str
    status: UpdateOutcomeStatus
    previous_revision: str | None = None
    new_revision: str | None = None
    detail: str | None = None

    @property
    def revision_change(self) -> str:
        return format_revision_change(self.previous_revision, self.new_revision)


@dataclass(frozen=True)
class UpdatedSkill:
    name: str
    previous_revision: str | None
    new_revision: str | None


@dataclass(frozen=True)
class SkippedSkill:
    name: str
    reason: str


@dataclass(frozen=True)
class FailedSkill:
    name: str
    error: str


@dataclass
class UpdateReport:
    updated: list[UpdatedSkill] = field(default_factory=list)
    skipped: list[SkippedSkill] = field(default_factory=list)
    failed: list[FailedSkill] = field(default_factory=list)

    def add(self, outcome: UpdateOutcome) -> None:
        if outcome.status == "updated":
            self.updated.append(
                UpdatedSkill(outcome.name, outcome.previous_revision, outcome.new_revision)
            )
        elif outcome.status == "up_to_date":
            self.skipped.append(SkippedSkill(outcome.name, outcome.detail or UP_TO_DATE_REASON))
        elif outcome.status == "untracked":
            self.skipped.append(SkippedSkill(outcome.name, outcome.detail or UNTRACKED_REASON))
        else:
            self.failed.append(FailedSkill(outcome.name, outcome.detail or "unknown error"))

    @property
    def total(self) -> int:
        return len(self.updated) + len(self.skipped) + len(self.failed)


class SkillInstaller:
    """Filesystem side of installs and updates.

    Mutations of one skill directory are serialized with a per-directory lock.
    """

    def __init__(
        self,
        manager: MarketplaceManager,
        tracker: SkillSourceTracker,
        checkout: SparseCheckout,
        install_root: Path,
    ) -> None:
        self._manager = manager
        self._tracker = tracker
        self._checkout = checkout
        self._install_root = install_root
        self._locks: dict[Path, asyncio.Lock] = {}

    @property
    def install_root(self) -> Path:
        return self._install_root

    def _lock_for(self, skill_dir: Path) -> asyncio.Lock:
        key = skill_dir.expanduser().resolve()
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def _resolve(self, url: str, branch: str | None = None) -> CatalogCoordinates:
        coords = parse_catalog_url(url, host=self._manager.host)
        if coords is None:
            raise CatalogUrlError(url)
        if branch and branch != coords.branch:
            coords = dataclasses.replace(coords, branch=branch)
        return coords

    async def install(self, skill: MarketplaceSkill) -> InstallResult:
        target = self._install_root / skill.name
        async with self._lock_for(target):
            if target.exists():
                return InstallResult(
                    name=skill.name,
                    success=False,
                    path=target,
                    error=f"Skill '{skill.name}' is already installed at {target}",
                )

            logger.info(
                "Installing skill",
                data={"name": skill.name, "marketplace": skill.marketplace_url},
            )
            try:
                source = await self._install(skill, target)
            except (SkillsMcpError, OSError) as exc:
                logger.error(
                    "Skill installation failed",
                    data={"name": skill.name, "error": str(exc)},
                )
                return InstallResult(name=skill.name, success=False, error=str(exc))

        logger.info(
            "Skill installed",
            data={"name": skill.name, "path": str(target), "commit": source.commit_hash},
        )
        return InstallResult(
            name=skill.name,
            success=True,
            path=target,
            commit_hash=source.commit_hash,
        )

    async def _install(self, skill: MarketplaceSkill, target: Path) -> SkillSource:
        coords = self._resolve(skill.marketplace_url)
        subpath = coords.join(skill.skill_path)

        # Update checks compare against the path-scoped commit, not HEAD. It is
        # read before staging so the record is never newer than the files.
        commit = await self._manager.get_latest_revision(skill.marketplace_url, skill.skill_path)

        self._install_root.mkdir(parents=True, exist_ok=True)
        staging = unique_sibling(self._install_root, TEMP_DIR_PREFIX)
        try:
            head = await stage_subpath(self._checkout, coords, subpath, staging)
            staged_skill = staging / subpath
            if not staged_skill.is_dir():
                raise SkillInstallError(
                    skill.name, f"Skill directory not found in checkout: {subpath}"
                )

            source = self._tracker.create_record(
                skill.marketplace_url,
                skill.skill_path,
                commit or head,
                coords.branch,
            )
            self._tracker.save(staged_skill, source)
            # Preflight ran before staging, so the path may exist by now.
            # A failed rename never leaves a partial target behind.
            if target.exists():
                raise SkillInstallError(
                    skill.name, f"Skill '{skill.name}' appeared at {target} during install"
                )
            os.replace(staged_skill, target)
            return source
        finally:
            remove_tree(staging)

    async def update(self, skill: InstalledSkill) -> UpdateOutcome:
        skill_dir = skill.location
        async with self._lock_for(skill_dir):
            if not skill_dir.is_dir():
                return UpdateOutcome(
                    name=skill.name,
                    status="failed",
                    detail=f"Skill directory not found: {skill_dir}",
                )

            source = self._tracker.load(skill_dir)
            if source is None:
                return UpdateOutcome(name=skill.name, status="untracked", detail=UNTRACKED_REASON)

            status = await self._manager.check_for_updates(source)
            if status.error is not None:
                return UpdateOutcome(
                    name=skill.name,
                    status="failed",
                    previous_revision=status.local_revision,
                    detail=status.error,
                )
            if not status.has_update or status.remote_revision is None:
                return UpdateOutcome(
                    name=skill.name,
                    status="up_to_date",
                    previous_revision=status.local_revision,
                    new_revision=status.local_revision,
                    detail=UP_TO_DATE_REASON,
                )

            logger.info(
                "Updating skill",
                data={
                    "name": skill.name,
                    "change": format_revision_change(
                        status.local_revision, status.remote_revision
                    ),
                },
            )
            try:
                await self._replace(skill.name, skill_dir, source, status.remote_revision)
            except (SkillsMcpError, OSError) as exc:
                logger.error(
                    "Skill update failed",
                    data={"name": skill.name, "error": str(exc)},
                )
                return UpdateOutcome(
                    name=skill.name,
                    status="failed",
                    previous_revision=status.local_revision,
                    new_revision=status.remote_revision,
                    detail=str(exc),
                )

        logger.info(
            "Skill updated",
            data={"name": skill.name, "commit": status.remote_revision},
        )
        return UpdateOutcome(
            name=skill.name,
            status="updated",
            previous_revision=status.local_revision,
            new_revision=status.remote_revision,
        )

    async def _replace(
        self,
        name: str,
        skill_dir: Path,
        source: SkillSource,
        revision: str,
    ) -> None:
        coords = self._resolve(source.marketplace_url, source.branch)
        subpath = coords.join(source.skill_path)

        parent = skill_dir.parent
        staging = unique_sibling(parent, TEMP_DIR_PREFIX)
        backup = unique_sibling(parent, BACKUP_DIR_PREFIX, skill_dir.name)
        try:
            await stage_subpath(self._checkout, coords, subpath, staging)
            staged_skill = staging / subpath
            if not staged_skill.is_dir():
                raise SkillUpdateError(
                    name, f"Skill directory not found in checkout: {subpath}", restored=True
                )

            record = self._tracker.create_record(
                source.marketplace_url,
                source.skill_path,
                revision,
                coords.branch,
            )
            self._tracker.save(staged_skill, record)
            try:
                atomic_replace_directory(
                    existing_dir=skill_dir,
                    staged_dir=staged_skill,
                    backup_dir=backup,
                )
            except OSError as exc:
                restored = skill_dir.is_dir() and not backup.exists()
                if not restored:
                    logger.error(
                        "Previous skill version could not be restored",
                        data={"name": name, "backup": str(backup)},
                    )
                raise SkillUpdateError(name, str(exc), restored=restored) from exc
        finally:
            remove_tree(staging)

    async def update_all(self, skills: Sequence[InstalledSkill]) -> UpdateReport:
        """Update skills one at a time in the given order.

        A failure is recorded against its skill and the batch carries on.
        """
        report = UpdateReport()
        for skill in skills:
            try:
                outcome = await self.update(skill)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Unexpected error while updating skill",
                    data={"name": skill.name, "error": str(exc)},
                )
                outcome = UpdateOutcome(name=skill.name, status="failed", detail=str(exc))
            report.add(outcome)

        logger.info(
            "Skill update run finished",
            data={
                "updated": len(report.updated),
                "skipped": len(report.skipped),
                "failed": len(report.failed),
            },
        )
        return report
