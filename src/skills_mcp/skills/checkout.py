"""Narrow git checkouts used to stage a single skill directory."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from skills_mcp.core.logging.logger import get_logger
from skills_mcp.skills.errors import CheckoutError

if TYPE_CHECKING:
    from skills_mcp.marketplace.source_utils import CatalogCoordinates

logger = get_logger(__name__)


class SparseCheckout(Protocol):
    """The four steps needed to materialize one subpath of a remote branch."""

    async def clone_narrow(self, repo_url: str, dest: Path, branch: str) -> None: ...

    async def set_scope(self, dest: Path, subpath: str) -> None: ...

    async def materialize(self, dest: Path) -> None: ...

    async def get_revision(self, dest: Path) -> str: ...


class GitSparseCheckout:
    """``SparseCheckout`` backed by the ``git`` executable.

    The clone is shallow, blob-filtered and sparse, and ``--depth`` implies a
    single branch, so the branch must be named at clone time. Only the scoped
    subpath of that branch is downloaded.
    """

    def __init__(self, git: str = "git") -> None:
        self._git = git

    async def _run(self, args: list[str], *, cwd: Path | None = None) -> str:
        command = [self._git, *args]
        logger.debug("Running git", data={"command": command, "cwd": str(cwd) if cwd else None})
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(cwd) if cwd else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CheckoutError(command, str(exc), cwd) from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise CheckoutError(command, stderr.decode("utf-8", errors="replace").strip(), cwd)
        return stdout.decode("utf-8", errors="replace")

    async def clone_narrow(self, repo_url: str, dest: Path, branch: str) -> None:
        await self._run(
            [
                "clone",
                "--depth",
                "1",
                "--filter=blob:none",
                "--sparse",
                "--branch",
                branch,
                repo_url,
                str(dest),
            ]
        )

    async def set_scope(self, dest: Path, subpath: str) -> None:
        await self._run(["sparse-checkout", "set", subpath], cwd=dest)

    async def materialize(self, dest: Path) -> None:
        await self._run(["checkout"], cwd=dest)

    async def get_revision(self, dest: Path) -> str:
        output = await self._run(["rev-parse", "HEAD"], cwd=dest)
        return output.strip()


async def stage_subpath(
    checkout: SparseCheckout,
    coords: CatalogCoordinates,
    subpath: str,
    dest: Path,
) -> str:
    """Check out ``subpath`` of the catalog branch into ``dest``.

    Returns the checked-out revision. ``dest`` must not exist yet.
    """
    await checkout.clone_narrow(coords.repo_url, dest, coords.branch)
    await checkout.set_scope(dest, subpath)
    await checkout.materialize(dest)
    return await checkout.get_revision(dest)
