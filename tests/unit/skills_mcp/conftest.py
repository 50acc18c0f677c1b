from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from skills_mcp.marketplace.cache import MarketplaceCache
from skills_mcp.marketplace.client import GitHubCatalogClient
from skills_mcp.marketplace.source_utils import join_repo_path
from skills_mcp.skills.errors import CheckoutError
from skills_mcp.skills.manager import MarketplaceManager

if TYPE_CHECKING:
    from pathlib import Path


def skill_md(name: str, description: str = "A test skill", body: str = "# Usage\n") -> str:
    return f"---\nname: {name}\ndescription: {description}\n---\n\n{body}"


class FakeGitHub:
    """In-memory stand-in for the GitHub contents, raw and commits endpoints."""

    def __init__(self) -> None:
        self.directories: dict[str, list[dict[str, str]]] = {}
        self.files: dict[str, str] = {}
        self.commits: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def add_skill(
        self,
        name: str,
        *,
        owner: str = "acme",
        repo: str = "skills",
        branch: str = "main",
        base: str = "skills",
        description: str = "A test skill",
        commit: str | None = None,
        content: str | None = None,
        descriptor: bool = True,
    ) -> None:
        self.directories.setdefault(join_repo_path(owner, repo, base), []).append(
            {"name": name, "type": "dir"}
        )
        skill_path = join_repo_path(base, name)
        if descriptor:
            self.files[f"{owner}/{repo}/{branch}/{skill_path}/SKILL.md"] = (
                content if content is not None else skill_md(name, description)
            )
        if commit is not None:
            self.commits[f"{owner}/{repo}/{branch}/{skill_path}"] = commit

    def count(self, kind: str) -> int:
        return sum(1 for request in self.requests if _request_kind(request) == kind)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        kind = _request_kind(request)
        parts = request.url.path.strip("/").split("/")

        if kind == "contents":
            key = "/".join([parts[1], parts[2], *parts[4:]])
            if key in self.directories:
                return httpx.Response(200, json=self.directories[key])
            return httpx.Response(404, json={"message": "Not Found"})

        if kind == "commits":
            params = request.url.params
            key = f"{parts[1]}/{parts[2]}/{params['sha']}/{params['path']}"
            if key in self.commits:
                return httpx.Response(200, json=[{"sha": self.commits[key]}])
            return httpx.Response(200, json=[])

        if kind == "raw":
            key = request.url.path.strip("/")
            if key in self.files:
                return httpx.Response(200, text=self.files[key])
            return httpx.Response(404, text="404: Not Found")

        return httpx.Response(404)


def _request_kind(request: httpx.Request) -> str:
    if request.url.host == "raw.githubusercontent.com":
        return "raw"
    parts = request.url.path.strip("/").split("/")
    if request.url.host == "api.github.com" and len(parts) >= 4 and parts[0] == "repos":
        return parts[3]
    return "other"


class FakeCheckout:
    """``SparseCheckout`` that materializes files from a dict instead of git.

    ``files`` holds the content of ``branch``; cloning any other branch fails
    the way ``git clone --branch`` does.
    """

    def __init__(
        self, files: dict[str, str], revision: str = "f" * 40, *, branch: str = "main"
    ) -> None:
        self.files = files
        self.revision = revision
        self.branch = branch
        self.calls: list[tuple[str, ...]] = []
        self.fail_on: str | None = None
        self._scope = ""

    def _check(self, step: str) -> None:
        if self.fail_on == step:
            raise CheckoutError(["git", step], f"simulated {step} failure")

    async def clone_narrow(self, repo_url: str, dest: Path, branch: str) -> None:
        self.calls.append(("clone_narrow", repo_url, branch))
        self._check("clone_narrow")
        if branch != self.branch:
            raise CheckoutError(
                ["git", "clone", "--branch", branch, repo_url, str(dest)],
                f"fatal: Remote branch {branch} not found in upstream origin",
            )
        (dest / ".git").mkdir(parents=True)

    async def set_scope(self, dest: Path, subpath: str) -> None:
        self.calls.append(("set_scope", subpath))
        self._check("set_scope")
        self._scope = subpath

    async def materialize(self, dest: Path) -> None:
        self.calls.append(("materialize", str(dest)))
        self._check("materialize")
        for relative, content in self.files.items():
            if relative == self._scope or relative.startswith(f"{self._scope}/"):
                path = dest / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")

    async def get_revision(self, dest: Path) -> str:
        self.calls.append(("get_revision", str(dest)))
        self._check("get_revision")
        return self.revision


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def catalog_client(github: FakeGitHub) -> GitHubCatalogClient:
    return GitHubCatalogClient(transport=httpx.MockTransport(github.handler))


@pytest.fixture
def manager(catalog_client: GitHubCatalogClient) -> MarketplaceManager:
    return MarketplaceManager(catalog_client, MarketplaceCache())


@pytest.fixture
def checkout_factory() -> type[FakeCheckout]:
    return FakeCheckout
