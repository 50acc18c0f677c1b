"""Marketplace URL parsing and directory swap helpers."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlparse
from uuid import uuid4

DEFAULT_CATALOG_HOST = "github.com"
TEMP_DIR_PREFIX = ".temp-"
BACKUP_DIR_PREFIX = ".backup-"


@dataclass(frozen=True)
class CatalogCoordinates:
    host: str
    owner: str
    repo: str
    branch: str
    subpath: str

    @property
    def repo_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}.git"

    def join(self, skill_path: str) -> str:
        """Return ``skill_path`` relative to the repository root."""
        return join_repo_path(self.subpath, skill_path)


def parse_catalog_url(
    url: str | None, *, host: str = DEFAULT_CATALOG_HOST
) -> CatalogCoordinates | None:
    """Parse ``https://<host>/<owner>/<repo>/tree/<branch>/<subpath...>``.

    Returns ``None`` for anything else; never raises.
    """
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return None
    if hostname != host:
        return None

    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 4 or parts[2] != "tree":
        return None

    owner, repo, _, branch, *rest = parts
    return CatalogCoordinates(
        host=host,
        owner=owner,
        repo=repo,
        branch=branch,
        subpath="/".join(rest),
    )


def join_repo_path(*parts: str | None) -> str:
    cleaned = [str(part).strip().strip("/") for part in parts if part and str(part).strip("/ ")]
    if not cleaned:
        return ""
    return str(PurePosixPath(*cleaned))


def unique_sibling(parent: Path, prefix: str, label: str | None = None) -> Path:
    """Return an unused path under ``parent`` such as ``.temp-<hex>``."""
    middle = f"{label}-" if label else ""
    return parent / f"{prefix}{middle}{uuid4().hex}"


def write_json_file(path: Path, payload: Any) -> None:
    """Write ``payload`` as JSON through a temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        temp_path = Path(handle.name)
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.write("\n")

    try:
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def read_json_file(path: Path) -> Any:
    content = path.read_text(encoding="utf-8")
    return json.loads(content)


def remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.exists():
        shutil.rmtree(path, ignore_errors=True)


def atomic_replace_directory(*, existing_dir: Path, staged_dir: Path, backup_dir: Path) -> None:
    """Swap ``staged_dir`` into ``existing_dir``, keeping a backup until it succeeds.

    Relies on same-volume ``os.replace`` being atomic; the staged and backup
    directories must be siblings of ``existing_dir``. When the second move fails
    any partial target is removed and the backup is renamed back before the
    original error is re-raised.
    """
    os.replace(existing_dir, backup_dir)
    try:
        os.replace(staged_dir, existing_dir)
    except Exception:
        remove_tree(existing_dir)
        os.replace(backup_dir, existing_dir)
        raise
    remove_tree(backup_dir)
