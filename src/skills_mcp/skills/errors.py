"""Exceptions raised by the install/update machinery.

They never cross a tool boundary: the installer converts them into
structured outcomes carrying the error text.
"""

from __future__ import annotations

from pathlib import Path


class SkillsMcpError(Exception):
    """Base exception for skills-mcp errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class CatalogUrlError(SkillsMcpError):
    """Raised when a marketplace URL cannot be resolved to GitHub coordinates."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Cannot parse marketplace URL: {url}")


class SkillInstallError(SkillsMcpError):
    """Raised when installing a skill fails before or during the directory move."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(detail)


class SkillUpdateError(SkillsMcpError):
    """Raised when swapping an updated skill into place fails.

    Attributes:
        name: Skill being updated.
        detail: Underlying error text.
        restored: Whether the previous version was put back.
    """

    def __init__(self, name: str, detail: str, *, restored: bool) -> None:
        self.name = name
        self.detail = detail
        self.restored = restored
        suffix = "" if restored else " (previous version could not be restored)"
        super().__init__(f"{detail}{suffix}")


class CheckoutError(SkillsMcpError):
    """Raised when a git command used for staging exits non-zero.

    Attributes:
        command: The git command line.
        stderr: Captured error output.
        cwd: Working directory of the command, if any.
    """

    def __init__(self, args: list[str], stderr: str, cwd: Path | None = None) -> None:
        self.command = list(args)
        self.stderr = stderr
        self.cwd = cwd
        super().__init__(f"Git command failed: {' '.join(args)}\n{stderr}".rstrip())
