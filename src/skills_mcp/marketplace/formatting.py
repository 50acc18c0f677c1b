"""Display helpers for revisions and install timestamps."""

from __future__ import annotations

from datetime import UTC, datetime

SHORT_REVISION_LENGTH = 7


def format_revision_short(revision: str | None) -> str:
    if revision is None:
        return "?"
    trimmed = revision.strip()
    if not trimmed:
        return "?"
    normalized = trimmed.lower()
    if len(normalized) > SHORT_REVISION_LENGTH and all(
        ch in "0123456789abcdef" for ch in normalized
    ):
        return trimmed[:SHORT_REVISION_LENGTH]
    return trimmed


def format_revision_change(previous: str | None, current: str | None) -> str:
    return f"{format_revision_short(previous)} → {format_revision_short(current)}"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a ``Z`` suffix."""
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_installed_at_display(installed_at: str | None) -> str:
    if not installed_at:
        return "unknown"
    normalized = installed_at.strip()
    if not normalized:
        return "unknown"
    if normalized.endswith("Z"):
        normalized = f"{normalized[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return installed_at
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S")
