"""Local skills, marketplace catalogs and the install/update machinery."""

from skills_mcp.skills.checkout import GitSparseCheckout, SparseCheckout
from skills_mcp.skills.installer import (
    InstallResult,
    SkillInstaller,
    UpdateOutcome,
    UpdateReport,
)
from skills_mcp.skills.manager import MarketplaceManager, MarketplaceSkill, SkillUpdateStatus
from skills_mcp.skills.registry import (
    InstalledSkill,
    SkillMetadata,
    SkillRegistry,
    parse_skill_frontmatter,
)
from skills_mcp.skills.source import SkillSource, SkillSourceTracker

__all__ = [
    "GitSparseCheckout",
    "InstallResult",
    "InstalledSkill",
    "MarketplaceManager",
    "MarketplaceSkill",
    "SkillInstaller",
    "SkillMetadata",
    "SkillRegistry",
    "SkillSource",
    "SkillSourceTracker",
    "SkillUpdateStatus",
    "SparseCheckout",
    "UpdateOutcome",
    "UpdateReport",
    "parse_skill_frontmatter",
]
