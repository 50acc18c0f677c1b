"""The ``skills_onboarding`` guide."""

from __future__ import annotations

from skills_mcp.config import DEFAULT_MARKETPLACE, DEFAULT_SEARCH_PATHS
from skills_mcp.tools.context import ToolOutcome

SPECIFICATION_URL = "https://agentskills.io/specification"

TOOL_SUMMARIES = {
    "skills_list_installed": "List local skills",
    "skills_discover": "Browse marketplaces",
    "skills_install": "Install a skill",
    "skills_update": "Update installed skills",
    "skills_configure_marketplace": "Manage marketplaces",
    "skills_get_info": "Get skill details",
    "skills_onboarding": "This guide",
}

SECTIONS = [
    "What are Skills?",
    "How to Use Skills",
    "Skill Locations",
    "Installing Skills Manually",
    "Skill Format",
    "Learn More",
    "Available Tools",
]

_GUIDE = """# Welcome to Skills!

Skills are packaged instructions that extend what an agent can do. Each one is
a directory with a SKILL.md file and optional scripts, references and assets.

## What are Skills?

- **SKILL.md** - the skill definition: YAML frontmatter plus instructions
- **scripts/** - optional automation scripts
- **references/** - optional extra documentation
- **assets/** - optional templates, images and other static files

## How to Use Skills

1. `skills_list_installed` shows what is available locally
2. `skills_discover` browses the configured marketplaces
3. `skills_install` installs a skill by name
4. `skills_get_info` shows a skill's full documentation
5. Read the skill's SKILL.md and follow its instructions

Skills installed with `skills_install` remember where they came from, so
`skills_update` can bring them up to date later.

## Skill Locations

Skills are searched in these locations, in order:
{locations}

## Installing Skills Manually

Copy or clone a skill folder into `~/skills/`:

```bash
cd ~/skills
git clone https://github.com/user/skill-name.git
```

Manually installed skills are not tracked and cannot be updated automatically.

## Skill Format

```markdown
---
name: my-skill
description: What this skill does and when to use it
license: MIT
---

# My Skill

Instructions for using this skill...
```

## Learn More

- Specification: {specification}
- Default marketplace: {marketplace}

## Available Tools

{tools}
"""


def onboarding() -> ToolOutcome:
    text = _GUIDE.format(
        locations="\n".join(
            f"{index}. `{path}/`" for index, path in enumerate(DEFAULT_SEARCH_PATHS, start=1)
        ),
        specification=SPECIFICATION_URL,
        marketplace=DEFAULT_MARKETPLACE,
        tools="\n".join(f"- `{name}` - {summary}" for name, summary in TOOL_SUMMARIES.items()),
    )
    return ToolOutcome(
        text=text,
        structured={
            "title": "Skills Onboarding Guide",
            "sections": SECTIONS,
            "specificationUrl": SPECIFICATION_URL,
            "defaultMarketplace": DEFAULT_MARKETPLACE,
        },
    )
