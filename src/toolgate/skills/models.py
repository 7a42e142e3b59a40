from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

SKILL_FILE = "SKILL.md"
MAX_NAME_LENGTH = 64

_NAME_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def is_valid_name(name: str | None) -> bool:
    """Lowercase letters, digits and single inner hyphens, 1..64 chars."""
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    return _NAME_RE.match(name) is not None


@dataclass(frozen=True)
class SkillRecord:
    name: str
    description: str
    path: Path  # skill directory

    @property
    def skill_file(self) -> Path:
        return self.path / SKILL_FILE
