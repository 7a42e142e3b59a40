from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from platformdirs import user_config_dir

from .models import SKILL_FILE, SkillRecord, is_valid_name

APP_NAME = "toolgate"


def discovery_paths(cwd: Path, extra: Iterable[Path] = ()) -> list[Path]:
    # project first, then user, then configured
    return [
        cwd / ".skills",
        Path(user_config_dir(APP_NAME)) / "skills",
        *extra,
    ]


def _split_frontmatter(text: str) -> tuple[str, str] | None:
    """Return (frontmatter, body) for text opening with a --- block."""
    lines = text.splitlines()
    if len(lines) < 3 or lines[0] != "---":
        return None
    for i in range(1, len(lines)):
        if lines[i] == "---":
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :])
    return None


def parse_frontmatter(path: Path) -> dict[str, str] | None:
    """Read name/description from a SKILL.md; None if missing or invalid."""
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    parts = _split_frontmatter(text)
    if parts is None:
        return None
    try:
        meta: Any = yaml.safe_load(parts[0])
    except yaml.YAMLError:
        return None
    if not isinstance(meta, dict):
        return None

    name = meta.get("name")
    description = meta.get("description")
    if not isinstance(name, str) or not name.strip():
        return None
    if not isinstance(description, str) or not description.strip():
        return None
    name = name.strip()
    if not is_valid_name(name):
        return None
    return {"name": name, "description": description.strip()}


def discover(paths: Iterable[Path]) -> list[SkillRecord]:
    skills: list[SkillRecord] = []
    for d in paths:
        if not d.is_dir():
            continue
        for entry in sorted(d.iterdir()):
            skill_file = entry / SKILL_FILE
            if not entry.is_dir() or not skill_file.is_file():
                continue
            meta = parse_frontmatter(skill_file)
            if meta is not None:
                skills.append(SkillRecord(name=meta["name"], description=meta["description"], path=entry))
    return skills
