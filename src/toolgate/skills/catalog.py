from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ..tools.base import ToolResult
from ..util.fs import read_text
from .loader import discover
from .models import SkillRecord


class SkillCatalog:
    """Discovered skills plus the set the agent has loaded this session."""

    def __init__(self, available: Iterable[SkillRecord] = ()):
        self.available: list[SkillRecord] = list(available)
        self._loaded: list[str] = []

    def refresh(self, paths: Iterable[Path]) -> None:
        self.available = discover(paths)

    def find(self, name: str) -> SkillRecord | None:
        for s in self.available:
            if s.name == name:
                return s
        return None

    def load(self, name: str) -> ToolResult:
        skill = self.find(name)
        if skill is None:
            names = ", ".join(s.name for s in self.available) or "(none)"
            return ToolResult.fail(f"Skill '{name}' not found. Use available skills: {names}")
        if not skill.skill_file.is_file():
            return ToolResult.fail(f"Skill file not found: {skill.skill_file}")
        content = read_text(skill.skill_file)
        if name not in self._loaded:
            self._loaded.append(name)
        return ToolResult.ok(content)

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded

    def loaded_names(self) -> list[str]:
        return list(self._loaded)

    def clear_loaded(self) -> None:
        self._loaded = []

    def available_xml(self) -> str:
        if not self.available:
            return ""
        lines = ["<available-skills>"]
        for s in self.available:
            lines.append(f'<skill name="{s.name}">')
            lines.append(s.description)
            lines.append("</skill>")
        lines.append("</available-skills>")
        return "\n".join(lines)

    def reminder_xml(self) -> str:
        if not self._loaded:
            return ""
        lines = ["<loaded-skills>"]
        for name in self._loaded:
            skill = self.find(name)
            if skill is None or not skill.skill_file.is_file():
                continue
            lines.append(f'<skill name="{name}">')
            lines.append(read_text(skill.skill_file))
            lines.append("</skill>")
        lines.append("</loaded-skills>")
        return "\n".join(lines)
