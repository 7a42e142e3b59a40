from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class CommandConfig:
    default_timeout_ms: int = 30000
    blocked_patterns: list[str] = field(default_factory=list)

    @staticmethod
    def from_obj(obj: Any) -> "CommandConfig":
        cfg = CommandConfig()
        if not isinstance(obj, dict):
            return cfg
        t = obj.get("default_timeout_ms")
        if isinstance(t, int) and not isinstance(t, bool):
            cfg.default_timeout_ms = t
        pats = obj.get("blocked_patterns")
        if isinstance(pats, list):
            cfg.blocked_patterns = [p for p in pats if isinstance(p, str) and p]
        return cfg


@dataclass
class SearchConfig:
    max_results: int = 50
    list_max_results: int = 100

    @staticmethod
    def from_obj(obj: Any) -> "SearchConfig":
        cfg = SearchConfig()
        if not isinstance(obj, dict):
            return cfg
        for key in ("max_results", "list_max_results"):
            v = obj.get(key)
            if isinstance(v, int) and not isinstance(v, bool) and v > 0:
                setattr(cfg, key, v)
        return cfg


@dataclass
class ToolgateConfig:
    """Behavior config loaded from JSON (global < project < explicit)."""

    follow_agent: bool = True
    confine_to_cwd: bool = False
    command: CommandConfig = field(default_factory=CommandConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    attach_timeout_ms: int = 2000
    diagnostics_timeout_ms: int = 2000
    skill_paths: list[Path] = field(default_factory=list)

    loaded_from: Path | None = None
