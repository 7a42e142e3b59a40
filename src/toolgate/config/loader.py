from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .models import CommandConfig, SearchConfig, ToolgateConfig

APP_NAME = "toolgate"


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".toolgate.json",
        cwd / "toolgate.json",
    ]


def _global_candidate_paths() -> list[Path]:
    return [Path(user_config_dir(APP_NAME)) / "toolgate.json"]


def _load_json(p: Path) -> dict[str, Any] | None:
    try:
        obj = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return obj if isinstance(obj, dict) else None


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)  # type: ignore
        else:
            out[k] = v
    return out


def _positive_int(v: Any, default: int) -> int:
    if isinstance(v, int) and not isinstance(v, bool) and v > 0:
        return v
    return default


def load_config(*, cwd: Path, explicit_path: Path | None = None) -> ToolgateConfig:
    """Load tool behavior config.

    Merge order: global < project < explicit_path.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in _global_candidate_paths():
        if p.is_file():
            obj = _load_json(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    for p in _candidate_paths(cwd):
        if p.is_file():
            obj = _load_json(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p
                break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if p.is_file():
            obj = _load_json(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    cfg = ToolgateConfig()
    cfg.loaded_from = loaded_from

    for key in ("follow_agent", "confine_to_cwd"):
        v = merged.get(key)
        if isinstance(v, bool):
            setattr(cfg, key, v)

    cfg.command = CommandConfig.from_obj(merged.get("command"))
    cfg.search = SearchConfig.from_obj(merged.get("search"))
    cfg.attach_timeout_ms = _positive_int(merged.get("attach_timeout_ms"), cfg.attach_timeout_ms)
    cfg.diagnostics_timeout_ms = _positive_int(merged.get("diagnostics_timeout_ms"), cfg.diagnostics_timeout_ms)

    sp = merged.get("skill_paths", [])
    if isinstance(sp, list):
        for s in sp:
            if isinstance(s, str) and s.strip():
                p = Path(s).expanduser()
                cfg.skill_paths.append((p if p.is_absolute() else cwd / p).resolve())

    return cfg
