from __future__ import annotations
from pathlib import Path

class FsError(RuntimeError):
    pass

def resolve_path(cwd: Path, path_str: str, *, confine: bool = False) -> Path:
    if not path_str:
        raise FsError("Missing path")
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = (cwd / p).resolve()
    else:
        p = p.resolve()
    if confine:
        try:
            p.relative_to(cwd.resolve())
        except ValueError:
            raise FsError(f"Path escapes working directory: {path_str}")
    return p

def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")

def display_path(cwd: Path, path: Path) -> str:
    """Path relative to cwd when it lives underneath it, otherwise unchanged."""
    try:
        return str(path.relative_to(cwd.resolve()))
    except ValueError:
        return str(path)
