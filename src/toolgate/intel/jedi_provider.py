from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jedi

from ..util.fs import read_text
from .provider import SEVERITY_ERROR

PYTHON_SUFFIXES = {".py", ".pyi"}


def _kind_code(name: Any) -> int:
    t = getattr(name, "type", None)
    if t == "class":
        return 5
    if t == "function":
        parent = name.parent() if hasattr(name, "parent") else None
        if parent is not None and getattr(parent, "type", None) == "class":
            return 9 if name.name == "__init__" else 6
        return 12
    if t == "module":
        return 2
    if t == "property":
        return 7
    if t in {"statement", "instance", "param"}:
        return 14 if (name.name or "").isupper() else 13
    return 13


def _position(name: Any) -> dict[str, Any]:
    line = max((getattr(name, "line", None) or 1) - 1, 0)
    col = getattr(name, "column", None) or 0
    return {"start": {"line": line, "character": col}, "end": {"line": line, "character": col}}


@dataclass
class JediProvider:
    """Python code intelligence backed by Jedi.

    Attaches to .py/.pyi files only. Diagnostics are syntax errors found by
    compiling the current file contents.
    """

    root: Path

    def clients(self, path: Path) -> list[str]:
        return ["jedi"] if path.suffix.lower() in PYTHON_SUFFIXES else []

    def supports_workspace_symbols(self) -> bool:
        return True

    def _document_symbol(self, name: Any) -> dict[str, Any]:
        pos = _position(name)
        sym: dict[str, Any] = {
            "name": name.name,
            "kind": _kind_code(name),
            "range": pos,
            "selectionRange": pos,
        }
        if name.type == "class":
            children = [
                self._document_symbol(child)
                for child in name.defined_names()
                if child.type != "param"
            ]
            if children:
                sym["children"] = children
        return sym

    def document_symbols(self, path: Path) -> list[dict[str, Any]]:
        script = jedi.Script(code=read_text(path), path=str(path), project=jedi.Project(self.root))
        names = script.get_names(all_scopes=False, definitions=True, references=False)
        return [self._document_symbol(n) for n in names if n.type not in {"param", "keyword"}]

    def workspace_symbols(self, query: str) -> list[dict[str, Any]]:
        project = jedi.Project(self.root)
        out: list[dict[str, Any]] = []
        for name in project.search(query, all_scopes=True):
            if name.type in {"param", "keyword", "path"}:
                continue
            sym: dict[str, Any] = {"name": name.name, "kind": _kind_code(name)}
            if name.module_path is not None:
                sym["location"] = {"uri": Path(name.module_path).as_uri(), "range": _position(name)}
            out.append(sym)
        return out

    def diagnostics(self, path: Path) -> list[dict[str, Any]]:
        if path.suffix.lower() not in PYTHON_SUFFIXES or not path.is_file():
            return []
        code = read_text(path)
        try:
            compile(code, str(path), "exec")
        except SyntaxError as se:
            return [
                {
                    "severity": SEVERITY_ERROR,
                    "source": "python.compile",
                    "message": se.msg or str(se),
                    "range": {
                        "start": {"line": max((se.lineno or 1) - 1, 0), "character": max((se.offset or 1) - 1, 0)},
                    },
                }
            ]
        return []
