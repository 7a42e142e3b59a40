from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import unquote

from ..tools.base import Diagnostic

# LSP SymbolKind codes 1..26
SYMBOL_KINDS = {
    1: "File", 2: "Module", 3: "Namespace", 4: "Package",
    5: "Class", 6: "Method", 7: "Property", 8: "Field",
    9: "Constructor", 10: "Enum", 11: "Interface", 12: "Function",
    13: "Variable", 14: "Constant", 15: "String", 16: "Number",
    17: "Boolean", 18: "Array", 19: "Object", 20: "Key",
    21: "Null", 22: "EnumMember", 23: "Struct", 24: "Event",
    25: "Operator", 26: "TypeParameter",
}

SEVERITY_ERROR = 1


class CodeIntelProvider(Protocol):
    """Read-only code-intelligence queries, LSP-shaped."""

    def clients(self, path: Path) -> list[str]: ...

    def document_symbols(self, path: Path) -> Optional[list[dict[str, Any]]]: ...

    def workspace_symbols(self, query: str) -> Optional[list[dict[str, Any]]]: ...

    def supports_workspace_symbols(self) -> bool: ...

    def diagnostics(self, path: Path) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class SymbolInfo:
    name: str
    kind: str
    file: str | None = None
    line: int | None = None


def symbol_kind_label(code: Any) -> str:
    return SYMBOL_KINDS.get(code, "Unknown") if isinstance(code, int) else "Unknown"


def _start_line(rng: Any) -> int | None:
    if isinstance(rng, dict) and isinstance(rng.get("start"), dict):
        line = rng["start"].get("line")
        if isinstance(line, int):
            return line + 1
    return None


def format_document_symbols(symbols: Optional[list[dict[str, Any]]]) -> list[SymbolInfo]:
    """Flatten DocumentSymbol trees depth-first, parents before children."""
    out: list[SymbolInfo] = []

    def visit(sym: dict[str, Any]) -> None:
        line = _start_line(sym.get("range"))
        if line is None:
            line = _start_line(sym.get("selectionRange"))
        out.append(SymbolInfo(name=str(sym.get("name", "")), kind=symbol_kind_label(sym.get("kind")), line=line))
        for child in sym.get("children") or []:
            visit(child)

    for sym in symbols or []:
        visit(sym)
    return out


def format_workspace_symbols(symbols: Optional[list[dict[str, Any]]]) -> list[SymbolInfo]:
    out: list[SymbolInfo] = []
    for sym in symbols or []:
        file = None
        line = None
        location = sym.get("location")
        if isinstance(location, dict):
            uri = location.get("uri")
            if isinstance(uri, str):
                file = unquote(uri[len("file://"):]) if uri.startswith("file://") else uri
            line = _start_line(location.get("range"))
        out.append(SymbolInfo(name=str(sym.get("name", "")), kind=symbol_kind_label(sym.get("kind")), file=file, line=line))
    return out


def format_error_diagnostics(diagnostics: Optional[list[dict[str, Any]]]) -> list[Diagnostic]:
    """Keep only error-severity entries, converted to 1-indexed positions."""
    errors: list[Diagnostic] = []
    for d in diagnostics or []:
        if d.get("severity") != SEVERITY_ERROR:
            continue
        start = (d.get("range") or {}).get("start") or {}
        errors.append(
            Diagnostic(
                line=int(start.get("line") or 0) + 1,
                column=int(start.get("character") or 0) + 1,
                message=str(d.get("message") or ""),
            )
        )
    return errors
