from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

from ..util.fs import resolve_path

if TYPE_CHECKING:
    from ..config.models import ToolgateConfig
    from ..events.store import EventStore
    from ..intel.provider import CodeIntelProvider
    from ..review.session import DiffSession
    from ..review.surface import ReviewSurface
    from ..skills.catalog import SkillCatalog

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema
    permission_key: str          # "read" | "edit" | "bash"

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: "ToolContext", args: dict[str, Any]) -> "ToolResult": ...

@dataclass(frozen=True)
class Diagnostic:
    line: int
    column: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "column": self.column, "message": self.message}

@dataclass
class ToolResult:
    success: bool
    message: str | None = None
    error: str | None = None
    diagnostics: list[Diagnostic] | None = None

    @staticmethod
    def ok(message: str, diagnostics: list[Diagnostic] | None = None) -> "ToolResult":
        return ToolResult(success=True, message=message, diagnostics=diagnostics or None)

    @staticmethod
    def fail(error: str, message: str | None = None) -> "ToolResult":
        return ToolResult(success=False, message=message, error=error)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            d["message"] = self.message
        if self.error is not None:
            d["error"] = self.error
        if self.diagnostics:
            d["diagnostics"] = [x.to_dict() for x in self.diagnostics]
        return d

@dataclass
class ToolContext:
    """Per-process state shared by every tool.

    Built once by AppContext and passed by reference; the only cross-call
    mutable field is the active_diff slot.
    """

    cwd: Path
    config: "ToolgateConfig"
    surface: "ReviewSurface"
    intel: Optional["CodeIntelProvider"] = None
    skills: Optional["SkillCatalog"] = None
    events: Optional["EventStore"] = None
    session_id: str | None = None
    # Invoked (deferred) after a diff review has torn down.
    reopen_hook: Callable[[], None] | None = None
    active_diff: Optional["DiffSession"] = field(default=None, repr=False)

    def resolve(self, path_str: str) -> Path:
        return resolve_path(self.cwd, path_str, confine=self.config.confine_to_cwd)

    def record(self, event_type: str, data: dict[str, Any]) -> None:
        if self.events is not None:
            self.events.append(event_type, data)
