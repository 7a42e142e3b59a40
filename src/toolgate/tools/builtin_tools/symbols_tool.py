from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolContext, ToolResult, ToolSpec
from ...intel.provider import format_document_symbols, format_workspace_symbols
from ...polling import wait_for_attach
from ...util.fs import FsError, display_path

NO_WORKSPACE_SUPPORT = "No code-intelligence provider with workspace symbol support found"


def _seconds(ms: int) -> str:
    return f"{ms / 1000:g}s"


@dataclass
class DocumentSymbolsTool:
    """List the symbols of one file, waiting briefly for a provider to attach."""

    spec: ToolSpec = ToolSpec(
        name="document_symbols",
        description=(
            "List all symbols (functions, classes, methods, variables, etc.) in a file. "
            "Use this to understand file structure before editing or to find the line of a definition. "
            "More accurate than text search. Requires a code-intelligence provider for the file type."
        ),
        permission_key="read",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path (absolute or relative to cwd)."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return ToolResult.fail(f"{self.spec.name} requires async execution")

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path_str = args.get("path")
        if not path_str:
            return ToolResult.fail("Missing path")
        try:
            path = ctx.resolve(str(path_str))
        except FsError as e:
            return ToolResult.fail(str(e))
        if not path.is_file():
            return ToolResult.fail(f"File not found: {path}")

        timeout_ms = ctx.config.attach_timeout_ms
        clients = await wait_for_attach(ctx.intel, path, timeout_ms) if ctx.intel is not None else []
        if not clients:
            return ToolResult.fail(
                f"No code-intelligence provider attached to {path} after {_seconds(timeout_ms)}. "
                "Ensure a provider is configured for this file type."
            )

        try:
            raw = ctx.intel.document_symbols(path)
        except Exception as e:
            return ToolResult.fail(f"Code intelligence error: {e}")
        if not raw:
            return ToolResult.ok(f"No symbols found in {path}")

        lines = [f"Symbols in {path}:"]
        for sym in format_document_symbols(raw):
            line_info = f":{sym.line}" if sym.line else ""
            lines.append(f"  {sym.kind} {sym.name}{line_info}")
        return ToolResult.ok("\n".join(lines))


@dataclass
class WorkspaceSymbolsTool:
    spec: ToolSpec = ToolSpec(
        name="workspace_symbols",
        description=(
            "Search for symbols by name across the whole project. Use this to find where a function, class "
            "or type is defined. Supports partial matching. Returns kind, name, file path and line."
        ),
        permission_key="read",
        parameters={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Symbol name to search for (partial match supported)."},
            },
            "required": ["query"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return ToolResult.fail(f"{self.spec.name} requires async execution")

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        query = args.get("query")
        if not query:
            return ToolResult.fail("Missing query")
        intel = ctx.intel
        if intel is None or not intel.supports_workspace_symbols():
            return ToolResult.fail(NO_WORKSPACE_SUPPORT)

        try:
            raw = intel.workspace_symbols(str(query))
        except Exception as e:
            return ToolResult.fail(f"Code intelligence error: {e}")
        if not raw:
            return ToolResult.ok(f"No symbols found matching '{query}'")

        lines = [f"Symbols matching '{query}':"]
        for sym in format_workspace_symbols(raw):
            location = ""
            if sym.file:
                location = display_path(ctx.cwd, Path(sym.file))
                if sym.line:
                    location += f":{sym.line}"
            lines.append(f"  {sym.kind} {sym.name}  [{location}]")
        return ToolResult.ok("\n".join(lines))
