from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...patching import read_lines
from ...util.fs import FsError

@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="read_file",
        description=(
            "Read contents of a file. ALWAYS use this before editing a file to get accurate line numbers. "
            "For large files use start_line/end_line to read a section. "
            "Returns content with line numbers prefixed."
        ),
        permission_key="read",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to file (absolute or relative to cwd)."},
                "start_line": {"type": "integer", "description": "Start line (1-indexed). Omit to read from the beginning."},
                "end_line": {"type": "integer", "description": "End line (1-indexed, inclusive). Omit to read to the end."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path_str = args.get("path")
        if not path_str:
            return ToolResult.fail("Missing path")
        try:
            p = ctx.resolve(str(path_str))
        except FsError as e:
            return ToolResult.fail(str(e))
        if not p.is_file():
            return ToolResult.fail(f"File not found: {p}")

        start = args.get("start_line")
        if ctx.config.follow_agent:
            ctx.surface.follow(p, int(start) if start is not None else None)

        lines = read_lines(p)
        s = max(1, int(start) if start is not None else 1)
        e = args.get("end_line")
        e = min(len(lines), int(e) if e is not None else len(lines))

        body = "\n".join(f"{i}: {lines[i - 1]}" for i in range(s, e + 1))
        return ToolResult.ok(f"File: {p} (lines {s}-{e})\n{body}")
