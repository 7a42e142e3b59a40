from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...patching import apply_line_replacement, read_lines, split_text
from ...review.session import review_edit
from ...util.fs import FsError

@dataclass
class ReplaceLinesTool:
    spec: ToolSpec = ToolSpec(
        name="replace_lines",
        description=(
            "Replace a range of lines in an existing file. ALWAYS read_file first to get accurate line numbers. "
            "Shows a diff for approval. Set from_line > to_line to INSERT before from_line. "
            "Use empty text to DELETE lines. Line numbers are 1-indexed and inclusive."
        ),
        permission_key="edit",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path (absolute or relative to cwd)."},
                "from_line": {"type": "integer", "description": "Start line (1-indexed)."},
                "to_line": {
                    "type": "integer",
                    "description": "End line (1-indexed, inclusive). Set < from_line to insert before from_line.",
                },
                "text": {"type": "string", "description": "Replacement text (empty to delete the lines)."},
            },
            "required": ["path", "from_line", "to_line", "text"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return ToolResult.fail(f"{self.spec.name} requires async execution")

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        for field in ("path", "from_line", "to_line", "text"):
            if args.get(field) is None or (field == "path" and not args[field]):
                return ToolResult.fail(f"Missing {field}")

        path_str = str(args["path"])
        try:
            p = ctx.resolve(path_str)
        except FsError as e:
            return ToolResult.fail(str(e))
        if not p.is_file():
            return ToolResult.fail(f"File not found: {p}")

        from_line = int(args["from_line"])
        to_line = int(args["to_line"])
        original = read_lines(p)
        proposed = apply_line_replacement(original, from_line, to_line, split_text(str(args["text"])))

        return await review_edit(
            ctx, original, proposed, path_str, f"Replaced lines {from_line}-{to_line} in {path_str}"
        )
