from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...patching import split_text
from ...review.session import review_edit
from ...util.fs import FsError

@dataclass
class WriteFileTool:
    spec: ToolSpec = ToolSpec(
        name="write_file",
        description=(
            "Create a new file with the specified content. FAILS if the file already exists: "
            "use replace_lines to edit existing files. Shows a diff for approval before writing."
        ),
        permission_key="edit",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path (absolute or relative to cwd)."},
                "content": {"type": "string", "description": "File content."},
            },
            "required": ["path", "content"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return ToolResult.fail(f"{self.spec.name} requires async execution")

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path_str = args.get("path")
        content = args.get("content")
        if not path_str:
            return ToolResult.fail("Missing path")
        if content is None:
            return ToolResult.fail("Missing content")
        try:
            p = ctx.resolve(str(path_str))
        except FsError as e:
            return ToolResult.fail(str(e))
        if p.exists():
            return ToolResult.fail(f"File already exists: {p}. Use replace_lines to edit existing files.")

        return await review_edit(ctx, [], split_text(str(content)), str(path_str), f"File created: {path_str}")
