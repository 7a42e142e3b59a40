from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ..base import ToolContext, ToolResult, ToolSpec
from ...sandbox import CommandSandbox, find_blocked_pattern, sanitize_command
from ...util.fs import FsError


@dataclass
class RunCommandTool:
    spec: ToolSpec = ToolSpec(
        name="run_command",
        description=(
            "Execute a shell command in the project root. Use for running tests, builds, linters, git commands, "
            "or checking project state. Dangerous commands (rm -rf /, mkfs, etc.) are blocked. "
            "Max timeout 2 minutes. Returns stdout, stderr, and exit code."
        ),
        permission_key="bash",
        parameters={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Shell command to execute."},
                "cwd": {"type": "string", "description": "Working directory. Defaults to the project root."},
                "timeout": {
                    "type": "integer",
                    "description": "Timeout in milliseconds. Default 30000, min 1000, max 120000.",
                },
            },
            "required": ["command"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return ToolResult.fail(f"{self.spec.name} requires async execution")

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        extra = ctx.config.command.blocked_patterns
        spec, err = sanitize_command(args, extra, ctx.config.command.default_timeout_ms)
        if spec is None:
            command = args.get("command")
            if isinstance(command, str):
                pattern = find_blocked_pattern(command, extra)
                if pattern is not None:
                    ctx.record("command.blocked", {"command": command, "pattern": pattern})
            return ToolResult.fail(err or "Missing command")

        if spec.cwd:
            try:
                cwd = ctx.resolve(spec.cwd)
            except FsError as e:
                return ToolResult.fail(str(e))
            if not cwd.is_dir():
                return ToolResult.fail(f"Working directory not found: {cwd}")
            spec = replace(spec, cwd=str(cwd))

        sandbox = CommandSandbox(extra, on_event=ctx.record, cwd=str(ctx.cwd))
        return await sandbox.run(spec)
