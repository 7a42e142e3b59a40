from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.fs import FsError
from ...util.subprocess import CmdResult, run_cmd, run_cmd_async


def _check_path(ctx: ToolContext, args: dict[str, Any]) -> Optional[str]:
    path = args.get("path")
    if not path:
        return None
    try:
        ctx.resolve(str(path))
    except FsError as e:
        return str(e)
    return None


def _max_results(args: dict[str, Any], default: int) -> int:
    v = args.get("max_results")
    if v is None:
        return default
    return max(1, int(v))


def build_search_cmd(args: dict[str, Any], default_max: int = 50) -> tuple[Optional[list[str]], Optional[str]]:
    pattern = args.get("pattern")
    if not pattern:
        return None, "Missing search pattern"
    cmd = ["rg", "--line-number", "--no-heading", "--color=never", f"--max-count={_max_results(args, default_max)}"]
    if args.get("glob"):
        cmd += ["--glob", str(args["glob"])]
    cmd += ["--", str(pattern)]
    if args.get("path"):
        cmd.append(str(args["path"]))
    return cmd, None


def parse_search_result(result: CmdResult) -> ToolResult:
    # rg exits 1 when nothing matched
    if result.returncode not in (0, 1):
        return ToolResult.fail(result.stderr.strip() or "rg failed")
    lines = [ln for ln in result.stdout.split("\n") if ln]
    if not lines:
        return ToolResult.ok("No matches found")
    return ToolResult.ok("\n".join(lines))


def build_list_cmd(args: dict[str, Any]) -> tuple[Optional[list[str]], Optional[str]]:
    glob = args.get("glob")
    if not glob:
        return None, "Missing glob pattern"
    cmd = ["rg", "--files", "--glob", str(glob)]
    if args.get("path"):
        cmd.append(str(args["path"]))
    return cmd, None


def parse_list_result(result: CmdResult, max_results: int) -> ToolResult:
    if result.returncode not in (0, 1):
        return ToolResult.fail(result.stderr.strip() or "rg --files failed")
    lines = [ln for ln in result.stdout.split("\n") if ln]
    if not lines:
        return ToolResult.ok("No files found")
    if len(lines) > max_results:
        total = len(lines)
        lines = lines[:max_results]
        lines.append(f"... truncated ({total - max_results} more)")
    return ToolResult.ok("\n".join(lines))


@dataclass
class SearchFilesTool:
    spec: ToolSpec = ToolSpec(
        name="search_files",
        description=(
            "Search file contents for a regex pattern using ripgrep. Use this to find definitions, usages, "
            "or patterns across the codebase. Use 'glob' to filter by file type (e.g. '*.py'). "
            "Returns matching lines with file paths and line numbers."
        ),
        permission_key="read",
        parameters={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Regex to search for IN FILE CONTENTS, not a file glob."},
                "path": {"type": "string", "description": "Directory or file to search in. Defaults to cwd."},
                "glob": {"type": "string", "description": "Filter FILES by glob, e.g. '*.py' or '**/*.md'."},
                "max_results": {"type": "integer", "description": "Max matches per file. Default 50."},
            },
            "required": ["pattern"],
        },
    )

    def _prepare(self, ctx: ToolContext, args: dict[str, Any]) -> tuple[Optional[list[str]], Optional[str]]:
        err = _check_path(ctx, args)
        if err:
            return None, err
        return build_search_cmd(args, ctx.config.search.max_results)

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cmd, err = self._prepare(ctx, args)
        if cmd is None:
            return ToolResult.fail(err or "Missing search pattern")
        try:
            result = run_cmd(cmd, cwd=str(ctx.cwd), timeout=None)
        except OSError as e:
            return ToolResult.fail(f"Failed to run rg: {e}")
        return parse_search_result(result)

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cmd, err = self._prepare(ctx, args)
        if cmd is None:
            return ToolResult.fail(err or "Missing search pattern")
        try:
            result = await run_cmd_async(cmd, cwd=str(ctx.cwd))
        except OSError as e:
            return ToolResult.fail(f"Failed to run rg: {e}")
        return parse_search_result(result)


@dataclass
class ListFilesTool:
    spec: ToolSpec = ToolSpec(
        name="list_files",
        description=(
            "List files matching a glob pattern. Use this to explore project structure or verify a file exists "
            "before reading. Does NOT search file contents (use search_files for that). "
            "Examples: '*.py', 'src/**/*.ts', '**/test_*.py'."
        ),
        permission_key="read",
        parameters={
            "type": "object",
            "properties": {
                "glob": {"type": "string", "description": "Glob pattern, e.g. '*.py' or 'src/**/*.jsx'."},
                "path": {"type": "string", "description": "Directory to search in. Defaults to cwd."},
                "max_results": {"type": "integer", "description": "Max files to return. Default 100."},
            },
            "required": ["glob"],
        },
    )

    def _prepare(self, ctx: ToolContext, args: dict[str, Any]) -> tuple[Optional[list[str]], Optional[str]]:
        err = _check_path(ctx, args)
        if err:
            return None, err
        return build_list_cmd(args)

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cmd, err = self._prepare(ctx, args)
        if cmd is None:
            return ToolResult.fail(err or "Missing glob pattern")
        try:
            result = run_cmd(cmd, cwd=str(ctx.cwd), timeout=None)
        except OSError as e:
            return ToolResult.fail(f"Failed to run rg: {e}")
        return parse_list_result(result, _max_results(args, ctx.config.search.list_max_results))

    async def execute_async(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cmd, err = self._prepare(ctx, args)
        if cmd is None:
            return ToolResult.fail(err or "Missing glob pattern")
        try:
            result = await run_cmd_async(cmd, cwd=str(ctx.cwd))
        except OSError as e:
            return ToolResult.fail(f"Failed to run rg: {e}")
        return parse_list_result(result, _max_results(args, ctx.config.search.list_max_results))
