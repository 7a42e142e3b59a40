from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable

from rich.console import Console

from .base import Tool, ToolContext, ToolResult
from .registry import ToolRegistry
from .schema import SchemaError, validate_args

console = Console()

ResultCallback = Callable[[ToolResult], None]


def _fault_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _args_preview(args: Any) -> str:
    try:
        s = json.dumps(args, ensure_ascii=False)
    except (TypeError, ValueError):
        s = str(args)
    if len(s) > 400:
        s = s[:400] + "... (truncated)"
    return s


class Dispatcher:
    """Routes tool calls by name and normalizes every outcome to a ToolResult.

    Faults raised by executors never cross this boundary: they are converted
    to failure results here and nowhere else.
    """

    def __init__(self, registry: ToolRegistry, ctx: ToolContext, *, trace: bool = False):
        self.registry = registry
        self.ctx = ctx
        self.trace = trace
        self._tasks: set[asyncio.Task[ToolResult]] = set()

    def list_schemas(self) -> list[dict[str, Any]]:
        return self.registry.list_schemas()

    def _validate(self, tool: Tool, args: Any) -> ToolResult | None:
        try:
            validate_args(tool.spec.parameters, args)
        except SchemaError as e:
            return ToolResult.fail(f"Invalid input for {tool.spec.name}: {e}")
        return None

    def _run_sync(self, tool: Tool, args: dict[str, Any]) -> ToolResult:
        invalid = self._validate(tool, args)
        if invalid is not None:
            return invalid
        try:
            result = tool.execute(self.ctx, args)
        except Exception as e:
            return ToolResult.fail(_fault_text(e))
        if not isinstance(result, ToolResult):
            return ToolResult.fail(f"Tool {tool.spec.name} returned {type(result).__name__}, expected ToolResult")
        return result

    async def _guard(self, pending: Awaitable[ToolResult]) -> ToolResult:
        try:
            result = await pending
        except Exception as e:
            return ToolResult.fail(_fault_text(e))
        if not isinstance(result, ToolResult):
            return ToolResult.fail(f"Async executor returned {type(result).__name__}, expected ToolResult")
        return result

    def _trace(self, name: str, args: Any, result: ToolResult | None = None) -> None:
        if not self.trace:
            return
        if result is None:
            console.print(f"[dim]→ {name} {_args_preview(args)}[/dim]")
        else:
            status = "[green]ok[/green]" if result.success else f"[red]{result.error}[/red]"
            console.print(f"[dim]← {name}[/dim] {status}")

    def _record_call(self, name: str, args: Any, mode: str) -> None:
        self.ctx.record("tool.call", {"tool": name, "mode": mode, "args": _args_preview(args)})
        self._trace(name, args)

    def _record_result(self, name: str, result: ToolResult) -> None:
        self.ctx.record("tool.result", {"tool": name, "success": result.success, "error": result.error})
        self._trace(name, None, result)

    def execute(self, name: str, args: dict[str, Any]) -> ToolResult:
        self._record_call(name, args, "sync")
        tool = self.registry.get_optional(name)
        if tool is None:
            result = ToolResult.fail(f"Unknown tool: {name}")
        else:
            result = self._run_sync(tool, args)
        self._record_result(name, result)
        return result

    def execute_async(
        self,
        name: str,
        args: dict[str, Any],
        callback: ResultCallback | None = None,
    ) -> "asyncio.Future[ToolResult]":
        """Run a tool without blocking the loop.

        The returned future resolves exactly once. ``callback`` is attached as
        a done-callback, so it always runs on a later loop turn than this call,
        even when the result is known immediately.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[ToolResult] = loop.create_future()
        if callback is not None:
            future.add_done_callback(
                lambda f: callback(ToolResult.fail("Cancelled") if f.cancelled() else f.result())
            )

        def settle(result: ToolResult) -> None:
            self._record_result(name, result)
            if not future.done():
                future.set_result(result)

        self._record_call(name, args, "async")
        tool = self.registry.get_optional(name)
        if tool is None:
            settle(ToolResult.fail(f"Unknown tool: {name}"))
            return future

        async_exec = getattr(tool, "execute_async", None)
        if async_exec is None:
            # Sync-only tool: run on the next loop turn.
            loop.call_soon(lambda: settle(self._run_sync(tool, args)))
            return future

        invalid = self._validate(tool, args)
        if invalid is not None:
            settle(invalid)
            return future
        try:
            pending = async_exec(self.ctx, args)
        except Exception as e:
            settle(ToolResult.fail(_fault_text(e)))
            return future

        task = loop.create_task(self._guard(pending))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(
            lambda t: settle(ToolResult.fail("Cancelled") if t.cancelled() else t.result())
        )
        return future
