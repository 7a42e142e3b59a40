from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from .base import Tool, ToolContext, ToolResult, ToolSpec

SyncExecutor = Callable[[ToolContext, dict[str, Any]], ToolResult]
AsyncExecutor = Callable[[ToolContext, dict[str, Any]], Awaitable[ToolResult]]


class FunctionTool:
    """Adapts plain executor callables to the Tool protocol."""

    def __init__(
        self,
        spec: ToolSpec,
        executor: SyncExecutor | None = None,
        async_executor: AsyncExecutor | None = None,
    ):
        if executor is None and async_executor is None:
            raise ValueError(f"Tool {spec.name} needs at least one executor")
        self.spec = spec
        self._executor = executor
        if async_executor is not None:
            self.execute_async = async_executor

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        if self._executor is None:
            return ToolResult.fail(f"{self.spec.name} requires async execution")
        return self._executor(ctx, args)


@dataclass
class ToolRegistry:
    _tools: Dict[str, Tool] = None  # type: ignore

    def __post_init__(self):
        if self._tools is None:
            self._tools = {}

    def register(self, tool: Tool) -> None:
        # Re-registering a name replaces the previous descriptor.
        self._tools[tool.spec.name] = tool

    def register_function(
        self,
        name: str,
        schema: dict[str, Any],
        executor: SyncExecutor | None,
        async_executor: AsyncExecutor | None = None,
        *,
        description: str = "",
        permission_key: str = "read",
    ) -> None:
        spec = ToolSpec(
            name=name,
            description=description or str(schema.get("description", "")),
            parameters=schema.get("input_schema", schema),
            permission_key=permission_key,
        )
        self.register(FunctionTool(spec, executor, async_executor))

    def register_async(
        self,
        name: str,
        schema: dict[str, Any],
        executor: SyncExecutor | None,
        async_executor: AsyncExecutor,
        **kwargs: Any,
    ) -> None:
        self.register_function(name, schema, executor, async_executor, **kwargs)

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise KeyError(f"Unknown tool: {name}")
        return self._tools[name]

    def get_optional(self, name: str) -> Optional[Tool]:
        """Return a tool if registered, otherwise None.

        Use this in agent loops to avoid crashing when the model hallucinates
        an unknown tool name.
        """
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def list_schemas(self) -> list[dict[str, Any]]:
        return [t.spec.to_schema() for t in self._tools.values()]
