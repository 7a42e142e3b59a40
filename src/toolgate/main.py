from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .app_context import AppContext
from .tools.base import ToolResult


app = typer.Typer(add_completion=False, help="toolgate: agent tool execution with sandboxed commands and reviewed edits.")
console = Console()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser()
    if not cwd.is_absolute():
        cwd = (Path.cwd() / cwd).resolve()
    else:
        cwd = cwd.resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


@app.command()
def tools(
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
):
    """List registered tools."""
    ctx = AppContext.from_env(cwd=_resolve_cwd(cwd))
    table = Table(title="Tools", border_style="bright_blue")
    table.add_column("name", style="bold")
    table.add_column("permission", style="bright_cyan")
    table.add_column("description")
    for spec in ctx.tools.list_specs():
        table.add_row(spec.name, spec.permission_key, spec.description)
    console.print(table)


@app.command()
def schemas(
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
):
    """Print tool schemas as JSON."""
    ctx = AppContext.from_env(cwd=_resolve_cwd(cwd))
    console.print(json.dumps(ctx.tools.list_schemas(), ensure_ascii=False, indent=2), markup=False, highlight=False, soft_wrap=True)


@app.command()
def skills(
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Optional toolgate JSON config path."),
):
    """List skills discovered from .skills/ and the configured skill paths."""
    ctx = AppContext.from_env(cwd=_resolve_cwd(cwd), config_path=config)
    if not ctx.skills.available:
        console.print("No skills found.")
        raise typer.Exit(code=0)
    for s in ctx.skills.available:
        console.print(f"- [bold]{s.name}[/bold] {escape(s.description)} [dim]({s.path})[/dim]")


def _print_result(name: str, result: ToolResult) -> None:
    body = escape(result.message or "")
    if not result.success:
        body = f"[red]{escape(result.error or '')}[/red]" + (f"\n\n{body}" if body else "")
    if result.diagnostics:
        rows = "\n".join(f"  {d.line}:{d.column} {escape(d.message)}" for d in result.diagnostics)
        body += f"\n\n[yellow]Diagnostics:[/yellow]\n{rows}"
    console.print(
        Panel(
            body,
            title=f"result: {name} ({'ok' if result.success else 'error'})",
            border_style="green" if result.success else "red",
        )
    )


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name."),
    args: str = typer.Option("{}", "--args", help="Tool input as a JSON object."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Optional toolgate JSON config path."),
    yes: bool = typer.Option(False, "--yes", help="Accept every proposed edit without review."),
    trace: bool = typer.Option(False, "--trace", help="Print tool call traces."),
    session: str = typer.Option(None, "--session", help="Session id for the event log (default creates new)."),
):
    """Run one tool through the async dispatcher and print its result."""
    try:
        tool_args = json.loads(args)
    except ValueError as e:
        raise typer.BadParameter(f"--args is not valid JSON: {e}")

    ctx = AppContext.from_env(
        cwd=_resolve_cwd(cwd),
        session_id=session,
        auto_approve=yes,
        config_path=config,
        trace=trace,
    )

    async def _run() -> ToolResult:
        return await ctx.dispatcher.execute_async(name, tool_args)

    result = asyncio.run(_run())
    _print_result(name, result)
    if trace:
        console.print(f"[dim]session: {ctx.session_id}[/dim]")
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
