from __future__ import annotations

import asyncio
import difflib
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from rich.console import Console, Group
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from .session import DiffSession


class ReviewSurface(Protocol):
    """Presentation side of a diff review.

    ``present`` shows the original and proposed views (focus on the proposed
    one) and later reports the human's choice back through
    ``session.accept()``, ``session.reject()`` or ``session.dismissed()``.
    The remaining methods are teardown steps, called in declaration order.
    """

    def present(self, session: "DiffSession") -> None: ...

    def detach_dismissal(self, session: "DiffSession") -> None: ...

    def diff_off(self, session: "DiffSession") -> None: ...

    def close_proposed(self, session: "DiffSession") -> None: ...

    def reopen_file(self, session: "DiffSession", path: Path) -> None: ...

    def discard_scratch(self, session: "DiffSession") -> None: ...

    def follow(self, path: Path, line: int | None = None) -> None: ...


def unified_diff(session: "DiffSession") -> str:
    return "\n".join(
        difflib.unified_diff(
            session.original_lines,
            session.proposed_lines,
            fromfile=f"original://{session.filepath}",
            tofile=f"proposed://{session.filepath}",
            lineterm="",
        )
    )


@dataclass
class _Views:
    prompt: "asyncio.Task[None] | None" = None
    listening: bool = True
    diff_on: bool = True
    proposed_open: bool = True


class ConsoleReviewSurface:
    """Terminal approver: renders the change with rich and asks y/N."""

    def __init__(self, console: Console | None = None, follow_reads: bool = True):
        self.console = console or Console()
        self.follow_reads = follow_reads
        self._views: dict[int, _Views] = {}

    def present(self, session: "DiffSession") -> None:
        title = "new file" if session.is_new_file else "edit"
        header = Table.grid(padding=(0, 2))
        header.add_row("[bold green]file[/bold green]", f"[bright_cyan]{session.filepath}[/bright_cyan]")
        header.add_row(
            "[bold green]lines[/bold green]",
            f"{len(session.original_lines)} → {len(session.proposed_lines)}",
        )
        body = unified_diff(session) or "(no changes)"
        self.console.print(
            Panel(
                Group(header, Syntax(body, "diff", word_wrap=True)),
                title=f"[bold magenta]Review {title}[/bold magenta]",
                border_style="bright_blue",
            )
        )
        views = _Views()
        self._views[id(session)] = views
        views.prompt = asyncio.get_running_loop().create_task(self._ask(session, views))

    async def _ask(self, session: "DiffSession", views: _Views) -> None:
        try:
            answer = await self._read_answer("Accept? [y/N] ")
        except (EOFError, KeyboardInterrupt):
            if views.listening:
                session.dismissed()
            return
        if answer.strip().lower() in {"y", "yes"}:
            session.accept()
        else:
            session.reject()

    async def _read_answer(self, prompt: str) -> str:
        """Read one line on a daemon thread.

        A blocked ``console.input`` cannot be interrupted. If the review ends
        first, the thread stays parked on stdin and its answer is dropped, but
        being a daemon it never holds up interpreter or loop shutdown.
        """
        loop = asyncio.get_running_loop()
        answer: asyncio.Future[str] = loop.create_future()

        def deliver(value: str | None, error: Exception | None) -> None:
            if answer.done():
                return
            if error is not None:
                answer.set_exception(error)
            else:
                answer.set_result(value or "")

        def worker() -> None:
            try:
                value, error = self.console.input(prompt), None
            except Exception as e:
                value, error = None, e
            if not loop.is_closed():
                loop.call_soon_threadsafe(deliver, value, error)

        threading.Thread(target=worker, name="toolgate-review-input", daemon=True).start()
        return await answer

    def detach_dismissal(self, session: "DiffSession") -> None:
        views = self._views.get(id(session))
        if views is not None:
            views.listening = False

    def diff_off(self, session: "DiffSession") -> None:
        views = self._views.get(id(session))
        if views is not None:
            views.diff_on = False

    def close_proposed(self, session: "DiffSession") -> None:
        views = self._views.get(id(session))
        if views is not None:
            views.proposed_open = False

    def reopen_file(self, session: "DiffSession", path: Path) -> None:
        self.console.print(f"[green]✓[/green] wrote [bright_cyan]{path}[/bright_cyan]")

    def discard_scratch(self, session: "DiffSession") -> None:
        views = self._views.pop(id(session), None)
        if views is None or views.prompt is None:
            return
        # An unanswered prompt is dropped with its review.
        if not views.prompt.done() and views.prompt is not asyncio.current_task():
            views.prompt.cancel()

    def follow(self, path: Path, line: int | None = None) -> None:
        if self.follow_reads:
            where = f"{path}:{line}" if line else str(path)
            self.console.print(f"[dim]reading {where}[/dim]")


class AutoApproveSurface:
    """Accepts every proposal on the next loop turn (unattended runs)."""

    def present(self, session: "DiffSession") -> None:
        asyncio.get_running_loop().call_soon(session.accept)

    def detach_dismissal(self, session: "DiffSession") -> None:
        pass

    def diff_off(self, session: "DiffSession") -> None:
        pass

    def close_proposed(self, session: "DiffSession") -> None:
        pass

    def reopen_file(self, session: "DiffSession", path: Path) -> None:
        pass

    def discard_scratch(self, session: "DiffSession") -> None:
        pass

    def follow(self, path: Path, line: int | None = None) -> None:
        pass
