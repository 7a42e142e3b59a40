from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from ..patching import write_lines
from ..polling import wait_for_diagnostics
from ..tools.base import Diagnostic, ToolContext, ToolResult
from ..util.fs import resolve_path


class DiffState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class DiffOutcome:
    errors: list[Diagnostic] = field(default_factory=list)


class DiffSessionBusy(RuntimeError):
    def __init__(self, filepath: str):
        super().__init__(f"Another diff review is already open: {filepath}")
        self.filepath = filepath


REJECTED_BY_USER = "Rejected by user"


class DiffSession:
    """One proposed file change travelling through human review.

    closed -> open -> accepted | rejected. Exactly one of ``on_accept`` /
    ``on_reject`` fires, once, and only after the review views are torn down.
    At most one session occupies ``ctx.active_diff`` at a time.
    """

    def __init__(
        self,
        ctx: ToolContext,
        original_lines: Sequence[str],
        proposed_lines: Sequence[str],
        filepath: str,
        on_accept: Callable[[DiffOutcome], None],
        on_reject: Callable[[str], None],
    ):
        self.ctx = ctx
        self.original_lines = list(original_lines)
        self.proposed_lines = list(proposed_lines)
        self.filepath = filepath
        self.on_accept = on_accept
        self.on_reject = on_reject
        self.state = DiffState.CLOSED
        self._finishing: asyncio.Task[None] | None = None

    @property
    def path(self) -> Path:
        return resolve_path(self.ctx.cwd, self.filepath)

    @property
    def is_new_file(self) -> bool:
        return not self.original_lines

    def open(self) -> None:
        if self.state is not DiffState.CLOSED:
            raise RuntimeError(f"Diff session for {self.filepath} already {self.state.value}")
        active = self.ctx.active_diff
        if active is not None:
            raise DiffSessionBusy(active.filepath)
        self.ctx.active_diff = self
        self.state = DiffState.OPEN
        self.ctx.record("diff.open", {"path": self.filepath, "new_file": self.is_new_file})
        self.ctx.surface.present(self)

    def accept(self) -> bool:
        if self.state is not DiffState.OPEN:
            return False
        path = self.path
        try:
            write_lines(path, self.proposed_lines)
        except (OSError, ValueError) as e:
            self.state = DiffState.REJECTED
            self._teardown(reopen=False)
            reason = f"Write failed: {e}"
            self.ctx.record("diff.rejected", {"path": self.filepath, "reason": reason})
            self.on_reject(reason)
            return True

        self.state = DiffState.ACCEPTED
        self._teardown(reopen=True)
        self.ctx.record("diff.accepted", {"path": self.filepath, "lines": len(self.proposed_lines)})
        self._finishing = asyncio.get_running_loop().create_task(self._finish_accept(path))
        return True

    def reject(self, reason: str = REJECTED_BY_USER) -> bool:
        if self.state is not DiffState.OPEN:
            return False
        self.state = DiffState.REJECTED
        self._teardown(reopen=False)
        self.ctx.record("diff.rejected", {"path": self.filepath, "reason": reason})
        self.on_reject(reason)
        return True

    def dismissed(self) -> bool:
        """The review surface went away without an explicit choice."""
        return self.reject(REJECTED_BY_USER)

    async def _finish_accept(self, path: Path) -> None:
        errors: list[Diagnostic] = []
        if self.ctx.intel is not None:
            try:
                errors = await wait_for_diagnostics(self.ctx.intel, path, self.ctx.config.diagnostics_timeout_ms)
            except Exception as e:
                # The write already happened; report it without diagnostics.
                self.ctx.record("diff.diagnostics_failed", {"path": self.filepath, "error": str(e)})
        self.on_accept(DiffOutcome(errors=errors))

    def _teardown(self, *, reopen: bool) -> None:
        surface = self.ctx.surface
        surface.detach_dismissal(self)
        surface.diff_off(self)
        surface.close_proposed(self)
        # The real file must be showing before the scratch views go away.
        if reopen:
            surface.reopen_file(self, self.path)
        surface.discard_scratch(self)
        if self.ctx.active_diff is self:
            self.ctx.active_diff = None
        hook = self.ctx.reopen_hook
        if hook is not None:
            asyncio.get_running_loop().call_soon(hook)


def open_diff(
    ctx: ToolContext,
    original_lines: Sequence[str],
    proposed_lines: Sequence[str],
    filepath: str,
    on_accept: Callable[[DiffOutcome], None],
    on_reject: Callable[[str], None],
) -> DiffSession:
    session = DiffSession(ctx, original_lines, proposed_lines, filepath, on_accept, on_reject)
    session.open()
    return session


async def review_edit(
    ctx: ToolContext,
    original_lines: Sequence[str],
    proposed_lines: Sequence[str],
    filepath: str,
    success_message: str,
) -> ToolResult:
    """Open a review for a proposed change and wait for the human's answer."""
    done: asyncio.Future[ToolResult] = asyncio.get_running_loop().create_future()

    def on_accept(outcome: DiffOutcome) -> None:
        if not done.done():
            done.set_result(ToolResult.ok(success_message, outcome.errors))

    def on_reject(reason: str) -> None:
        if not done.done():
            done.set_result(ToolResult.fail(reason or REJECTED_BY_USER))

    try:
        session = open_diff(ctx, original_lines, proposed_lines, filepath, on_accept, on_reject)
    except DiffSessionBusy as e:
        return ToolResult.fail(str(e))
    try:
        return await done
    except asyncio.CancelledError:
        session.reject("Cancelled")
        raise
