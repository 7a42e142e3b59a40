from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, TypeVar

from .intel.provider import CodeIntelProvider, format_error_diagnostics
from .tools.base import Diagnostic

T = TypeVar("T")

ATTACH_INTERVAL_MS = 50
DIAGNOSTICS_INTERVAL_MS = 100
DIAGNOSTICS_GRACE_MS = 200


async def poll_until(
    check: Callable[[], T],
    *,
    timeout_ms: int,
    interval_ms: int,
    initial_delay_ms: int = 0,
) -> T:
    """Call ``check`` until it returns something truthy or time runs out.

    Never raises on timeout: the last (possibly empty) value is returned.
    Elapsed time counts from the call, so the initial delay is part of the
    budget.
    """
    loop = asyncio.get_running_loop()
    start = loop.time()
    if initial_delay_ms > 0:
        await asyncio.sleep(initial_delay_ms / 1000)
    while True:
        value = check()
        if value:
            return value
        if (loop.time() - start) * 1000 >= timeout_ms:
            return value
        await asyncio.sleep(interval_ms / 1000)


def schedule_poll(
    check: Callable[[], T],
    timeout_ms: int,
    callback: Callable[[T], None],
    *,
    interval_ms: int,
    initial_delay_ms: int = 0,
) -> "asyncio.Task[T]":
    task = asyncio.get_running_loop().create_task(
        poll_until(check, timeout_ms=timeout_ms, interval_ms=interval_ms, initial_delay_ms=initial_delay_ms)
    )
    task.add_done_callback(lambda t: t.cancelled() or callback(t.result()))
    return task


async def wait_for_attach(intel: CodeIntelProvider, path: Path, timeout_ms: int = 2000) -> list[str]:
    return await poll_until(
        lambda: intel.clients(path),
        timeout_ms=timeout_ms,
        interval_ms=ATTACH_INTERVAL_MS,
    )


async def wait_for_diagnostics(intel: CodeIntelProvider, path: Path, timeout_ms: int = 2000) -> list[Diagnostic]:
    return await poll_until(
        lambda: format_error_diagnostics(intel.diagnostics(path)),
        timeout_ms=timeout_ms,
        interval_ms=DIAGNOSTICS_INTERVAL_MS,
        initial_delay_ms=DIAGNOSTICS_GRACE_MS,
    )
