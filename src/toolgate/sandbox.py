from __future__ import annotations

import asyncio
import os
import re
import signal
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .tools.base import ToolResult

MIN_TIMEOUT_MS = 1000
MAX_TIMEOUT_MS = 120000
DEFAULT_TIMEOUT_MS = 30000

# Matched case-insensitively anywhere in the command text.
BLOCKED_MESSAGE = "Command blocked for safety (matches pattern: {pattern})"

BLOCKED_PATTERNS = [
    r"rm\s+-rf\s+/",
    r"rm\s+-rf\s+~/",
    r"rm\s+-rf\s+\.\.",
    r">\s*/",
    r"dd\s+if=",
    r"mkfs",
    r"fdisk",
    r"format",
    r"del\s+/",
    r"rmdir\s+/s",
    r"shutdown",
    r"reboot",
    r"halt",
    r"poweroff",
    r"init\s+0",
    r":\(\)\{",
    r"fork",
]


@dataclass(frozen=True)
class CommandSpec:
    command: str
    cwd: str | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS


def clamp_timeout(timeout_ms: int) -> int:
    return max(MIN_TIMEOUT_MS, min(MAX_TIMEOUT_MS, timeout_ms))


def find_blocked_pattern(command: str, extra_patterns: Iterable[str] = ()) -> str | None:
    for pattern in [*BLOCKED_PATTERNS, *extra_patterns]:
        try:
            if re.search(pattern, command, flags=re.IGNORECASE):
                return pattern
        except re.error:
            # Extra patterns come from config; treat invalid regexes as literals.
            if pattern.lower() in command.lower():
                return pattern
    return None


def sanitize_command(
    args: dict[str, Any],
    extra_patterns: Iterable[str] = (),
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> tuple[Optional[CommandSpec], Optional[str]]:
    cmd = args.get("command")
    if not isinstance(cmd, str) or not cmd.strip():
        return None, "Missing command"

    blocked = find_blocked_pattern(cmd, extra_patterns)
    if blocked is not None:
        return None, BLOCKED_MESSAGE.format(pattern=blocked)

    raw_timeout = args.get("timeout")
    if raw_timeout is None:
        raw_timeout = default_timeout_ms
    try:
        timeout = int(raw_timeout)
    except (TypeError, ValueError):
        return None, f"Invalid timeout: {raw_timeout!r}"

    cwd = args.get("cwd")
    return CommandSpec(command=cmd, cwd=str(cwd) if cwd else None, timeout_ms=clamp_timeout(timeout)), None


def format_transcript(spec: CommandSpec, exit_code: int, stdout: str, stderr: str) -> str:
    lines = [f"Command: {spec.command}"]
    if spec.cwd:
        lines.append(f"Working dir: {spec.cwd}")
    lines.append(f"Exit code: {exit_code}")
    if stdout:
        lines.append("")
        lines.append("STDOUT:")
        lines.extend(stdout.split("\n"))
    if stderr:
        lines.append("")
        lines.append("STDERR:")
        lines.extend(stderr.split("\n"))
    return "\n".join(lines)


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        proc.kill()


class CommandSandbox:
    """Runs one validated shell command per call under a hard deadline."""

    def __init__(
        self,
        extra_patterns: Iterable[str] = (),
        on_event: Callable[[str, dict[str, Any]], None] | None = None,
        cwd: str | None = None,
    ):
        self.extra_patterns = list(extra_patterns)
        self.cwd = cwd
        self._on_event = on_event

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._on_event is not None:
            self._on_event(event_type, data)

    def run(
        self,
        spec: CommandSpec,
        on_done: Callable[[ToolResult], None] | None = None,
    ) -> "asyncio.Task[ToolResult]":
        task = asyncio.get_running_loop().create_task(self._run(spec))
        if on_done is not None:
            task.add_done_callback(
                lambda t: on_done(ToolResult.fail("Cancelled") if t.cancelled() else t.result())
            )
        return task

    async def _run(self, spec: CommandSpec) -> ToolResult:
        if not spec.command.strip():
            return ToolResult.fail("Missing command")
        blocked = find_blocked_pattern(spec.command, self.extra_patterns)
        if blocked is not None:
            self._emit("command.blocked", {"command": spec.command, "pattern": blocked})
            return ToolResult.fail(BLOCKED_MESSAGE.format(pattern=blocked))

        timeout_ms = clamp_timeout(spec.timeout_ms)
        try:
            proc = await asyncio.create_subprocess_exec(
                "sh", "-c", spec.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
                cwd=spec.cwd or self.cwd,
                start_new_session=True,
            )
        except OSError as e:
            return ToolResult.fail(f"Failed to start command: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            _kill_group(proc)
            # Drain and discard whatever the killed process left behind.
            await proc.communicate()
            self._emit("command.timeout", {"command": spec.command, "timeout_ms": timeout_ms})
            return ToolResult.fail(f"Command timed out after {timeout_ms}ms")

        exit_code = proc.returncode if proc.returncode is not None else -1
        message = format_transcript(
            spec,
            exit_code,
            stdout.decode("utf-8", errors="replace") if stdout else "",
            stderr.decode("utf-8", errors="replace") if stderr else "",
        )
        if exit_code == 0:
            return ToolResult.ok(message)
        return ToolResult.fail(f"Exit code {exit_code}", message=message)
