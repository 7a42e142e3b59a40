from __future__ import annotations
import asyncio
import subprocess
from dataclasses import dataclass
from typing import Sequence, Optional

@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str

def run_cmd(cmd: Sequence[str], cwd: str, timeout: Optional[int]=120) -> CmdResult:
    p = subprocess.run(
        list(cmd),
        cwd=cwd,
        text=True,
        capture_output=True,
        timeout=timeout,
        shell=False,
    )
    return CmdResult(p.returncode, p.stdout, p.stderr)

async def run_cmd_async(cmd: Sequence[str], cwd: str) -> CmdResult:
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    stdout, stderr = await proc.communicate()
    return CmdResult(
        proc.returncode if proc.returncode is not None else -1,
        stdout.decode("utf-8", errors="replace") if stdout else "",
        stderr.decode("utf-8", errors="replace") if stderr else "",
    )
