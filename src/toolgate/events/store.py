"""Per-session audit trail of tool activity.

Events written by toolgate:

- ``tool.call`` / ``tool.result``: every dispatch and its outcome
- ``diff.open``, ``diff.accepted``, ``diff.rejected``: review lifecycle
- ``diff.diagnostics_failed``: the provider raised while collecting errors
- ``command.blocked`` / ``command.timeout``: sandbox refusals and kills

Lines that cannot be encoded (lone surrogates in tool input) are written
with backslash escapes rather than dropped.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from platformdirs import user_data_dir

APP_NAME = "toolgate"


def _events_dir(root: Path | None = None) -> Path:
    d = (root or Path(user_data_dir(APP_NAME))) / "events"
    d.mkdir(parents=True, exist_ok=True)
    return d


@dataclass
class Event:
    ts: float
    type: str
    data: dict[str, Any]


@dataclass
class EventStore:
    """Append-only jsonl audit log of tool activity, one file per session.

    Reading is tolerant of partial corruption (a truncated trailing line).
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str, root: Path | None = None) -> "EventStore":
        path = _events_dir(root) / f"{session_id}.jsonl"
        return EventStore(session_id=session_id, path=path)

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        ev = Event(ts=time.time(), type=event_type, data=data)
        with self.path.open("a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(json.dumps(ev.__dict__, ensure_ascii=False, default=str) + "\n")

    def iter_events(self) -> Iterable[Event]:
        if not self.path.exists():
            return []
        out: list[Event] = []
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except ValueError:
                continue
            if isinstance(obj, dict):
                out.append(Event(ts=float(obj.get("ts", 0.0)), type=str(obj.get("type")), data=obj.get("data") or {}))
        return out
