"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from toolgate.config.models import ToolgateConfig
from toolgate.events.store import EventStore
from toolgate.tools.base import ToolContext


class FakeSurface:
    """Review surface that records every call and lets the test decide."""

    def __init__(self):
        self.calls: list[str] = []
        self.sessions: list[Any] = []
        self.followed: list[tuple[Path, int | None]] = []

    def present(self, session):
        self.calls.append("present")
        self.sessions.append(session)

    def detach_dismissal(self, session):
        self.calls.append("detach_dismissal")

    def diff_off(self, session):
        self.calls.append("diff_off")

    def close_proposed(self, session):
        self.calls.append("close_proposed")

    def reopen_file(self, session, path):
        self.calls.append("reopen_file")

    def discard_scratch(self, session):
        self.calls.append("discard_scratch")

    def follow(self, path, line=None):
        self.followed.append((path, line))


class FakeIntel:
    """In-memory code-intelligence provider."""

    def __init__(self, clients=None, symbols=None, workspace=None, diagnostics=None, workspace_support=True):
        self._clients = clients if clients is not None else ["fake"]
        self.symbols = symbols
        self.workspace = workspace
        self.diagnostic_batches = list(diagnostics or [])
        self.workspace_support = workspace_support
        self.diagnostic_calls = 0

    def clients(self, path):
        return list(self._clients)

    def document_symbols(self, path):
        if isinstance(self.symbols, Exception):
            raise self.symbols
        return self.symbols

    def workspace_symbols(self, query):
        return self.workspace

    def supports_workspace_symbols(self):
        return self.workspace_support

    def diagnostics(self, path):
        self.diagnostic_calls += 1
        if self.diagnostic_batches:
            return self.diagnostic_batches.pop(0)
        return []


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def config():
    return ToolgateConfig(attach_timeout_ms=200, diagnostics_timeout_ms=300)


@pytest.fixture
def events(tmp_path):
    return EventStore.open("test-session", root=tmp_path / "data")


@pytest.fixture
def make_ctx(tmp_path, surface, config, events):
    workdir = tmp_path / "work"
    workdir.mkdir()
    workdir = workdir.resolve()

    def _make(**overrides) -> ToolContext:
        kwargs: dict[str, Any] = {
            "cwd": workdir,
            "config": config,
            "surface": surface,
            "events": events,
            "session_id": "test-session",
        }
        kwargs.update(overrides)
        return ToolContext(**kwargs)

    return _make


@pytest.fixture
def event_types(events):
    def _types() -> list[str]:
        return [e.type for e in events.iter_events()]

    return _types


@pytest.fixture
def fake_intel():
    return FakeIntel
