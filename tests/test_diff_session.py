"""
Tests for the diff-review session state machine.
"""

import asyncio

import pytest

from toolgate.review.session import (
    DiffSession,
    DiffSessionBusy,
    DiffState,
    REJECTED_BY_USER,
    open_diff,
    review_edit,
)
from toolgate.review.surface import AutoApproveSurface, unified_diff

TEARDOWN = ["detach_dismissal", "diff_off", "close_proposed"]


class Outcomes:
    def __init__(self):
        self.accepted = []
        self.rejected = []
        self.surface_calls_at_callback = None

    def on_accept_for(self, surface):
        def _cb(outcome):
            self.surface_calls_at_callback = list(surface.calls)
            self.accepted.append(outcome)

        return _cb

    def on_reject_for(self, surface):
        def _cb(reason):
            self.surface_calls_at_callback = list(surface.calls)
            self.rejected.append(reason)

        return _cb


class TestDiffSession:
    def _open(self, ctx, surface, original, proposed, filepath="f.txt"):
        out = Outcomes()
        session = open_diff(ctx, original, proposed, filepath, out.on_accept_for(surface), out.on_reject_for(surface))
        return session, out

    def test_accept_writes_and_tears_down_in_order(self, make_ctx, surface, event_types):
        ctx = make_ctx()

        async def go():
            session, out = self._open(ctx, surface, ["old"], ["new", "lines"])
            assert session.state is DiffState.OPEN
            assert ctx.active_diff is session
            assert session.accept() is True
            await session._finishing
            return session, out

        session, out = asyncio.run(go())
        assert (ctx.cwd / "f.txt").read_text() == "new\nlines\n"
        assert surface.calls == ["present", *TEARDOWN, "reopen_file", "discard_scratch"]
        assert out.surface_calls_at_callback == surface.calls
        assert len(out.accepted) == 1
        assert out.accepted[0].errors == []
        assert out.rejected == []
        assert session.state is DiffState.ACCEPTED
        assert ctx.active_diff is None
        assert event_types() == ["diff.open", "diff.accepted"]

    def test_reject_skips_reopen_and_does_not_write(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            session, out = self._open(ctx, surface, [], ["x"])
            assert session.reject() is True
            return session, out

        session, out = asyncio.run(go())
        assert not (ctx.cwd / "f.txt").exists()
        assert surface.calls == ["present", *TEARDOWN, "discard_scratch"]
        assert out.rejected == [REJECTED_BY_USER]
        assert out.accepted == []
        assert session.state is DiffState.REJECTED

    def test_dismissal_is_rejection(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            session, out = self._open(ctx, surface, [], ["x"])
            session.dismissed()
            return out

        assert asyncio.run(go()).rejected == ["Rejected by user"]

    def test_terminal_transition_happens_once(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            session, out = self._open(ctx, surface, [], ["x"])
            assert session.reject("nope") is True
            assert session.accept() is False
            assert session.dismissed() is False
            assert session.reject() is False
            return out

        out = asyncio.run(go())
        assert out.rejected == ["nope"]
        assert out.accepted == []
        assert not (ctx.cwd / "f.txt").exists()

    def test_second_open_is_busy(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            first, _ = self._open(ctx, surface, [], ["a"], filepath="a.txt")
            with pytest.raises(DiffSessionBusy, match="Another diff review is already open: a.txt"):
                self._open(ctx, surface, [], ["b"], filepath="b.txt")
            assert ctx.active_diff is first
            first.reject()
            # slot is free again
            second, _ = self._open(ctx, surface, [], ["b"], filepath="b.txt")
            assert ctx.active_diff is second

        asyncio.run(go())

    def test_write_failure_is_rejection(self, make_ctx, surface, event_types):
        ctx = make_ctx()
        (ctx.cwd / "blocker").write_text("i am a file")

        async def go():
            session, out = self._open(ctx, surface, [], ["x"], filepath="blocker/child.txt")
            session.accept()
            return session, out

        session, out = asyncio.run(go())
        assert len(out.rejected) == 1
        assert out.rejected[0].startswith("Write failed: ")
        assert out.accepted == []
        assert "reopen_file" not in surface.calls
        assert session.state is DiffState.REJECTED
        assert ctx.active_diff is None
        assert event_types()[-1] == "diff.rejected"

    def test_unencodable_line_is_rejection(self, make_ctx, surface, event_types):
        ctx = make_ctx()
        target = ctx.cwd / "f.txt"
        target.write_text("one\ntwo\n", encoding="utf-8")

        async def go():
            session, out = self._open(ctx, surface, ["one", "two"], ["bad \ud800"])
            assert session.accept() is True
            return session, out

        session, out = asyncio.run(go())
        assert out.accepted == []
        assert len(out.rejected) == 1
        assert out.rejected[0].startswith("Write failed: ")
        assert session.state is DiffState.REJECTED
        assert ctx.active_diff is None
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"
        assert event_types()[-1] == "diff.rejected"

    def test_diagnostics_collected_after_accept(self, make_ctx, surface, fake_intel):
        intel = fake_intel(
            diagnostics=[
                [{"severity": 2, "message": "warn", "range": {"start": {"line": 0, "character": 0}}}],
                [{"severity": 1, "message": "bad", "range": {"start": {"line": 4, "character": 2}}}],
            ]
        )
        ctx = make_ctx(intel=intel)

        async def go():
            session, out = self._open(ctx, surface, [], ["x"])
            session.accept()
            await session._finishing
            return out

        out = asyncio.run(go())
        [outcome] = out.accepted
        assert [(d.line, d.column, d.message) for d in outcome.errors] == [(5, 3, "bad")]

    def test_reopen_hook_deferred(self, make_ctx, surface):
        hook_calls = []
        ctx = make_ctx(reopen_hook=lambda: hook_calls.append("hook"))

        async def go():
            session, _ = self._open(ctx, surface, [], ["x"])
            session.reject()
            assert hook_calls == []
            await asyncio.sleep(0)
            assert hook_calls == ["hook"]

        asyncio.run(go())

    def test_open_twice_on_same_session(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            session = DiffSession(ctx, [], ["x"], "f.txt", lambda o: None, lambda r: None)
            session.open()
            with pytest.raises(RuntimeError):
                session.open()

        asyncio.run(go())


class TestReviewEdit:
    def test_auto_approve(self, make_ctx):
        ctx = make_ctx(surface=AutoApproveSurface())

        async def go():
            return await review_edit(ctx, [], ["hello"], "new.txt", "File created: new.txt")

        result = asyncio.run(go())
        assert result.success
        assert result.message == "File created: new.txt"
        assert (ctx.cwd / "new.txt").read_text() == "hello\n"

    def test_busy_slot_becomes_failure(self, make_ctx, surface):
        ctx = make_ctx()

        async def go():
            open_diff(ctx, [], ["a"], "a.txt", lambda o: None, lambda r: None)
            return await review_edit(ctx, [], ["b"], "b.txt", "ok")

        result = asyncio.run(go())
        assert result.error == "Another diff review is already open: a.txt"


class TestUnifiedDiff:
    def test_headers(self, make_ctx, surface):
        ctx = make_ctx()
        session = DiffSession(ctx, ["a"], ["b"], "x.py", lambda o: None, lambda r: None)
        text = unified_diff(session)
        assert "--- original://x.py" in text
        assert "+++ proposed://x.py" in text
        assert "-a" in text and "+b" in text
