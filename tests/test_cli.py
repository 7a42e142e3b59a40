"""
Tests for the console review surface, AppContext and the typer CLI.
"""

import asyncio
import io
import json
import threading

import pytest
from rich.console import Console
from typer.testing import CliRunner

from toolgate.app_context import AppContext
from toolgate.main import app
from toolgate.review.session import review_edit
from toolgate.review.surface import ConsoleReviewSurface


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


def console_surface(answer):
    surface = ConsoleReviewSurface(console=Console(file=io.StringIO(), width=100))

    def fake_input(prompt=""):
        if isinstance(answer, BaseException):
            raise answer
        return answer

    surface.console.input = fake_input
    return surface


class TestConsoleReviewSurface:
    @pytest.mark.parametrize("answer,accepted", [("y", True), ("YES", True), ("n", False), ("", False)])
    def test_answers(self, make_ctx, answer, accepted):
        ctx = make_ctx(surface=console_surface(answer))

        async def go():
            return await review_edit(ctx, [], ["hello"], "out.txt", "File created: out.txt")

        result = asyncio.run(go())
        assert result.success is accepted
        assert (ctx.cwd / "out.txt").exists() is accepted
        if not accepted:
            assert result.error == "Rejected by user"

    def test_eof_is_dismissal(self, make_ctx):
        ctx = make_ctx(surface=console_surface(EOFError()))

        async def go():
            return await review_edit(ctx, [], ["hello"], "out.txt", "ok")

        assert asyncio.run(go()).error == "Rejected by user"

    def test_renders_diff(self, make_ctx):
        surface = console_surface("y")
        ctx = make_ctx(surface=surface)
        (ctx.cwd / "f.txt").write_text("old\n")

        async def go():
            return await review_edit(ctx, ["old"], ["new"], "f.txt", "ok")

        asyncio.run(go())
        out = surface.console.file.getvalue()
        assert "proposed://f.txt" in out
        assert "wrote" in out

    def test_cancelled_review_drops_prompt(self, make_ctx):
        release = threading.Event()
        surface = ConsoleReviewSurface(console=Console(file=io.StringIO(), width=100))

        def blocking_input(prompt=""):
            release.wait(5)
            return "y"

        surface.console.input = blocking_input
        ctx = make_ctx(surface=surface)

        async def go():
            review = asyncio.ensure_future(review_edit(ctx, [], ["hello"], "out.txt", "ok"))
            while not surface._views:
                await asyncio.sleep(0)
            prompt = next(iter(surface._views.values())).prompt
            review.cancel()
            with pytest.raises(asyncio.CancelledError):
                await review
            await asyncio.sleep(0.01)
            return prompt

        try:
            prompt = asyncio.run(go())
        finally:
            release.set()
        assert prompt.cancelled()
        assert surface._views == {}
        assert ctx.active_diff is None
        assert not (ctx.cwd / "out.txt").exists()


class TestAppContext:
    def test_from_env(self, tmp_path):
        work = tmp_path / "proj"
        (work / ".skills" / "lint").mkdir(parents=True)
        (work / ".skills" / "lint" / "SKILL.md").write_text("---\nname: lint\ndescription: Run linters.\n---\nUse ruff.\n")
        ctx = AppContext.from_env(cwd=work, session_id="abc", auto_approve=True, events_root=tmp_path / "ev")
        assert ctx.session_id == "abc"
        assert "read_file" in ctx.tools.names()
        assert [s.name for s in ctx.skills.available] == ["lint"]
        assert '<skill name="lint">' in ctx.system_context()
        assert "<loaded-skills>" not in ctx.system_context()
        ctx.dispatcher.execute("load_skill", {"name": "lint"})
        assert "<loaded-skills>" in ctx.system_context()
        assert ctx.events.path.parent == tmp_path / "ev" / "events"


class TestCli:
    def test_tools(self, tmp_path):
        result = CliRunner().invoke(app, ["tools", "--cwd", str(tmp_path)])
        assert result.exit_code == 0
        assert "replace_lines" in result.output

    def test_schemas(self, tmp_path):
        result = CliRunner().invoke(app, ["schemas", "--cwd", str(tmp_path)])
        assert result.exit_code == 0
        names = [s["name"] for s in json.loads(result.output)]
        assert "run_command" in names

    def test_call_read_file(self, tmp_path):
        (tmp_path / "hello.txt").write_text("hi there\n")
        result = CliRunner().invoke(
            app, ["call", "read_file", "--args", '{"path": "hello.txt"}', "--cwd", str(tmp_path), "--yes"]
        )
        assert result.exit_code == 0
        assert "1: hi there" in result.output

    def test_call_failure_exit_code(self, tmp_path):
        result = CliRunner().invoke(app, ["call", "read_file", "--args", '{"path": "nope"}', "--cwd", str(tmp_path)])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_call_write_with_yes(self, tmp_path):
        result = CliRunner().invoke(
            app,
            ["call", "write_file", "--args", '{"path": "n.txt", "content": "x"}', "--cwd", str(tmp_path), "--yes"],
        )
        assert result.exit_code == 0
        assert (tmp_path / "n.txt").read_text() == "x\n"

    def test_skills_none(self, tmp_path):
        result = CliRunner().invoke(app, ["skills", "--cwd", str(tmp_path)])
        assert result.exit_code == 0
        assert "No skills found." in result.output
