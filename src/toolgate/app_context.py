from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config.loader import load_config
from .config.models import ToolgateConfig
from .events.store import EventStore
from .intel.jedi_provider import JediProvider
from .review.surface import AutoApproveSurface, ConsoleReviewSurface
from .skills.catalog import SkillCatalog
from .skills.loader import discovery_paths
from .tools.builtin import register_builtin_tools
from .tools.base import ToolContext
from .tools.dispatcher import Dispatcher
from .tools.registry import ToolRegistry

@dataclass
class AppContext:
    cwd: Path
    config: ToolgateConfig
    tools: ToolRegistry
    skills: SkillCatalog
    tool_context: ToolContext
    dispatcher: Dispatcher
    events: EventStore | None = None
    auto_approve: bool = False
    trace: bool = False

    @property
    def session_id(self) -> str | None:
        return self.tool_context.session_id

    def system_context(self) -> str:
        """Skill blocks to prepend to the caller's system prompt."""
        parts = [self.skills.available_xml(), self.skills.reminder_xml()]
        return "\n\n".join(p for p in parts if p)

    @staticmethod
    def from_env(
        cwd: Path,
        session_id: str | None = None,
        auto_approve: bool = False,
        config_path: Optional[Path] = None,
        trace: bool = False,
        events_root: Optional[Path] = None,
    ) -> "AppContext":

        if config_path:
            config_path = config_path.expanduser().resolve()

        config = load_config(cwd=cwd, explicit_path=config_path)

        tools = ToolRegistry()
        register_builtin_tools(tools)

        skills = SkillCatalog()
        skills.refresh(discovery_paths(cwd, config.skill_paths))

        surface = AutoApproveSurface() if auto_approve else ConsoleReviewSurface(follow_reads=config.follow_agent)

        sid = session_id or uuid.uuid4().hex[:12]
        events = EventStore.open(sid, root=events_root)

        tctx = ToolContext(
            cwd=cwd,
            config=config,
            surface=surface,
            intel=JediProvider(cwd),
            skills=skills,
            events=events,
            session_id=sid,
        )

        return AppContext(
            cwd=cwd,
            config=config,
            tools=tools,
            skills=skills,
            tool_context=tctx,
            dispatcher=Dispatcher(tools, tctx, trace=trace),
            events=events,
            auto_approve=auto_approve,
            trace=trace,
        )
