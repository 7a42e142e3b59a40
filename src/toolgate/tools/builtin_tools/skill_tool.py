from __future__ import annotations

from typing import Any

from ..base import ToolContext, ToolResult, ToolSpec


class LoadSkillTool:
    spec = ToolSpec(
        name="load_skill",
        description=(
            "Load a skill by name and return its SKILL.md instructions so the assistant can follow them. "
            "Only skills listed under <available-skills> can be loaded."
        ),
        parameters={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Skill name, e.g. 'release-notes'."},
            },
            "required": ["name"],
        },
        permission_key="read",
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        name = args.get("name")
        if not name:
            return ToolResult.fail("Missing name")
        if ctx.skills is None:
            return ToolResult.fail(f"Skill '{name}' not found. Use available skills: (none)")
        return ctx.skills.load(str(name))
