from __future__ import annotations

from .registry import ToolRegistry

from .builtin_tools.search_tools import SearchFilesTool, ListFilesTool
from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.file_write import WriteFileTool
from .builtin_tools.replace_lines import ReplaceLinesTool
from .builtin_tools.command_tool import RunCommandTool
from .builtin_tools.symbols_tool import DocumentSymbolsTool, WorkspaceSymbolsTool
from .builtin_tools.skill_tool import LoadSkillTool

def register_builtin_tools(registry: ToolRegistry) -> None:
    registry.register(SearchFilesTool())
    registry.register(ListFilesTool())
    registry.register(ReadFileTool())
    registry.register(WriteFileTool())
    registry.register(ReplaceLinesTool())
    registry.register(RunCommandTool())
    registry.register(DocumentSymbolsTool())
    registry.register(WorkspaceSymbolsTool())
    registry.register(LoadSkillTool())
