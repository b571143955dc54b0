# tool registration: declaration + argument parser + handler per tool name

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mini_assistant.common.errors import UnknownToolError
from mini_assistant.common.types.tool_declaration_types import ToolDeclaration
from mini_assistant.agent_service.tools.tool_calls import (
    ToolCallParser,
    parse_call,
    parse_email,
    parse_calendar_event,
    parse_note,
    parse_retrieve_documents,
)
from mini_assistant.agent_service.tools.device_tools import DeviceActionTools
from mini_assistant.agent_service.retrieval_agent.retrieval_bridge import RetrievalBridge
from mini_assistant.agent_service.common.tool_calling_declarations.assistant_tools import (
    create_call_declaration,
    create_email_declaration,
    create_calendar_event_declaration,
    create_note_declaration,
    retrieve_documents_declaration,
)
from mini_assistant.common.logging.logger import logger

ToolHandler = Callable[[Any], Awaitable[str]]

@dataclass(frozen=True)
class RegisteredTool:
    declaration: ToolDeclaration
    parser: ToolCallParser
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.declaration.name

class ToolRegistry:
    """Maps tool names to their declaration, argument parser and handler."""

    def __init__(self):
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, declaration: ToolDeclaration, parser: ToolCallParser, handler: ToolHandler) -> None:
        if declaration.name in self._tools:
            raise ValueError(f"Tool '{declaration.name}' is already registered")
        self._tools[declaration.name] = RegisteredTool(declaration=declaration, parser=parser, handler=handler)
        logger.debug(f"Registered tool: {declaration.name}")

    def get(self, name: str) -> RegisteredTool:
        if name not in self._tools:
            raise UnknownToolError(f"Unknown tool '{name}'. Available tools: {', '.join(self.names()) or 'none'}")
        return self._tools[name]

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def declarations(self) -> list[ToolDeclaration]:
        return [tool.declaration for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

def build_assistant_tool_registry(device_tools: DeviceActionTools, retrieval_bridge: RetrievalBridge) -> ToolRegistry:
    """
    Light helper to wire every assistant tool declaration to its parser and handler.
    """
    registry = ToolRegistry()
    registry.register(create_call_declaration, parse_call, device_tools.create_call)
    registry.register(retrieve_documents_declaration, parse_retrieve_documents, retrieval_bridge.retrieve)
    registry.register(create_email_declaration, parse_email, device_tools.create_email)
    registry.register(create_calendar_event_declaration, parse_calendar_event, device_tools.create_calendar_event)
    registry.register(create_note_declaration, parse_note, device_tools.create_note)
    return registry
