# executes the model's requested tool calls, isolating every failure into its own ToolResult

from typing import Sequence
from pydantic import ValidationError

from mini_assistant.agent_service.tools.registry import ToolRegistry
from mini_assistant.common.errors import ToolArgumentError, UnknownToolError
from mini_assistant.common.types.assistant_types import ToolCallRequest, ToolResult
from mini_assistant.common.logging.logger import logger

def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__

def build_tool_transcript(results: Sequence[ToolResult]) -> str:
    """Concatenate results in request order as '<name>: <output>\\n' lines, failures included."""
    return "".join(result.transcript_line() for result in results)

class ToolDispatcher:
    """
    Runs tool calls one at a time, in the order the model requested them.
    - Handlers are never run concurrently: several of them launch user-visible device actions.
    - Unknown tools, argument errors and handler exceptions each become a failed ToolResult;
      nothing raised by a tool escapes to abort the turn.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def dispatch(self, requests: Sequence[ToolCallRequest]) -> list[ToolResult]:
        results: list[ToolResult] = []
        for request in requests:
            results.append(await self._dispatch_one(request))
        return results

    async def _dispatch_one(self, request: ToolCallRequest) -> ToolResult:
        logger.info(f"Dispatching tool '{request.name}' with args: {request.raw_args}")

        try:
            tool = self.registry.get(request.name)
        except UnknownToolError as e:
            return self._failure(request.name, _describe(e))

        try:
            call = tool.parser(request.raw_args, tool.declaration)
        except (ToolArgumentError, ValidationError) as e:
            return self._failure(request.name, f"Invalid arguments for {request.name}: {_describe(e)}")
        except Exception as e:
            logger.error(f"Parser for '{request.name}' raised unexpectedly: {e!r}")
            return self._failure(request.name, f"Invalid arguments for {request.name}: {_describe(e)}")

        try:
            output = await tool.handler(call)
        except Exception as e:
            # includes launcher refusals (permission denied, no matching app) and collaborator failures
            return self._failure(request.name, f"Error when calling {request.name}: {_describe(e)}")

        if not output or not output.strip():
            output = f"{request.name} completed"
        return ToolResult(name=request.name, output_text=output, succeeded=True)

    def _failure(self, name: str, message: str) -> ToolResult:
        logger.warning(f"Tool '{name}' failed: {message}")
        return ToolResult(name=name, output_text=message, succeeded=False)
