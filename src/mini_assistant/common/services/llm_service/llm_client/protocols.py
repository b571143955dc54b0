# protocols for LLM clients

from typing import Any, Mapping, Protocol, runtime_checkable
import json

from mini_assistant.common.types.assistant_types import ModelResponse

# Ensures that all LLM clients implement this protocol
@runtime_checkable
class ToolCallingLLMProtocol(Protocol):
    """
    One opaque model invocation: send a prompt, get back text and/or requested tool calls.
    Any provider failure must surface as TransportError.
    """
    async def ainvoke(self, prompt: str, **kwargs) -> ModelResponse: ...

def normalize_tool_args(args: Mapping[str, Any] | None) -> dict[str, str]:
    """
    Flatten provider-typed function-call arguments into plain strings.
    Tool handlers coerce from strings themselves, so the same parsing path runs for every provider.
    - None values are dropped
    - objects / lists are re-serialized as JSON
    """
    normalized: dict[str, str] = {}
    for key, value in (args or {}).items():
        if value is None:
            continue
        if isinstance(value, str):
            normalized[key] = value
        elif isinstance(value, bool):
            normalized[key] = "true" if value else "false"
        elif isinstance(value, (dict, list, tuple)):
            normalized[key] = json.dumps(value)
        else:
            normalized[key] = str(value)
    return normalized
