# generic LLM client wrappers

from mini_assistant.common.services.llm_service.llm_client.dispatcher import TypedLLMClient, LLMProvider
from mini_assistant.common.services.llm_service.llm_client.protocols import ToolCallingLLMProtocol

__all__ = ["TypedLLMClient", "LLMProvider", "ToolCallingLLMProtocol"]
