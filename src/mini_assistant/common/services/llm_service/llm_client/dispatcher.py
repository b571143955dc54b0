# dispatcher for LLM clients: sessions depend on this wrapper, never on a concrete provider

import time
from enum import Enum, auto
from mini_assistant.common.types.assistant_types import ModelResponse
from mini_assistant.common.logging.logger import logger
from .protocols import ToolCallingLLMProtocol

# NOTE: to be expanded with more services if desired
class LLMProvider(Enum):
    GOOGLE_GENAI = auto() # just need a unique identifier
    LOCAL_OPENAI_COMPATIBLE = auto()

class TypedLLMClient(ToolCallingLLMProtocol):
    """
    Wraps the configured backend and keeps per-process model call counts for logging.
    """
    def __init__(self, provider: LLMProvider, client: ToolCallingLLMProtocol):
        self.provider = provider
        self.client = client
        self.call_count = 0
        self.failure_count = 0

    async def ainvoke(self, prompt: str, **kwargs) -> ModelResponse:
        self.call_count += 1
        started = time.perf_counter()
        try:
            response = await self.client.ainvoke(prompt, **kwargs)
        except Exception:
            self.failure_count += 1
            logger.error(f"{self.provider.name} call #{self.call_count} failed ({self.failure_count} failure(s) so far)")
            raise
        logger.info(
            f"{self.provider.name} call #{self.call_count} took {time.perf_counter() - started:.2f}s, "
            f"{len(response.tool_calls)} tool call(s) requested"
        )
        return response
