# OpenAI-compatible chat completions client, used for local / on-device models (e.g. Ollama, llama.cpp server)

import json
from typing import Optional, Sequence
from openai import AsyncOpenAI, APIConnectionError, InternalServerError
# use tenacity to retry when desired
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed, retry_if_exception_type

from .protocols import ToolCallingLLMProtocol, normalize_tool_args
from mini_assistant.common.errors import TransportError
from mini_assistant.common.types.assistant_types import ModelResponse, ToolCallRequest
from mini_assistant.common.types.tool_declaration_types import ToolDeclaration
from mini_assistant.common.logging.logger import logger

class AsyncOpenAICompatibleToolCallingClient(ToolCallingLLMProtocol):
    """
    Same contract as the hosted Gemini client, against any endpoint that speaks the chat completions schema.
    """
    def __init__(
        self,
        model_name: str,
        *,
        base_url: str,
        api_key: str = "local",
        system_prompt: str = "",
        tool_declarations: Sequence[ToolDeclaration] = (),
        temperature: float = 0.3,
        top_p: float = 0.4,
        retry_attempts: int = 2,
        retry_wait: float = 0.5,
        retry_on: tuple[type[Exception], ...] = (APIConnectionError, InternalServerError),
    ):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model_name = model_name
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.top_p = top_p
        self.tools = [{"type": "function", "function": d.to_function_declaration()} for d in tool_declarations]
        self.retryer = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_fixed(retry_wait),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )

    async def ainvoke(self, prompt: str, **kwargs) -> ModelResponse:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            resp = None
            async for attempt in self.retryer:
                with attempt:
                    resp = await self.client.chat.completions.create(
                        model=self.model_name,
                        messages=messages, # type: ignore[arg-type]
                        tools=self.tools or None, # type: ignore[arg-type]
                        temperature=self.temperature,
                        top_p=self.top_p,
                        **kwargs,
                    )
        except Exception as e:
            logger.error(f"Local model request failed: {e}")
            raise TransportError(f"Local model request failed: {e}") from e

        if resp is None or not resp.choices:
            raise TransportError("Local model returned no choices")
        message = resp.choices[0].message
        tool_calls = [
            ToolCallRequest(name=call.function.name, raw_args=self._parse_arguments(call.function.arguments))
            for call in (message.tool_calls or [])
            if getattr(call, "function", None) is not None
        ]
        return ModelResponse(text=message.content or None, tool_calls=tool_calls)

    @staticmethod
    def _parse_arguments(arguments: Optional[str]) -> dict[str, str]:
        """
        Decode the JSON argument string of a tool call.
        Malformed JSON yields no arguments, so required-argument checks fail that one tool call only.
        """
        if not arguments:
            return {}
        try:
            decoded = json.loads(arguments)
        except json.JSONDecodeError:
            logger.warning(f"Malformed tool call arguments from local model: {arguments[:200]}")
            return {}
        return normalize_tool_args(decoded) if isinstance(decoded, dict) else {}
