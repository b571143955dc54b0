# The core async set up for Google's GenAI LLM client, with tool calling
# NOTE: can be swapped for different LLM providers via the dispatcher

from typing import Optional, Sequence
# use tenacity to retry when desired
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed, retry_if_exception_type

from google import genai # officially recommended import path
from google.genai import types, errors

from .protocols import ToolCallingLLMProtocol, normalize_tool_args
from mini_assistant.common.errors import MissingCredentialError, TransportError
from mini_assistant.common.types.assistant_types import ModelResponse, ToolCallRequest
from mini_assistant.common.types.tool_declaration_types import ToolDeclaration
from mini_assistant.common.logging.logger import logger

# NOTE: this uses the public Gemini API with an API key, not Vertex AI.
class AsyncGenAIToolCallingClient(ToolCallingLLMProtocol):
    """
    Hosted Gemini model with the assistant's tools attached.
    - Each ainvoke() is a single generate_content round-trip; tool execution happens outside the client.
    - Only transient server errors are retried; every provider failure surfaces as TransportError.
    """
    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        *,
        api_key: Optional[str] = None,
        system_prompt: str = "",
        tool_declarations: Sequence[ToolDeclaration] = (),
        temperature: float = 0.3,
        top_p: float = 0.4,
        retry_attempts: int = 2,
        retry_wait: float = 0.5,
        retry_on: type[Exception] = errors.ServerError,
    ):
        if not api_key:
            raise MissingCredentialError("No Gemini API key configured; set GOOGLE_GENAI_API_KEY to use the hosted model.")
        # shared client, safe within a single event loop and enables connection pooling
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name

        # wrap function declarations in tool and config objects
        tools = types.Tool(function_declarations=[d.to_function_declaration() for d in tool_declarations]) # type: ignore
        self.config = types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            tools=[tools] if tool_declarations else None,
            temperature=temperature,
            top_p=top_p,
        )
        self.retryer = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_fixed(retry_wait),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )

    async def ainvoke(self, prompt: str, **kwargs) -> ModelResponse:
        try:
            resp = await self._generate(prompt, **kwargs)
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise TransportError(f"Gemini request failed: {e}") from e
        return self._to_model_response(resp)

    async def _generate(self, prompt: str, **kwargs) -> types.GenerateContentResponse:
        async for attempt in self.retryer:
            with attempt: # let tenacity see context of each attempt instead of swallowing until the last
                return await self.client.aio.models.generate_content(
                    model=self.model_name,
                    contents=prompt, # auto-wrapped in a content object
                    config=self.config,
                    **kwargs,
                )
        raise RuntimeError("generate_content retryer yielded no attempts")

    @staticmethod
    def _to_model_response(resp: types.GenerateContentResponse) -> ModelResponse:
        tool_calls = [
            ToolCallRequest(name=call.name, raw_args=normalize_tool_args(call.args))
            for call in (resp.function_calls or [])
            if call.name
        ]
        if tool_calls:
            logger.info(f"Gemini requested tools: {[call.name for call in tool_calls]}")
        return ModelResponse(text=AsyncGenAIToolCallingClient._extract_text(resp), tool_calls=tool_calls)

    @staticmethod
    def _extract_text(resp: types.GenerateContentResponse) -> Optional[str]:
        """
        Join the text parts of the first candidate.
        NOTE: resp.text warns when function-call parts are present, so parts are read directly; thought parts are skipped.
        """
        candidates = resp.candidates or []
        if not candidates or candidates[0].content is None:
            return None
        parts = candidates[0].content.parts or []
        text = "".join(part.text for part in parts if part.text and not part.thought)
        return text or None
