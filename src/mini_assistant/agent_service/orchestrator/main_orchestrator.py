# main orchestrator, a.k.a. the entrypoint for answering a user query
# drives the two-phase protocol: first model call -> (optional) tool dispatch -> second model call -> commit to memory

import asyncio
from typing import Optional, Sequence

# collaborators
from mini_assistant.common.services.llm_service.llm_client.protocols import ToolCallingLLMProtocol
from mini_assistant.common.services.device_actions.protocols import NotifierProtocol
from mini_assistant.agent_service.tools.dispatcher import ToolDispatcher, build_tool_transcript
from mini_assistant.memory.chat_memory_store import ChatMemoryStoreProtocol
# prompts
from mini_assistant.agent_service.common.system_prompts.assistant_prompts import AssistantPrompts
# types
from mini_assistant.agent_service.common.types.orchestration_state import OrchestrationState, AnswerResult
from mini_assistant.common.types.assistant_types import ConversationTurn, ModelResponse
from mini_assistant.common.errors import (
    InputError,
    TransportError,
    AnswerTimeoutError,
    AnswerInProgressError,
)
# logging
from mini_assistant.common.logging.logger import logger

MEMORY_CLEARED_MESSAGE = "Memory cleared."

def render_memory_transcript(turns: Sequence[ConversationTurn]) -> str:
    """Chronological history block, one rendered turn per entry."""
    return "\n".join(turn.render() for turn in turns)

def build_first_prompt(history: str, query: str) -> str:
    sections = []
    if history:
        sections.append(AssistantPrompts.history_prompt_template.format(history=history))
    sections.append(AssistantPrompts.query_prompt_template.format(query=query))
    return "\n".join(sections)

def build_second_prompt(history: str, query: str, tool_transcript: str) -> str:
    return "\n".join([
        build_first_prompt(history, query),
        AssistantPrompts.tool_output_prompt_template.format(tool_output=tool_transcript),
    ])

class AssistantSession():
    """
    One conversation session: owns its memory, its in-flight guard and its timeout.
    - At most one answer() runs at a time; a concurrent call is rejected with AnswerInProgressError (never queued).
    - Only InputError and TransportError (incl. AnswerTimeoutError) escape answer(); tool failures end up in the transcript.
    - A turn is committed to memory only after it fully completes; a memory write failure is logged and skipped.
    """
    def __init__(
        self,
        session_id: str,
        llm_client: ToolCallingLLMProtocol,
        tool_dispatcher: ToolDispatcher,
        memory_store: ChatMemoryStoreProtocol,
        notifier: Optional[NotifierProtocol] = None,
        answer_timeout: Optional[float] = None,
    ):
        self.session_id = session_id
        self.llm_client = llm_client
        self.tool_dispatcher = tool_dispatcher
        self.memory_store = memory_store
        self.notifier = notifier
        self.answer_timeout = answer_timeout
        # define any state variables/metadata
        self.state: OrchestrationState = OrchestrationState.IDLE
        self._transitions: list[OrchestrationState] = []
        self._answer_lock = asyncio.Lock()

    @property
    def is_busy(self) -> bool:
        return self._answer_lock.locked()

    async def answer(self, query: str) -> AnswerResult:
        """
        Answer a user query with the two-phase protocol and commit the turn to memory.

        Raises:
            InputError: blank query, rejected before any state transition
            AnswerInProgressError: another answer is in flight for this session
            TransportError: a model call failed; nothing is committed
            AnswerTimeoutError: answer_timeout elapsed; partial work is discarded
        """
        if query is None or not query.strip():
            raise InputError("Enter a query to execute")
        if self._answer_lock.locked():
            raise AnswerInProgressError(f"Session {self.session_id} is already answering a query")

        async with self._answer_lock:
            self.state = OrchestrationState.IDLE
            self._transitions = [OrchestrationState.IDLE]
            try:
                try:
                    result = await asyncio.wait_for(self._run_protocol(query), timeout=self.answer_timeout)
                except asyncio.TimeoutError:
                    self._transition(OrchestrationState.DONE)
                    logger.error(f"Session {self.session_id}: answer timed out after {self.answer_timeout}s")
                    raise AnswerTimeoutError(f"No answer within {self.answer_timeout} seconds") from None
                except TransportError:
                    self._transition(OrchestrationState.DONE)
                    raise

                await self._commit(result)
                self._transition(OrchestrationState.DONE)
                result.transitions = list(self._transitions)
                return result
            finally:
                # ready for the next turn
                self.state = OrchestrationState.IDLE

    async def reset(self) -> None:
        """
        Clear the session's memory and let the user know.
        Waits for an in-flight answer to finish, so its turn is cleared too.
        """
        async with self._answer_lock:
            await self.memory_store.clear()
        logger.info(f"Session {self.session_id}: memory cleared")
        if self.notifier is not None:
            self.notifier.notify(MEMORY_CLEARED_MESSAGE)

    async def recent_turns(self) -> Sequence[ConversationTurn]:
        return await self.memory_store.recent_turns()

    # =====================================================================
    # Protocol steps
    # =====================================================================

    async def _run_protocol(self, query: str) -> AnswerResult:
        history = render_memory_transcript(await self._load_history())

        # 1) first call: the model either answers directly or requests tools
        self._transition(OrchestrationState.FIRST_CALL_IN_FLIGHT)
        first = await self._invoke_model(build_first_prompt(history, query))

        if not first.has_tool_calls:
            self._transition(OrchestrationState.DIRECT_ANSWER)
            return AnswerResult(
                query=query,
                response=self._response_text(first),
                model_calls=1,
            )

        # 2) run every requested tool, sequentially and in order
        self._transition(OrchestrationState.TOOL_EXECUTION)
        tool_results = await self.tool_dispatcher.dispatch(first.tool_calls)
        tool_transcript = build_tool_transcript(tool_results)

        # 3) second call: let the model react to the actual tool outcomes
        self._transition(OrchestrationState.SECOND_CALL_IN_FLIGHT)
        final = await self._invoke_model(build_second_prompt(history, query, tool_transcript))

        return AnswerResult(
            query=query,
            response=self._response_text(final),
            tool_transcript=tool_transcript,
            tool_results=tool_results,
            model_calls=2,
        )

    async def _load_history(self) -> Sequence[ConversationTurn]:
        try:
            return await self.memory_store.recent_turns()
        except Exception as e:
            # a broken durable store degrades to a history-less prompt instead of failing the turn
            logger.error(f"Session {self.session_id}: failed to load memory, continuing without history: {e}")
            return ()

    async def _invoke_model(self, prompt: str) -> ModelResponse:
        logger.debug(f"Session {self.session_id} prompt:\n{prompt}")
        try:
            return await self.llm_client.ainvoke(prompt)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Model call failed: {e}") from e

    async def _commit(self, result: AnswerResult) -> None:
        turn = ConversationTurn(
            prompt=result.query,
            tool_transcript=result.tool_transcript,
            response=result.response,
        )
        try:
            await self.memory_store.append(turn)
        except Exception as e:
            logger.error(f"Session {self.session_id}: failed to persist turn, skipping memory write: {e}")

    @staticmethod
    def _response_text(response: ModelResponse) -> str:
        return response.text if response.text is not None else AssistantPrompts.empty_response_fallback

    def _transition(self, new_state: OrchestrationState) -> None:
        logger.debug(f"Session {self.session_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self._transitions.append(new_state)
