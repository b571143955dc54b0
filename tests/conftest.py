# shared fakes for the assistant core tests

import asyncio
from typing import Optional, Sequence, Union

import pytest

from mini_assistant.common.types.assistant_types import ModelResponse, ToolCallRequest, ConversationTurn
from mini_assistant.common.services.device_actions.action_types import ActionDescriptor
from mini_assistant.common.errors import ActionLaunchError
from mini_assistant.memory.chat_memory_store import InMemoryChatMemoryStore
from mini_assistant.memory.chunk_index import InMemoryChunkIndex
from mini_assistant.agent_service.tools.device_tools import DeviceActionTools
from mini_assistant.agent_service.tools.registry import build_assistant_tool_registry
from mini_assistant.agent_service.tools.dispatcher import ToolDispatcher
from mini_assistant.agent_service.retrieval_agent.retrieval_bridge import RetrievalBridge
from mini_assistant.agent_service.orchestrator.main_orchestrator import AssistantSession

ScriptedStep = Union[ModelResponse, Exception]

class ScriptedLLMClient:
    """Returns queued responses (or raises queued exceptions) in order and records every prompt."""

    def __init__(self, steps: Sequence[ScriptedStep] = (), delay: float = 0.0):
        self.steps = list(steps)
        self.delay = delay
        self.prompts: list[str] = []

    async def ainvoke(self, prompt: str, **kwargs) -> ModelResponse:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.steps:
            raise AssertionError("model invoked more times than scripted")
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

def text_response(text: Optional[str]) -> ModelResponse:
    return ModelResponse(text=text)

def tool_response(*calls: tuple[str, dict]) -> ModelResponse:
    return ModelResponse(tool_calls=[ToolCallRequest(name=name, raw_args=args) for name, args in calls])

class FakeEmbeddingClient:
    """Maps known texts to fixed vectors; anything else embeds to `default`."""

    def __init__(self, vectors: Optional[dict[str, list[float]]] = None, default: Optional[list[float]] = None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls: list[tuple[list[str], Optional[str]]] = []

    async def aembed_text(self, text: list[str], task_type: Optional[str] = None) -> list[list[float]]:
        self.calls.append((list(text), task_type))
        return [self.vectors.get(t, self.default) for t in text]

class RecordingNotifier:
    def __init__(self):
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)

class RecordingLauncher:
    """Records launched descriptors, or raises `error` for every launch when set."""

    def __init__(self, error: Optional[ActionLaunchError] = None):
        self.error = error
        self.launched: list[ActionDescriptor] = []

    async def launch(self, descriptor: ActionDescriptor) -> None:
        if self.error is not None:
            raise self.error
        self.launched.append(descriptor)

class FailingMemoryStore(InMemoryChatMemoryStore):
    """Memory store whose writes (and optionally reads) fail."""

    def __init__(self, fail_reads: bool = False):
        super().__init__()
        self.fail_reads = fail_reads

    async def append(self, turn: ConversationTurn) -> None:
        raise OSError("disk full")

    async def recent_turns(self) -> Sequence[ConversationTurn]:
        if self.fail_reads:
            raise OSError("database is locked")
        return await super().recent_turns()

@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()

@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()

@pytest.fixture
def embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()

@pytest.fixture
def chunk_index() -> InMemoryChunkIndex:
    return InMemoryChunkIndex()

@pytest.fixture
def retrieval_bridge(embedding_client, chunk_index, notifier) -> RetrievalBridge:
    return RetrievalBridge(text_embedding_client=embedding_client, chunk_index=chunk_index, notifier=notifier)

@pytest.fixture
def tool_dispatcher(launcher, retrieval_bridge) -> ToolDispatcher:
    registry = build_assistant_tool_registry(DeviceActionTools(launcher=launcher), retrieval_bridge)
    return ToolDispatcher(registry=registry)

@pytest.fixture
def memory_store() -> InMemoryChatMemoryStore:
    return InMemoryChatMemoryStore()

@pytest.fixture
def make_session(tool_dispatcher, memory_store, notifier):
    """Build a session around a scripted model; other collaborators come from the shared fixtures."""
    def _make(llm_client: ScriptedLLMClient, answer_timeout: Optional[float] = None, memory=None) -> AssistantSession:
        return AssistantSession(
            session_id="test",
            llm_client=llm_client,
            tool_dispatcher=tool_dispatcher,
            memory_store=memory if memory is not None else memory_store,
            notifier=notifier,
            answer_timeout=answer_timeout,
        )
    return _make
