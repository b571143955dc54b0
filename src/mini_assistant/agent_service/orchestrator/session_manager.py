# keeps one AssistantSession per session id, sharing the model client, tools and notifier

import threading
from typing import Callable, Optional

from mini_assistant.agent_service.orchestrator.main_orchestrator import AssistantSession
from mini_assistant.agent_service.tools.dispatcher import ToolDispatcher
from mini_assistant.common.services.llm_service.llm_client.protocols import ToolCallingLLMProtocol
from mini_assistant.common.services.device_actions.protocols import NotifierProtocol
from mini_assistant.memory.chat_memory_store import ChatMemoryStoreProtocol
from mini_assistant.common.errors import MissingCredentialError
from mini_assistant.common.logging.logger import logger

MemoryStoreFactory = Callable[[str], ChatMemoryStoreProtocol]

class SessionManager():
    """
    Lazily creates sessions on first use.
    NOTE: llm_client may be None when no model backend could be configured (e.g. missing API key);
    asking for a session then raises MissingCredentialError so the caller can prompt for a key.
    """

    def __init__(
        self,
        llm_client: Optional[ToolCallingLLMProtocol],
        tool_dispatcher: ToolDispatcher,
        memory_store_factory: MemoryStoreFactory,
        notifier: Optional[NotifierProtocol] = None,
        answer_timeout: Optional[float] = None,
        missing_client_reason: str = "No model backend is configured",
    ):
        self.llm_client = llm_client
        self.tool_dispatcher = tool_dispatcher
        self.memory_store_factory = memory_store_factory
        self.notifier = notifier
        self.answer_timeout = answer_timeout
        self.missing_client_reason = missing_client_reason
        self._sessions: dict[str, AssistantSession] = {}
        self._lock = threading.Lock()

    def get_session(self, session_id: str) -> AssistantSession:
        if self.llm_client is None:
            raise MissingCredentialError(self.missing_client_reason)

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = AssistantSession(
                    session_id=session_id,
                    llm_client=self.llm_client,
                    tool_dispatcher=self.tool_dispatcher,
                    memory_store=self.memory_store_factory(session_id),
                    notifier=self.notifier,
                    answer_timeout=self.answer_timeout,
                )
                self._sessions[session_id] = session
                logger.info(f"Created assistant session {session_id}")
            return session

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
