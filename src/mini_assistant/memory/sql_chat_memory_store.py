# durable variant of the chat memory store, backed by sqlalchemy

from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncEngine

from mini_assistant.memory.chat_memory_store import ChatMemoryStoreProtocol, DEFAULT_MEMORY_CAPACITY
from mini_assistant.common.types.assistant_types import ConversationTurn
from mini_assistant.common.db.crud.memory.chat_memory_crud import (
    append_chat_memory,
    get_recent_chat_memories,
    clear_chat_memories,
)

class SQLChatMemoryStore(ChatMemoryStoreProtocol):
    """
    Chat memory persisted in the `chat_memories` table, scoped to one session id.
    - append (insert + eviction) and clear each run in one transaction, so readers never see partial state.
    - I/O failures propagate; the orchestrator logs them and skips persistence for that turn.
    """

    def __init__(self, session_id: str, main_db_engine: AsyncEngine, capacity: int = DEFAULT_MEMORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.session_id = session_id
        self.main_db_engine = main_db_engine
        self.capacity = capacity

    async def append(self, turn: ConversationTurn) -> None:
        await append_chat_memory(
            session_id=self.session_id,
            turn=turn,
            capacity=self.capacity,
            main_db_engine=self.main_db_engine,
        )

    async def recent_turns(self) -> Sequence[ConversationTurn]:
        return await get_recent_chat_memories(
            session_id=self.session_id,
            capacity=self.capacity,
            main_db_engine=self.main_db_engine,
        )

    async def clear(self) -> None:
        await clear_chat_memories(session_id=self.session_id, main_db_engine=self.main_db_engine)
