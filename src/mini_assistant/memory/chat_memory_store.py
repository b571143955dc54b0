# bounded recency memory of conversation turns

import bisect
import threading
from typing import Protocol, Sequence, runtime_checkable

from mini_assistant.common.types.assistant_types import ConversationTurn

DEFAULT_MEMORY_CAPACITY = 10

@runtime_checkable
class ChatMemoryStoreProtocol(Protocol):
    """
    Ordered collection of at most `capacity` turns.
    - append: insert, evicting exactly the single oldest turn (by sequence) when over capacity
    - recent_turns: oldest-to-newest snapshot, never a partial write
    - clear: atomic and idempotent
    """
    capacity: int

    async def append(self, turn: ConversationTurn) -> None: ...

    async def recent_turns(self) -> Sequence[ConversationTurn]: ...

    async def clear(self) -> None: ...

class InMemoryChatMemoryStore(ChatMemoryStoreProtocol):
    """
    Process-local store, one instance per conversation session.

    Writes swap in a new tuple under a lock and reads return the current tuple,
    so a reader always sees either the full pre-write or the full post-write state.
    """

    def __init__(self, capacity: int = DEFAULT_MEMORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._turns: tuple[ConversationTurn, ...] = ()

    async def append(self, turn: ConversationTurn) -> None:
        with self._lock:
            turns = list(self._turns)
            # insert after equal sequences so ties keep insertion order
            bisect.insort_right(turns, turn, key=lambda t: t.sequence)
            if len(turns) > self.capacity:
                turns.pop(0)
            self._turns = tuple(turns)

    async def recent_turns(self) -> Sequence[ConversationTurn]:
        return self._turns

    async def clear(self) -> None:
        with self._lock:
            self._turns = ()

    def __len__(self) -> int:
        return len(self._turns)
