import pytest

from mini_assistant.common.types.assistant_types import ConversationTurn
from mini_assistant.memory.chat_memory_store import InMemoryChatMemoryStore, DEFAULT_MEMORY_CAPACITY
from mini_assistant.memory.sql_chat_memory_store import SQLChatMemoryStore
from mini_assistant.common.db.session import create_db_engine
from mini_assistant.common.db.crud.memory.chat_memory_crud import create_chat_memory_table

def make_turn(i: int) -> ConversationTurn:
    return ConversationTurn(prompt=f"q{i}", tool_transcript="", response=f"a{i}")

def test_default_capacity_is_ten():
    assert DEFAULT_MEMORY_CAPACITY == 10
    assert InMemoryChatMemoryStore().capacity == 10

def test_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        InMemoryChatMemoryStore(capacity=0)

async def test_recent_turns_are_chronological():
    store = InMemoryChatMemoryStore()
    for i in range(3):
        await store.append(make_turn(i))

    assert [t.prompt for t in await store.recent_turns()] == ["q0", "q1", "q2"]

async def test_append_beyond_capacity_evicts_only_the_oldest():
    store = InMemoryChatMemoryStore()
    for i in range(DEFAULT_MEMORY_CAPACITY + 1):
        await store.append(make_turn(i))

    turns = await store.recent_turns()
    assert len(turns) == DEFAULT_MEMORY_CAPACITY
    assert turns[0].prompt == "q1"
    assert turns[-1].prompt == f"q{DEFAULT_MEMORY_CAPACITY}"

async def test_out_of_order_sequence_is_placed_by_sequence():
    store = InMemoryChatMemoryStore(capacity=3)
    late = ConversationTurn(prompt="late", response="r", sequence=5)
    early = ConversationTurn(prompt="early", response="r", sequence=1)
    await store.append(late)
    await store.append(early)

    assert [t.prompt for t in await store.recent_turns()] == ["early", "late"]

async def test_snapshot_is_not_affected_by_later_writes():
    store = InMemoryChatMemoryStore()
    await store.append(make_turn(0))
    snapshot = await store.recent_turns()

    await store.append(make_turn(1))
    await store.clear()

    assert [t.prompt for t in snapshot] == ["q0"]

async def test_clear_is_idempotent():
    store = InMemoryChatMemoryStore()
    await store.append(make_turn(0))
    await store.clear()
    await store.clear()

    assert await store.recent_turns() == ()
    assert len(store) == 0

def test_turn_sequences_strictly_increase():
    turns = [make_turn(i) for i in range(50)]
    sequences = [t.sequence for t in turns]
    assert sequences == sorted(sequences)
    assert len(set(sequences)) == len(sequences)

def test_turn_render_format():
    turn = ConversationTurn(prompt="call mom", tool_transcript="create_call: Calling 123\n", response="Calling now")
    assert turn.render() == "Prompt: call mom\nTool output:\ncreate_call: Calling 123\n\nResponse: Calling now"

# =====================================================================
# SQL-backed store
# =====================================================================

@pytest.fixture
async def sqlite_engine(tmp_path):
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat_memory.db'}")
    await create_chat_memory_table(engine)
    yield engine
    await engine.dispose()

async def test_sql_store_evicts_and_orders(sqlite_engine):
    store = SQLChatMemoryStore(session_id="s1", main_db_engine=sqlite_engine, capacity=3)
    for i in range(5):
        await store.append(make_turn(i))

    assert [t.prompt for t in await store.recent_turns()] == ["q2", "q3", "q4"]

async def test_sql_store_scopes_sessions(sqlite_engine):
    first = SQLChatMemoryStore(session_id="s1", main_db_engine=sqlite_engine, capacity=2)
    second = SQLChatMemoryStore(session_id="s2", main_db_engine=sqlite_engine, capacity=2)
    await first.append(make_turn(0))
    await second.append(make_turn(1))
    await first.clear()

    assert await first.recent_turns() == []
    assert [t.prompt for t in await second.recent_turns()] == ["q1"]

async def test_sql_store_round_trips_turn_fields(sqlite_engine):
    store = SQLChatMemoryStore(session_id="s1", main_db_engine=sqlite_engine)
    turn = ConversationTurn(prompt="note it", tool_transcript="create_note: Created note 'x' in Google Keep\n", response="Done")
    await store.append(turn)

    (stored,) = await store.recent_turns()
    assert stored.prompt == turn.prompt
    assert stored.tool_transcript == turn.tool_transcript
    assert stored.response == turn.response
    assert stored.sequence == turn.sequence
