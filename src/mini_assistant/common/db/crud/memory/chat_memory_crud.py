# CRUD operations for the bounded conversation memory
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy import select, delete
from mini_assistant.common.db.models.memory.chat_memory import ChatMemoryRecord
from mini_assistant.common.db.session import get_async_session_maker
from mini_assistant.common.types.assistant_types import ConversationTurn
from mini_assistant.common.logging.logger import logger

async def create_chat_memory_table(main_db_engine: AsyncEngine) -> None:
    """Create the chat memory table if it does not exist yet."""
    async with main_db_engine.begin() as conn:
        await conn.run_sync(lambda sync_conn: ChatMemoryRecord.__table__.create(sync_conn, checkfirst=True))

async def append_chat_memory(
    session_id: str,
    turn: ConversationTurn,
    capacity: int,
    main_db_engine: AsyncEngine,
) -> None:
    """
    Insert a turn and evict everything beyond the newest `capacity` rows, in one transaction.

    Args:
        session_id: Conversation session owning the turn
        turn: The completed turn to persist
        capacity: Maximum number of rows retained for the session
        main_db_engine: Async database engine
    """
    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            async with session.begin():
                session.add(ChatMemoryRecord(
                    session_id=session_id,
                    sequence=turn.sequence,
                    prompt=turn.prompt,
                    tool_transcript=turn.tool_transcript,
                    response=turn.response,
                    created_at=turn.created_at,
                ))
                await session.flush()

                # everything past the newest `capacity` rows is evicted
                stale_ids_stmt = (
                    select(ChatMemoryRecord.id)
                    .where(ChatMemoryRecord.session_id == session_id)
                    .order_by(ChatMemoryRecord.sequence.desc(), ChatMemoryRecord.id.desc())
                    .offset(capacity)
                )
                stale_ids = list((await session.execute(stale_ids_stmt)).scalars().all())
                if stale_ids:
                    await session.execute(delete(ChatMemoryRecord).where(ChatMemoryRecord.id.in_(stale_ids)))
        logger.debug(f"Saved chat memory for session {session_id}, evicted {len(stale_ids)} turn(s)")
    except Exception as e:
        logger.error(f"Failed to save chat memory: {e}")
        raise

async def get_recent_chat_memories(
    session_id: str,
    capacity: int,
    main_db_engine: AsyncEngine,
) -> list[ConversationTurn]:
    """
    Retrieve up to `capacity` turns for the session, oldest first.
    """
    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            stmt = (
                select(ChatMemoryRecord)
                .where(ChatMemoryRecord.session_id == session_id)
                .order_by(ChatMemoryRecord.sequence.desc(), ChatMemoryRecord.id.desc())
                .limit(capacity)
            )
            records = (await session.execute(stmt)).scalars().all()
    except Exception as e:
        logger.error(f"Failed to load chat memories: {e}")
        raise

    # newest-first from the query, flipped to chronological for prompts
    return [
        ConversationTurn(
            prompt=record.prompt,
            tool_transcript=record.tool_transcript,
            response=record.response,
            sequence=record.sequence,
            created_at=record.created_at,
        )
        for record in reversed(records)
    ]

async def clear_chat_memories(session_id: str, main_db_engine: AsyncEngine) -> int:
    """
    Delete every turn of the session in a single statement.

    Returns:
        Number of deleted rows
    """
    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    delete(ChatMemoryRecord).where(ChatMemoryRecord.session_id == session_id)
                )
        deleted = result.rowcount or 0
        logger.info(f"Cleared {deleted} chat memories for session {session_id}")
        return deleted
    except Exception as e:
        logger.error(f"Failed to clear chat memories: {e}")
        raise
