# ORM model for the bounded conversation memory
from mini_assistant.common.db.models.base import MainDB_Base
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, Text, DateTime, Index
from datetime import datetime

class ChatMemoryRecord(MainDB_Base):
    """
    One persisted conversation turn.
    - Rows are scoped by session_id; each session keeps at most CHAT_MEMORY_CAPACITY rows.
    - Ordering is (sequence, id): sequence is the turn's monotonic id, id breaks ties by insertion order.
    """
    __tablename__ = "chat_memories"

    # autoincrement surrogate key, doubles as insertion order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)

    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    tool_transcript: Mapped[str] = mapped_column(Text, nullable=False, default="")
    response: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        # recency scans per session
        Index('idx_chat_memories_session_sequence', 'session_id', 'sequence'),
    )
