# ORM model for indexed document chunks with pgvector
from mini_assistant.common.db.models.base import MainDB_Base
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, DateTime, Index
from pgvector.sqlalchemy import Vector
from datetime import datetime

# must match GOOGLE_GENAI_EMBEDDING_SIZE
CHUNK_EMBEDDING_DIMENSION = 768

class DocumentChunk(MainDB_Base):
    """
    A retrievable passage of a user-uploaded document and its embedding.
    Ingestion and chunking happen upstream; this table only stores the results.

    Usage:
        # Similarity search
        select(DocumentChunk).order_by(
            DocumentChunk.embedding_vector.cosine_distance(query_vector)
        ).limit(5)
    """
    __tablename__ = "document_chunks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_name: Mapped[str] = mapped_column(String, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding_vector: Mapped[list[float]] = mapped_column(Vector(CHUNK_EMBEDDING_DIMENSION), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index('idx_document_chunks_document_name', 'document_name'),
        # HNSW index for fast cosine similarity search
        Index(
            'idx_document_chunks_vector_cosine',
            'embedding_vector',
            postgresql_using='hnsw',
            postgresql_with={'m': 16, 'ef_construction': 64},
            postgresql_ops={'embedding_vector': 'vector_cosine_ops'}
        ),
    )
