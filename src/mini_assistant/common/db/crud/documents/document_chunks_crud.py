# CRUD operations for document chunks with pgvector
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy import select, func, text
from mini_assistant.common.db.models.documents.document_chunks import DocumentChunk
from mini_assistant.common.db.session import get_async_session_maker
from mini_assistant.common.types.assistant_types import RetrievedChunk
from mini_assistant.common.logging.logger import logger

async def create_document_chunk_table(main_db_engine: AsyncEngine) -> None:
    """Enable pgvector and create the chunk table if missing."""
    async with main_db_engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(lambda sync_conn: DocumentChunk.__table__.create(sync_conn, checkfirst=True))

async def save_document_chunks(
    document_name: str,
    chunk_texts: list[str],
    embedding_vectors: list[list[float]],
    main_db_engine: AsyncEngine,
) -> int:
    """
    Save pre-chunked passages of one document with their embeddings.

    Returns:
        Number of saved chunks
    """
    if len(chunk_texts) != len(embedding_vectors):
        raise ValueError(f"Got {len(chunk_texts)} chunks but {len(embedding_vectors)} embeddings")

    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            session.add_all([
                DocumentChunk(document_name=document_name, chunk_text=chunk, embedding_vector=vector)
                for chunk, vector in zip(chunk_texts, embedding_vectors)
            ])
            await session.commit()
        logger.info(f"Saved {len(chunk_texts)} chunks for document {document_name}")
        return len(chunk_texts)
    except Exception as e:
        logger.error(f"Failed to save document chunks: {e}")
        raise

async def count_document_chunks(main_db_engine: AsyncEngine) -> int:
    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            result = await session.execute(select(func.count()).select_from(DocumentChunk))
            return int(result.scalar_one())
    except Exception as e:
        logger.error(f"Failed to count document chunks: {e}")
        raise

async def find_similar_chunks(
    query_vector: list[float],
    limit: int,
    main_db_engine: AsyncEngine,
) -> list[RetrievedChunk]:
    """
    Find the chunks closest to the query vector by cosine distance, best first.
    """
    session_maker = get_async_session_maker(main_db_engine)

    try:
        async with session_maker() as session:
            stmt = (
                select(DocumentChunk.document_name, DocumentChunk.chunk_text)
                .order_by(DocumentChunk.embedding_vector.cosine_distance(query_vector))
                .limit(limit)
            )
            rows = (await session.execute(stmt)).all()
    except Exception as e:
        logger.error(f"Failed to find similar chunks: {e}")
        raise

    logger.info(f"Found {len(rows)} similar chunks")
    return [RetrievedChunk(source_document_name=row[0], text=row[1]) for row in rows]
