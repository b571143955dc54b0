# chunk index backed by postgres + pgvector

from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncEngine

from mini_assistant.memory.chunk_index import ChunkIndexProtocol
from mini_assistant.common.types.assistant_types import RetrievedChunk
from mini_assistant.common.db.crud.documents.document_chunks_crud import (
    count_document_chunks,
    find_similar_chunks,
    save_document_chunks,
)

class PgVectorChunkIndex(ChunkIndexProtocol):
    """
    Wraps the document chunk CRUD so the retrieval tool can stay storage-agnostic.
    """

    def __init__(self, main_db_engine: AsyncEngine):
        self.main_db_engine = main_db_engine

    async def add_chunks(self, document_name: str, chunk_texts: list[str], embedding_vectors: list[list[float]]) -> int:
        return await save_document_chunks(
            document_name=document_name,
            chunk_texts=chunk_texts,
            embedding_vectors=embedding_vectors,
            main_db_engine=self.main_db_engine,
        )

    async def acount(self) -> int:
        return await count_document_chunks(self.main_db_engine)

    async def aquery(self, query_vector: Sequence[float], k: int) -> list[RetrievedChunk]:
        return await find_similar_chunks(
            query_vector=list(query_vector),
            limit=k,
            main_db_engine=self.main_db_engine,
        )
