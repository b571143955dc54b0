# document chunk index used by the retrieval tool

import threading
from typing import Protocol, Sequence, runtime_checkable
import numpy as np

from mini_assistant.common.types.assistant_types import RetrievedChunk
from mini_assistant.common.logging.logger import logger

@runtime_checkable
class ChunkIndexProtocol(Protocol):
    """
    Ranks indexed chunks by embedding similarity. The index owns the ranking; callers never re-sort.
    """
    async def add_chunks(self, document_name: str, chunk_texts: list[str], embedding_vectors: list[list[float]]) -> int: ...

    async def acount(self) -> int: ...

    async def aquery(self, query_vector: Sequence[float], k: int) -> list[RetrievedChunk]: ...

class InMemoryChunkIndex(ChunkIndexProtocol):
    """
    Process-local index using brute-force cosine similarity over a numpy matrix.
    Fine for a handful of uploaded documents; use PgVectorChunkIndex for anything larger.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._chunks: list[RetrievedChunk] = []
        self._vectors: np.ndarray | None = None

    async def add_chunks(self, document_name: str, chunk_texts: list[str], embedding_vectors: list[list[float]]) -> int:
        """Index pre-chunked passages of one document. Returns the number of chunks added."""
        if len(chunk_texts) != len(embedding_vectors):
            raise ValueError(f"Got {len(chunk_texts)} chunks but {len(embedding_vectors)} embeddings")
        if not chunk_texts:
            return 0

        new_vectors = np.asarray(embedding_vectors, dtype=np.float32)
        with self._lock:
            if self._vectors is not None and new_vectors.shape[1] != self._vectors.shape[1]:
                raise ValueError(
                    f"Embedding dimension {new_vectors.shape[1]} does not match index dimension {self._vectors.shape[1]}"
                )
            self._vectors = new_vectors if self._vectors is None else np.vstack([self._vectors, new_vectors])
            self._chunks.extend(
                RetrievedChunk(source_document_name=document_name, text=chunk) for chunk in chunk_texts
            )
        logger.info(f"Indexed {len(chunk_texts)} chunks for document {document_name}")
        return len(chunk_texts)

    async def acount(self) -> int:
        return len(self._chunks)

    async def aquery(self, query_vector: Sequence[float], k: int) -> list[RetrievedChunk]:
        with self._lock:
            chunks = list(self._chunks)
            vectors = self._vectors
        if vectors is None or k <= 0:
            return []

        query = np.asarray(query_vector, dtype=np.float32)
        similarities = self._cosine_similarities(vectors, query)
        # stable sort keeps insertion order among equally similar chunks
        ranked = np.argsort(-similarities, kind="stable")[:k]
        return [chunks[i] for i in ranked]

    @staticmethod
    def _cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
        """
        Cosine similarity of every row against the query.
        Rows (or a query) with zero norm score 0.0 since similarity is undefined.
        """
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        return np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)
