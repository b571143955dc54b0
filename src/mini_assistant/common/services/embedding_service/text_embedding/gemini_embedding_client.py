# Gemini text embeddings for document chunks (RETRIEVAL_DOCUMENT) and retrieval queries (RETRIEVAL_QUERY)

from typing import Optional

# use tenacity to retry when desired
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed, retry_if_exception_type

from google import genai # officially recommended import path
from google.genai import types, errors

from mini_assistant.common.services.embedding_service.text_embedding.protocols import TextEmbeddingProtocol
from mini_assistant.common.types.text_embedding_task_types import VALID_GEMINI_TASK_TYPES
from mini_assistant.common.errors import MissingCredentialError
from mini_assistant.common.logging.logger import logger

# embed_content accepts at most 100 contents per request
MAX_BATCH_SIZE = 100

class AsyncGenAITextEmbeddingClient(TextEmbeddingProtocol):
    """
    Google GenAI embedding client.
    - Large inputs are split into batches; vectors come back in input order, one per text.
    - Every vector must have `embedding_size` dimensions, since the chunk index stores fixed-size vectors.
    """
    def __init__(
        self,
        model_name: str = "gemini-embedding-001",
        default_task_type: str = "RETRIEVAL_DOCUMENT",
        embedding_size: int = 768, # NOTE: must match the chunk index vector dimension
        *,
        api_key: Optional[str] = None,
        retry_attempts: int = 2,
        retry_wait: float = 0.1,
        retry_on: type[Exception] = errors.ServerError, # only retry transient provider failures
    ):
        if not api_key:
            raise MissingCredentialError("No Gemini API key configured; set GOOGLE_GENAI_API_KEY to enable embeddings.")
        if default_task_type not in VALID_GEMINI_TASK_TYPES:
            raise ValueError(f"Unknown Gemini embedding task type: {default_task_type}")
        # shared client, safe within a single event loop and enables connection pooling
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name
        self.default_task_type = default_task_type
        self.embedding_size = embedding_size
        self.retryer = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_fixed(retry_wait),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )

    async def aembed_text(self, text: list[str], task_type: Optional[str] = None) -> list[list[float]]:
        """
        Embed texts, one vector per text.

        Args:
            text: Texts to embed.
            task_type: Gemini task type; unknown or missing values fall back to default_task_type.

        Raises:
            ValueError: the API returned a different number of vectors than texts, or a wrong dimension.
        """
        if not text:
            return []
        resolved_task_type = task_type if task_type in VALID_GEMINI_TASK_TYPES else self.default_task_type
        config = types.EmbedContentConfig(task_type=resolved_task_type, output_dimensionality=self.embedding_size)

        vectors: list[list[float]] = []
        for start in range(0, len(text), MAX_BATCH_SIZE):
            batch = text[start:start + MAX_BATCH_SIZE]
            vectors.extend(await self._embed_batch(batch, config))

        logger.debug(f"Embedded {len(text)} text(s) with task type {resolved_task_type}")
        return vectors

    async def _embed_batch(self, batch: list[str], config: types.EmbedContentConfig) -> list[list[float]]:
        async for attempt in self.retryer:
            with attempt: # let tenacity see context of each attempt instead of swallowing until the last
                result = await self.client.aio.models.embed_content(
                    model=self.model_name,
                    contents=batch, # type: ignore[arg-type] # GenAI SDK accepts list[str] at runtime
                    config=config,
                )
                return self._to_vectors(result, expected_count=len(batch))
        raise RuntimeError("embed_content retryer yielded no attempts")

    def _to_vectors(self, result: types.EmbedContentResponse, expected_count: int) -> list[list[float]]:
        # a dropped vector would misalign texts and embeddings, so partial results are rejected
        embeddings = result.embeddings or []
        vectors = [embedding.values for embedding in embeddings if embedding.values is not None]
        if len(vectors) != expected_count:
            raise ValueError(f"Expected {expected_count} embeddings, got {len(vectors)}")
        for vector in vectors:
            if len(vector) != self.embedding_size:
                raise ValueError(f"Expected {self.embedding_size}-dimensional embeddings, got {len(vector)}")
        return vectors
