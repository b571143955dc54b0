# retrieval tool: embeds the query, asks the chunk index for the nearest passages, and joins them

from typing import Optional
from mini_assistant.agent_service.tools.tool_calls import RetrieveDocumentsToolCall
from mini_assistant.common.errors import ToolExecutionError
from mini_assistant.common.services.embedding_service.text_embedding.protocols import TextEmbeddingProtocol
from mini_assistant.common.services.device_actions.protocols import NotifierProtocol
from mini_assistant.memory.chunk_index import ChunkIndexProtocol
from mini_assistant.common.logging.logger import logger

NO_DOCUMENTS_ADVISORY = "Add documents to execute queries"
NO_MATCHES_MESSAGE = "No matching passages were found in the uploaded documents."

class RetrievalBridge():
    """
    Backs the `retrieve_documents` tool.
    - Short-circuits (no embedding, no query) when nothing is indexed, and tells the user through the notifier.
    - Keeps the index's ranking as-is; passages are joined with single spaces in returned order.
    """
    def __init__(
        self,
        text_embedding_client: Optional[TextEmbeddingProtocol],
        chunk_index: ChunkIndexProtocol,
        notifier: NotifierProtocol,
    ):
        self.text_embedding_client = text_embedding_client
        self.chunk_index = chunk_index
        self.notifier = notifier

    async def retrieve(self, call: RetrieveDocumentsToolCall) -> str:
        if await self.chunk_index.acount() == 0:
            self._notify(NO_DOCUMENTS_ADVISORY)
            return NO_DOCUMENTS_ADVISORY
        if self.text_embedding_client is None:
            raise ToolExecutionError("no embedding model is configured, so documents cannot be searched")

        query_vectors = await self.text_embedding_client.aembed_text(text=[call.query], task_type="RETRIEVAL_QUERY")
        if not query_vectors:
            raise ToolExecutionError(f"failed to embed retrieval query: {call.query!r}")

        chunks = await self.chunk_index.aquery(query_vectors[0], call.top_k)
        logger.info(f"Retrieved {len(chunks)} chunk(s) for query {call.query!r} (top_k={call.top_k})")
        if not chunks:
            return NO_MATCHES_MESSAGE
        return " ".join(chunk.text for chunk in chunks)

    def _notify(self, message: str) -> None:
        # notifications are best-effort and must never fail the tool
        try:
            self.notifier.notify(message)
        except Exception as e:
            logger.warning(f"Failed to deliver user notification {message!r}: {e}")
