import pytest

from mini_assistant.common.errors import ToolExecutionError
from mini_assistant.memory.chunk_index import InMemoryChunkIndex
from mini_assistant.agent_service.tools.tool_calls import RetrieveDocumentsToolCall
from mini_assistant.agent_service.retrieval_agent.retrieval_bridge import (
    RetrievalBridge,
    NO_DOCUMENTS_ADVISORY,
    NO_MATCHES_MESSAGE,
)

from conftest import FakeEmbeddingClient, RecordingNotifier

async def test_empty_index_returns_advisory_without_embedding(retrieval_bridge, embedding_client, notifier):
    output = await retrieval_bridge.retrieve(RetrieveDocumentsToolCall(query="flight number"))

    assert output == NO_DOCUMENTS_ADVISORY
    assert notifier.messages == [NO_DOCUMENTS_ADVISORY]
    assert embedding_client.calls == []

async def test_passages_joined_in_index_order(retrieval_bridge, chunk_index, embedding_client):
    await chunk_index.add_chunks(
        "itinerary.pdf",
        ["weak match", "best match", "good match"],
        [[0.0, 1.0, 0.0], [1.0, 0.0, 0.0], [0.9, 0.1, 0.0]],
    )

    output = await retrieval_bridge.retrieve(RetrieveDocumentsToolCall(query="flight number", top_k=2))

    assert output == "best match good match"
    assert embedding_client.calls == [(["flight number"], "RETRIEVAL_QUERY")]

async def test_top_k_larger_than_index_returns_everything(retrieval_bridge, chunk_index):
    await chunk_index.add_chunks("a.txt", ["one", "two"], [[1.0, 0.0, 0.0], [0.5, 0.5, 0.0]])

    output = await retrieval_bridge.retrieve(RetrieveDocumentsToolCall(query="q", top_k=20))
    assert output == "one two"

async def test_missing_embedding_client_fails_the_tool(chunk_index, notifier):
    await chunk_index.add_chunks("a.txt", ["one"], [[1.0, 0.0, 0.0]])
    bridge = RetrievalBridge(text_embedding_client=None, chunk_index=chunk_index, notifier=notifier)

    with pytest.raises(ToolExecutionError):
        await bridge.retrieve(RetrieveDocumentsToolCall(query="q"))

async def test_no_hits_message():
    class EmptyHitsIndex(InMemoryChunkIndex):
        async def aquery(self, query_vector, k):
            return []

    index = EmptyHitsIndex()
    await index.add_chunks("a.txt", ["one"], [[1.0, 0.0, 0.0]])
    bridge = RetrievalBridge(FakeEmbeddingClient(), index, RecordingNotifier())

    assert await bridge.retrieve(RetrieveDocumentsToolCall(query="q")) == NO_MATCHES_MESSAGE

async def test_chunk_index_rejects_mismatched_dimensions(chunk_index):
    await chunk_index.add_chunks("a.txt", ["one"], [[1.0, 0.0, 0.0]])
    with pytest.raises(ValueError):
        await chunk_index.add_chunks("b.txt", ["two"], [[1.0, 0.0]])

async def test_chunk_index_zero_vector_scores_lowest(chunk_index):
    await chunk_index.add_chunks("a.txt", ["zero", "aligned"], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])

    ranked = await chunk_index.aquery([1.0, 0.0, 0.0], k=2)
    assert [c.text for c in ranked] == ["aligned", "zero"]
    assert ranked[0].source_document_name == "a.txt"
