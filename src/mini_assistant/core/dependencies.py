from typing import Optional
from fastapi import Request, HTTPException, status

from mini_assistant.agent_service.orchestrator.session_manager import SessionManager
from mini_assistant.common.services.device_actions.action_outbox import ActionOutbox
from mini_assistant.common.services.device_actions.notification_outbox import NotificationOutbox
from mini_assistant.common.services.embedding_service.text_embedding.protocols import TextEmbeddingProtocol
from mini_assistant.memory.chunk_index import ChunkIndexProtocol

# This is the location to conveniently return any app lifetime dependencies to be used in routes
def get_session_manager(request: Request) -> SessionManager:
    """
    FastAPI dependency to get the shared session manager from the application state.
    """
    return request.app.state.session_manager

def get_action_outbox(request: Request) -> ActionOutbox:
    return request.app.state.action_outbox

def get_notification_outbox(request: Request) -> NotificationOutbox:
    return request.app.state.notification_outbox

def get_chunk_index(request: Request) -> ChunkIndexProtocol:
    return request.app.state.chunk_index

def get_text_embedding_client(request: Request) -> TextEmbeddingProtocol:
    """
    Embedding client is optional (needs a Gemini key); routes that need it get a 503 without one.
    """
    client: Optional[TextEmbeddingProtocol] = request.app.state.text_embedding_client
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No embedding model is configured; set GOOGLE_GENAI_API_KEY to index documents.",
        )
    return client
