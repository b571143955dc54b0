# assistant routes: answering, memory inspection and the device client's outbox polling

from fastapi import APIRouter, Depends, HTTPException, Query, status
from mini_assistant.common.logging.logger import logger
# dependencies
from mini_assistant.core.dependencies import (
    get_session_manager,
    get_action_outbox,
    get_notification_outbox,
    get_chunk_index,
    get_text_embedding_client,
)
# services and clients
from mini_assistant.agent_service.orchestrator.session_manager import SessionManager
from mini_assistant.common.services.device_actions.action_outbox import ActionOutbox
from mini_assistant.common.services.device_actions.notification_outbox import NotificationOutbox
from mini_assistant.common.services.device_actions.action_types import DeviceCapabilities
from mini_assistant.common.services.embedding_service.text_embedding.protocols import TextEmbeddingProtocol
from mini_assistant.memory.chunk_index import ChunkIndexProtocol
from mini_assistant.common.errors import (
    AssistantError,
    InputError,
    TransportError,
    AnswerTimeoutError,
    MissingCredentialError,
    AnswerInProgressError,
)
# request body models
from mini_assistant.api.request_models.assistant import (
    AnswerRequest,
    ResetRequest,
    IndexChunksRequest,
    DeviceCapabilitiesRequest,
    DEFAULT_SESSION_ID,
)
# response models
from mini_assistant.api.response_models.assistant import (
    AnswerResponse,
    MemoryResponse,
    MemoryTurnResponse,
    ResetResponse,
    PendingActionsResponse,
    PendingNotificationsResponse,
    IndexChunksResponse,
)
from mini_assistant.agent_service.orchestrator.main_orchestrator import MEMORY_CLEARED_MESSAGE

router = APIRouter(prefix="/assistant", tags=["Assistant"])

def _status_for(error: AssistantError) -> int:
    # NOTE: order matters, AnswerTimeoutError is a TransportError
    if isinstance(error, InputError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, AnswerInProgressError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, AnswerTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(error, TransportError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(error, MissingCredentialError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR

@router.post("/answer", response_model=AnswerResponse)
async def answer(
    request: AnswerRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    try:
        session = session_manager.get_session(request.session_id)
        result = await session.answer(request.query)
        logger.info(f"Answered query for session {request.session_id} with {result.model_calls} model call(s)")
        return AnswerResponse.from_result(request.session_id, result)
    except AssistantError as e:
        logger.error(f"Error answering query for session {request.session_id}: {e}")
        raise HTTPException(status_code=_status_for(e), detail=str(e))

@router.post("/reset", response_model=ResetResponse)
async def reset(
    request: ResetRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    try:
        session = session_manager.get_session(request.session_id)
        await session.reset()
        return ResetResponse(session_id=request.session_id, message=MEMORY_CLEARED_MESSAGE)
    except AssistantError as e:
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    except Exception as e:
        logger.error(f"Error clearing memory for session {request.session_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error clearing memory: {e}")

@router.get("/memory", response_model=MemoryResponse)
async def get_memory(
    session_id: str = Query(default=DEFAULT_SESSION_ID),
    session_manager: SessionManager = Depends(get_session_manager),
):
    try:
        session = session_manager.get_session(session_id)
        turns = await session.recent_turns()
        return MemoryResponse(session_id=session_id, turns=[MemoryTurnResponse.from_turn(turn) for turn in turns])
    except AssistantError as e:
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    except Exception as e:
        logger.error(f"Error reading memory for session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error reading memory: {e}")

@router.get("/actions", response_model=PendingActionsResponse)
async def drain_actions(action_outbox: ActionOutbox = Depends(get_action_outbox)):
    """Device client polls this to receive the actions it should launch."""
    return PendingActionsResponse(actions=action_outbox.drain())

@router.get("/notifications", response_model=PendingNotificationsResponse)
async def drain_notifications(notification_outbox: NotificationOutbox = Depends(get_notification_outbox)):
    return PendingNotificationsResponse(notifications=notification_outbox.drain())

@router.put("/device/capabilities", status_code=status.HTTP_204_NO_CONTENT)
async def update_device_capabilities(
    request: DeviceCapabilitiesRequest,
    action_outbox: ActionOutbox = Depends(get_action_outbox),
):
    action_outbox.update_capabilities(
        DeviceCapabilities(
            granted_permissions=frozenset(request.granted_permissions),
            installed_packages=None if request.installed_packages is None else frozenset(request.installed_packages),
        )
    )

@router.post("/documents/chunks", response_model=IndexChunksResponse)
async def index_document_chunks(
    request: IndexChunksRequest,
    chunk_index: ChunkIndexProtocol = Depends(get_chunk_index),
    embedding_client: TextEmbeddingProtocol = Depends(get_text_embedding_client),
):
    try:
        embeddings = await embedding_client.aembed_text(request.chunks, task_type="RETRIEVAL_DOCUMENT")
        chunks_added = await chunk_index.add_chunks(
            document_name=request.document_name,
            chunk_texts=request.chunks,
            embedding_vectors=embeddings,
        )
        total_chunks = await chunk_index.acount()
        return IndexChunksResponse(
            document_name=request.document_name,
            chunks_added=chunks_added,
            total_chunks=total_chunks,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error indexing chunks for document {request.document_name}: {e}")
        raise HTTPException(status_code=500, detail=f"Error indexing document chunks: {e}")
