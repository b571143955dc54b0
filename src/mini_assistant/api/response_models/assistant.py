# response models for the assistant routes

from datetime import datetime
from pydantic import BaseModel
from mini_assistant.agent_service.common.types.orchestration_state import AnswerResult, OrchestrationState
from mini_assistant.common.types.assistant_types import ConversationTurn, ToolResult
from mini_assistant.common.services.device_actions.action_types import ActionDescriptor
from mini_assistant.common.services.device_actions.notification_outbox import UserNotification

class AnswerResponse(BaseModel):
    session_id: str
    response: str
    display_text: str
    tool_transcript: str
    tool_results: list[ToolResult]
    model_calls: int
    transitions: list[OrchestrationState]

    @classmethod
    def from_result(cls, session_id: str, result: AnswerResult) -> "AnswerResponse":
        return cls(
            session_id=session_id,
            response=result.response,
            display_text=result.display_text,
            tool_transcript=result.tool_transcript,
            tool_results=result.tool_results,
            model_calls=result.model_calls,
            transitions=result.transitions,
        )

class MemoryTurnResponse(BaseModel):
    prompt: str
    tool_transcript: str
    response: str
    created_at: datetime

    @classmethod
    def from_turn(cls, turn: ConversationTurn) -> "MemoryTurnResponse":
        return cls(
            prompt=turn.prompt,
            tool_transcript=turn.tool_transcript,
            response=turn.response,
            created_at=turn.created_at,
        )

class MemoryResponse(BaseModel):
    """Recent turns of one session, oldest first."""
    session_id: str
    turns: list[MemoryTurnResponse]

class ResetResponse(BaseModel):
    session_id: str
    message: str

class PendingActionsResponse(BaseModel):
    actions: list[ActionDescriptor]

class PendingNotificationsResponse(BaseModel):
    notifications: list[UserNotification]

class IndexChunksResponse(BaseModel):
    document_name: str
    chunks_added: int
    total_chunks: int
