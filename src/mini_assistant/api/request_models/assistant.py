# request bodies for the assistant routes

from typing import Optional
from pydantic import BaseModel, Field, model_validator
from mini_assistant.common.services.device_actions.action_types import DevicePermission

DEFAULT_SESSION_ID = "default"

class AnswerRequest(BaseModel):
    """
    A natural language query to answer, optionally scoped to a conversation session.
    NOTE: blank queries are accepted here and rejected by the session, so the error message stays in one place.
    """
    query: str
    session_id: str = DEFAULT_SESSION_ID

class ResetRequest(BaseModel):
    session_id: str = DEFAULT_SESSION_ID

class IndexChunksRequest(BaseModel):
    """
    Pre-chunked passages of one uploaded document. Parsing and chunking happen on the device.
    """
    document_name: str = Field(min_length=1)
    chunks: list[str] = Field(min_length=1)

    @model_validator(mode="after")
    def _no_blank_chunks(self):
        if any(not chunk.strip() for chunk in self.chunks):
            raise ValueError("chunks must not contain blank passages")
        return self

class DeviceCapabilitiesRequest(BaseModel):
    """
    What the device client reports about itself; installed_packages omitted means unknown.
    """
    granted_permissions: list[DevicePermission] = Field(default_factory=list)
    installed_packages: Optional[list[str]] = None
