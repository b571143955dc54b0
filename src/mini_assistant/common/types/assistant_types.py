# canonical data model shared by memory, tools, retrieval and orchestration

import threading
import time
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_sequence_lock = threading.Lock()
_last_sequence = 0

def next_turn_sequence() -> int:
    """
    Strictly increasing turn id for this process.
    Based on wall-clock nanoseconds so ids stay ordered across restarts of a durable store,
    but bumped by one whenever the clock did not advance (or went backwards).
    """
    global _last_sequence
    with _sequence_lock:
        _last_sequence = max(time.time_ns(), _last_sequence + 1)
        return _last_sequence

class ConversationTurn(BaseModel):
    """
    One completed query/response exchange.
    Immutable once created; appended exactly once to a memory store.
    """
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(description="The user's raw query for this turn.")
    tool_transcript: str = Field(default="", description="Concatenated '<tool>: <result>\\n' lines, empty if no tool ran.")
    response: str = Field(description="The model's final natural-language answer.")
    sequence: int = Field(default_factory=next_turn_sequence, description="Monotonic id used for ordering and eviction.")
    created_at: datetime = Field(default_factory=datetime.now)

    def render(self) -> str:
        """Render the turn the way it is replayed into future prompts."""
        return f"Prompt: {self.prompt}\nTool output:\n{self.tool_transcript}\nResponse: {self.response}"

class ToolCallRequest(BaseModel):
    """
    A tool call requested by the model.
    Argument values are untyped strings; handlers must coerce them.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    raw_args: dict[str, str] = Field(default_factory=dict)

class ToolResult(BaseModel):
    """
    Outcome of a single tool call. Failures are encoded as descriptive text, never dropped.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    output_text: str
    succeeded: bool

    @field_validator("output_text")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("tool output text must be non-empty")
        return value

    def transcript_line(self) -> str:
        return f"{self.name}: {self.output_text}\n"

class RetrievedChunk(BaseModel):
    """A passage returned by the chunk index. Read-only for the core."""
    model_config = ConfigDict(frozen=True)

    source_document_name: str
    text: str

class ModelResponse(BaseModel):
    """Normalized response of one model invocation, independent of the provider."""
    text: Optional[str] = None
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0
