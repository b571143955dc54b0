# state machine + result types for the two-phase answer protocol

from enum import Enum
from pydantic import BaseModel, Field
from mini_assistant.common.types.assistant_types import ToolResult

class OrchestrationState(str, Enum):
    """
    IDLE -> FIRST_CALL_IN_FLIGHT -> DIRECT_ANSWER -> DONE
    IDLE -> FIRST_CALL_IN_FLIGHT -> TOOL_EXECUTION -> SECOND_CALL_IN_FLIGHT -> DONE
    A fatal error (transport failure, timeout) jumps straight to DONE without committing the turn.
    """
    IDLE = "idle"
    FIRST_CALL_IN_FLIGHT = "first_call_in_flight"
    DIRECT_ANSWER = "direct_answer"
    TOOL_EXECUTION = "tool_execution"
    SECOND_CALL_IN_FLIGHT = "second_call_in_flight"
    DONE = "done"

class AnswerResult(BaseModel):
    """
    Outcome of one completed turn, returned to the caller after it is committed to memory.
    """
    query: str
    response: str = Field(description="The model's final natural-language answer.")
    tool_transcript: str = Field(default="", description="'<tool>: <result>\\n' lines for every tool invoked, empty on a direct answer.")
    tool_results: list[ToolResult] = Field(default_factory=list)
    model_calls: int = Field(description="1 for a direct answer, 2 when tools ran.")
    transitions: list[OrchestrationState] = Field(default_factory=list, description="States visited during the turn, in order.")

    @property
    def used_tools(self) -> bool:
        return len(self.tool_results) > 0

    @property
    def display_text(self) -> str:
        """Text to show the user: the response, or the raw tool transcript if the response is blank."""
        return self.response if self.response.strip() else self.tool_transcript
