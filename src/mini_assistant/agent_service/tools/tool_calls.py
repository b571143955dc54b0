# typed tool calls, built from the model's raw string arguments in a single validated parsing step
# NOTE: handlers only ever receive these typed variants, never raw strings.

import json
from datetime import datetime, timedelta
from typing import Annotated, Callable, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mini_assistant.common.errors import ToolArgumentError
from mini_assistant.common.types.tool_declaration_types import ToolDeclaration
from mini_assistant.common.logging.logger import logger

# retrieval count policy
DEFAULT_TOP_K = 5
MIN_TOP_K = 1
MAX_TOP_K = 20

# length of an event whose end time could not be parsed
DEFAULT_EVENT_DURATION = timedelta(hours=1)

# =====================================================================
# Tagged tool call variants
# =====================================================================

class _ToolCallBase(BaseModel):
    model_config = ConfigDict(frozen=True)

class CallToolCall(_ToolCallBase):
    kind: Literal["create_call"] = "create_call"
    tel: str

class EmailToolCall(_ToolCallBase):
    kind: Literal["create_email"] = "create_email"
    to: str
    subject: str
    body: str

class CalendarEventToolCall(_ToolCallBase):
    kind: Literal["create_calendar_event"] = "create_calendar_event"
    title: str
    description: str = ""
    address: str = ""
    start: datetime
    end: datetime
    attendees: list[str] = Field(default_factory=list)

class NoteToolCall(_ToolCallBase):
    kind: Literal["create_note"] = "create_note"
    title: str
    body: str

class RetrieveDocumentsToolCall(_ToolCallBase):
    kind: Literal["retrieve_documents"] = "retrieve_documents"
    query: str
    top_k: int = Field(default=DEFAULT_TOP_K, ge=MIN_TOP_K, le=MAX_TOP_K)

ToolCall = Annotated[
    Union[CallToolCall, EmailToolCall, CalendarEventToolCall, NoteToolCall, RetrieveDocumentsToolCall],
    Field(discriminator="kind"),
]

ToolCallParser = Callable[[Mapping[str, str], ToolDeclaration], ToolCall]

# =====================================================================
# Coercion helpers
# =====================================================================

def string_arg(raw_args: Mapping[str, str], declaration: ToolDeclaration, name: str) -> str:
    """
    Read a string argument.
    Required arguments must be present and non-blank, optional ones default to "".
    """
    value = raw_args.get(name)
    if value is None or not value.strip():
        if declaration.is_required(name):
            raise ToolArgumentError(f"missing required argument '{name}'")
        return ""
    return value.strip()

def coerce_int(raw: Optional[str], default: int) -> int:
    """
    Parse an integer argument, falling back to `default` when absent or malformed.
    Accepts integral floats ("7.0") since some models serialize every number as a float.
    """
    if raw is None or not raw.strip():
        return default
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        logger.warning(f"Could not parse integer argument {raw!r}, using default {default}")
        return default
    if not number.is_integer():
        logger.warning(f"Non-integral argument {raw!r}, using default {default}")
        return default
    return int(number)

def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))

def parse_attendees(csv: Optional[str]) -> list[str]:
    """Split a comma-separated attendee string, dropping blank entries. Absent or blank input yields []."""
    if not csv:
        return []
    return [entry.strip() for entry in csv.split(",") if entry.strip()]

def _int_field(fields: Mapping, name: str, default: Optional[int] = None) -> int:
    value = fields.get(name, default)
    if isinstance(value, bool) or value is None:
        raise ValueError(f"field '{name}' is missing")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"field '{name}' is not an integer: {value!r}")

def parse_event_time(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse a {"year", "month", "day", "hour", "minute"} JSON object into a datetime.
    - month is 0-based (0 = January)
    - hour and minute default to 0 when omitted
    Returns None when the value is absent or unusable, so the caller can pick a placeholder.
    """
    if raw is None or not raw.strip():
        return None
    try:
        fields = json.loads(raw)
        if not isinstance(fields, dict):
            raise ValueError("expected a JSON object")
        return datetime(
            year=_int_field(fields, "year"),
            month=_int_field(fields, "month") + 1,
            day=_int_field(fields, "day"),
            hour=_int_field(fields, "hour", 0),
            minute=_int_field(fields, "minute", 0),
        )
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Unparsable event time {raw!r}: {e}")
        return None

def placeholder_event_start() -> datetime:
    """The current local time truncated to the minute."""
    return datetime.now().replace(second=0, microsecond=0)

def default_event_end(start: datetime) -> datetime:
    """One hour after start, or start itself when that would pass datetime.max."""
    try:
        return start + DEFAULT_EVENT_DURATION
    except OverflowError:
        return start

# =====================================================================
# Per-tool parsers
# =====================================================================

def parse_call(raw_args: Mapping[str, str], declaration: ToolDeclaration) -> CallToolCall:
    return CallToolCall(tel=string_arg(raw_args, declaration, "tel"))

def parse_email(raw_args: Mapping[str, str], declaration: ToolDeclaration) -> EmailToolCall:
    return EmailToolCall(
        to=string_arg(raw_args, declaration, "to"),
        subject=string_arg(raw_args, declaration, "subject"),
        body=string_arg(raw_args, declaration, "body"),
    )

def parse_calendar_event(raw_args: Mapping[str, str], declaration: ToolDeclaration) -> CalendarEventToolCall:
    # start/end never fail the call: unusable values fall back to "now" and "start + 1h"
    start = parse_event_time(raw_args.get("start")) or placeholder_event_start()
    end = parse_event_time(raw_args.get("end")) or default_event_end(start)
    return CalendarEventToolCall(
        title=string_arg(raw_args, declaration, "title"),
        description=string_arg(raw_args, declaration, "description"),
        address=string_arg(raw_args, declaration, "address"),
        start=start,
        end=end,
        attendees=parse_attendees(raw_args.get("attendees")),
    )

def parse_note(raw_args: Mapping[str, str], declaration: ToolDeclaration) -> NoteToolCall:
    return NoteToolCall(
        title=string_arg(raw_args, declaration, "title"),
        body=string_arg(raw_args, declaration, "body"),
    )

def parse_retrieve_documents(raw_args: Mapping[str, str], declaration: ToolDeclaration) -> RetrieveDocumentsToolCall:
    top_k = clamp(coerce_int(raw_args.get("top_k"), DEFAULT_TOP_K), MIN_TOP_K, MAX_TOP_K)
    return RetrieveDocumentsToolCall(query=string_arg(raw_args, declaration, "query"), top_k=top_k)
