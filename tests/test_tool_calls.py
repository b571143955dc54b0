import json
from datetime import datetime, timedelta

import pytest

from mini_assistant.common.errors import ToolArgumentError
from mini_assistant.agent_service.tools.tool_calls import (
    DEFAULT_TOP_K,
    coerce_int,
    parse_attendees,
    parse_event_time,
    parse_call,
    parse_email,
    parse_calendar_event,
    parse_retrieve_documents,
)
from mini_assistant.agent_service.common.tool_calling_declarations.assistant_tools import (
    create_call_declaration,
    create_email_declaration,
    create_calendar_event_declaration,
    retrieve_documents_declaration,
    assistant_tool_declarations,
)

def event_time(**fields) -> str:
    return json.dumps(fields)

def test_attendees_drop_blank_entries():
    assert parse_attendees("a@x.com, , b@y.com") == ["a@x.com", "b@y.com"]

@pytest.mark.parametrize("raw", [None, "", "   ", " , ,"])
def test_attendees_blank_input_is_empty(raw):
    assert parse_attendees(raw) == []

@pytest.mark.parametrize("raw, expected", [
    ("0", 1),
    ("999", 20),
    (None, DEFAULT_TOP_K),
    ("7", 7),
    ("7.0", 7),
    ("seven", DEFAULT_TOP_K),
])
def test_top_k_is_clamped_or_defaulted(raw, expected):
    args = {"query": "what is my flight number"}
    if raw is not None:
        args["top_k"] = raw
    assert parse_retrieve_documents(args, retrieve_documents_declaration).top_k == expected

def test_coerce_int_rejects_fractions():
    assert coerce_int("2.5", default=3) == 3

def test_retrieve_requires_query():
    with pytest.raises(ToolArgumentError):
        parse_retrieve_documents({"query": "  "}, retrieve_documents_declaration)

@pytest.mark.parametrize("args", [{}, {"tel": ""}, {"tel": "   "}])
def test_call_requires_non_blank_number(args):
    with pytest.raises(ToolArgumentError):
        parse_call(args, create_call_declaration)

def test_email_missing_subject_fails():
    with pytest.raises(ToolArgumentError, match="subject"):
        parse_email({"to": "a@x.com", "body": "hi"}, create_email_declaration)

def test_event_time_month_is_zero_based():
    parsed = parse_event_time(event_time(year=2024, month=0, day=15, hour=9, minute=30))
    assert parsed == datetime(2024, 1, 15, 9, 30)

def test_event_time_defaults_hour_and_minute():
    assert parse_event_time(event_time(year=2024, month=11, day=31)) == datetime(2024, 12, 31, 0, 0)

@pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]", event_time(year=2024, month=12, day=1), event_time(month=1, day=1), event_time(year=10**20, month=0, day=1), event_time(year=1e20, month=0, day=1)])
def test_event_time_unusable_values_are_none(raw):
    assert parse_event_time(raw) is None

def test_calendar_event_end_defaults_to_one_hour_after_start():
    call = parse_calendar_event(
        {"title": "Standup", "start": event_time(year=2024, month=5, day=3, hour=10)},
        create_calendar_event_declaration,
    )
    assert call.start == datetime(2024, 6, 3, 10, 0)
    assert call.end == call.start + timedelta(hours=1)
    assert call.attendees == []
    assert call.description == ""

def test_calendar_event_bad_start_uses_current_minute():
    before = datetime.now().replace(second=0, microsecond=0)
    call = parse_calendar_event({"title": "Lunch", "start": "garbage"}, create_calendar_event_declaration)
    after = datetime.now().replace(second=0, microsecond=0)

    assert before <= call.start <= after
    assert call.start.second == 0 and call.start.microsecond == 0
    assert call.end == call.start + timedelta(hours=1)

def test_calendar_event_end_stays_in_range_at_the_last_representable_hour():
    call = parse_calendar_event(
        {"title": "New Millennium", "start": event_time(year=9999, month=11, day=31, hour=23, minute=30)},
        create_calendar_event_declaration,
    )
    assert call.start == datetime(9999, 12, 31, 23, 30)
    assert call.end == call.start

def test_calendar_event_overflowing_start_uses_current_minute():
    call = parse_calendar_event(
        {"title": "Someday", "start": event_time(year=10**20, month=0, day=1)},
        create_calendar_event_declaration,
    )
    assert call.start.year == datetime.now().year
    assert call.end == call.start + timedelta(hours=1)

def test_calendar_event_still_requires_title():
    with pytest.raises(ToolArgumentError):
        parse_calendar_event({"start": event_time(year=2024, month=0, day=1)}, create_calendar_event_declaration)

def test_function_declarations_list_required_in_parameter_order():
    declaration = create_calendar_event_declaration.to_function_declaration()
    assert declaration["name"] == "create_calendar_event"
    assert declaration["parameters"]["type"] == "object"
    assert declaration["parameters"]["required"] == ["title", "start", "end"]
    assert set(declaration["parameters"]["properties"]) >= {"title", "start", "end", "attendees"}

def test_every_tool_is_declared_once():
    names = [d.name for d in assistant_tool_declarations]
    assert sorted(names) == sorted([
        "create_call", "create_email", "create_calendar_event", "create_note", "retrieve_documents",
    ])
