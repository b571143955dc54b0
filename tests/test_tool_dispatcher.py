import pytest

from mini_assistant.common.errors import PermissionDeniedError
from mini_assistant.common.types.assistant_types import ToolCallRequest, ToolResult
from mini_assistant.common.types.tool_declaration_types import ToolDeclaration, ToolParameter, ToolParamType
from mini_assistant.agent_service.tools.registry import ToolRegistry, build_assistant_tool_registry
from mini_assistant.agent_service.tools.device_tools import DeviceActionTools
from mini_assistant.agent_service.retrieval_agent.retrieval_bridge import RetrievalBridge
from mini_assistant.memory.chunk_index import InMemoryChunkIndex
from mini_assistant.agent_service.tools.dispatcher import ToolDispatcher, build_tool_transcript
from mini_assistant.agent_service.tools.tool_calls import parse_note

from conftest import RecordingLauncher, FakeEmbeddingClient, RecordingNotifier

def request(name: str, **args) -> ToolCallRequest:
    return ToolCallRequest(name=name, raw_args=args)

async def test_unknown_tool_becomes_failed_result(tool_dispatcher):
    (result,) = await tool_dispatcher.dispatch([request("order_pizza", size="large")])

    assert not result.succeeded
    assert result.name == "order_pizza"
    assert "Unknown tool 'order_pizza'" in result.output_text
    assert "create_call" in result.output_text

async def test_results_keep_request_order_and_isolate_failures(tool_dispatcher, launcher):
    results = await tool_dispatcher.dispatch([
        request("create_note", title="Groceries", body="milk, eggs"),
        request("create_call"),  # missing tel
        request("create_email", to="a@x.com", subject="Hi", body="See you"),
    ])

    assert [r.name for r in results] == ["create_note", "create_call", "create_email"]
    assert [r.succeeded for r in results] == [True, False, True]
    assert results[1].output_text.startswith("Invalid arguments for create_call")
    # the failing middle call did not stop the email
    assert len(launcher.launched) == 2

async def test_handler_exception_is_reported_as_error_text():
    failing_launcher = RecordingLauncher(error=PermissionDeniedError("permission android.permission.CALL_PHONE has not been granted"))
    registry = build_assistant_tool_registry(
        DeviceActionTools(launcher=failing_launcher),
        RetrievalBridge(FakeEmbeddingClient(), InMemoryChunkIndex(), RecordingNotifier()),
    )
    (result,) = await ToolDispatcher(registry).dispatch([request("create_call", tel="123")])

    assert not result.succeeded
    assert result.output_text == "Error when calling create_call: permission android.permission.CALL_PHONE has not been granted"

async def test_blank_handler_output_is_replaced():
    declaration = ToolDeclaration(
        name="create_note",
        description="note",
        parameters=(
            ToolParameter(name="title", type=ToolParamType.STRING, description="title"),
            ToolParameter(name="body", type=ToolParamType.STRING, description="body"),
        ),
    )

    async def silent_handler(call) -> str:
        return "   "

    registry = ToolRegistry()
    registry.register(declaration, parse_note, silent_handler)
    (result,) = await ToolDispatcher(registry).dispatch([request("create_note")])

    assert result.succeeded
    assert result.output_text == "create_note completed"

def test_duplicate_registration_is_rejected(tool_dispatcher):
    registry = tool_dispatcher.registry
    existing = registry.get("create_call")
    with pytest.raises(ValueError):
        registry.register(existing.declaration, existing.parser, existing.handler)

def test_transcript_format():
    results = [
        ToolResult(name="create_call", output_text="Calling 123", succeeded=True),
        ToolResult(name="create_note", output_text="Invalid arguments for create_note: missing required argument 'title'", succeeded=False),
    ]
    assert build_tool_transcript(results) == (
        "create_call: Calling 123\n"
        "create_note: Invalid arguments for create_note: missing required argument 'title'\n"
    )

def test_transcript_of_no_results_is_empty():
    assert build_tool_transcript([]) == ""

def test_tool_result_rejects_blank_output():
    with pytest.raises(ValueError):
        ToolResult(name="create_call", output_text=" ", succeeded=True)

async def test_out_of_range_event_dates_do_not_stop_sibling_calls(tool_dispatcher, launcher):
    results = await tool_dispatcher.dispatch([
        request("create_calendar_event", title="Late", start='{"year": 9999, "month": 11, "day": 31, "hour": 23, "minute": 30}'),
        request("create_calendar_event", title="Far", start='{"year": 100000000000000000000, "month": 0, "day": 1}'),
        request("create_note", title="After", body="still runs"),
    ])

    assert [r.name for r in results] == ["create_calendar_event", "create_calendar_event", "create_note"]
    assert results[1].succeeded and results[2].succeeded
    assert len(launcher.launched) >= 2

async def test_unexpected_parser_exception_becomes_failed_result(launcher):
    declaration = ToolDeclaration(
        name="create_note",
        description="note",
        parameters=(ToolParameter(name="title", type=ToolParamType.STRING, description="title"),),
    )

    def exploding_parser(raw_args, declaration):
        raise OverflowError("date value out of range")

    async def unused_handler(call) -> str:
        return "unreachable"

    registry = ToolRegistry()
    registry.register(declaration, exploding_parser, unused_handler)
    (result,) = await ToolDispatcher(registry).dispatch([request("create_note", title="x")])

    assert not result.succeeded
    assert result.output_text == "Invalid arguments for create_note: date value out of range"
