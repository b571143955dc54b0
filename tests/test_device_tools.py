from datetime import datetime

import pytest

from mini_assistant.common.errors import PermissionDeniedError, NoMatchingActivityError
from mini_assistant.common.services.device_actions.action_outbox import ActionOutbox
from mini_assistant.common.services.device_actions.notification_outbox import NotificationOutbox
from mini_assistant.common.services.device_actions.action_types import (
    DeviceActionType,
    DeviceCapabilities,
    DevicePermission,
    GMAIL_PACKAGE,
    KEEP_PACKAGE,
    EXTRA_EMAIL,
    EXTRA_SUBJECT,
    EXTRA_EVENT_BEGIN_TIME,
    EXTRA_EVENT_END_TIME,
)
from mini_assistant.agent_service.tools.device_tools import DeviceActionTools
from mini_assistant.agent_service.tools.tool_calls import (
    CallToolCall,
    EmailToolCall,
    CalendarEventToolCall,
    NoteToolCall,
)

@pytest.fixture
def granted_outbox() -> ActionOutbox:
    return ActionOutbox(capabilities=DeviceCapabilities(granted_permissions=frozenset({DevicePermission.CALL_PHONE})))

async def test_call_adds_tel_scheme(launcher):
    output = await DeviceActionTools(launcher).create_call(CallToolCall(tel="+84901234567"))

    (descriptor,) = launcher.launched
    assert descriptor.action == DeviceActionType.CALL
    assert descriptor.uri == "tel:+84901234567"
    assert descriptor.required_permission == DevicePermission.CALL_PHONE
    assert output == "Calling +84901234567"

async def test_call_keeps_existing_tel_scheme(launcher):
    await DeviceActionTools(launcher).create_call(CallToolCall(tel="tel:123"))
    assert launcher.launched[0].uri == "tel:123"

async def test_email_targets_gmail(launcher):
    output = await DeviceActionTools(launcher).create_email(EmailToolCall(to="a@x.com", subject="Hi", body="Lunch?"))

    (descriptor,) = launcher.launched
    assert descriptor.package == GMAIL_PACKAGE
    assert descriptor.mime_type == "message/rfc822"
    assert descriptor.extras[EXTRA_EMAIL] == ["a@x.com"]
    assert "a@x.com" in output

async def test_calendar_event_uses_epoch_millis_and_joined_attendees(launcher):
    start = datetime(2024, 6, 3, 10, 0)
    end = datetime(2024, 6, 3, 11, 30)
    call = CalendarEventToolCall(title="Standup", start=start, end=end, attendees=["a@x.com", "b@y.com"])
    await DeviceActionTools(launcher).create_calendar_event(call)

    (descriptor,) = launcher.launched
    assert descriptor.action == DeviceActionType.INSERT
    assert descriptor.extras[EXTRA_EVENT_BEGIN_TIME] == int(start.timestamp() * 1000)
    assert descriptor.extras[EXTRA_EVENT_END_TIME] == int(end.timestamp() * 1000)
    assert descriptor.extras[EXTRA_EMAIL] == "a@x.com,b@y.com"

async def test_note_targets_keep(launcher):
    await DeviceActionTools(launcher).create_note(NoteToolCall(title="Groceries", body="milk"))
    assert launcher.launched[0].package == KEEP_PACKAGE
    assert launcher.launched[0].mime_type == "text/plain"

async def test_outbox_refuses_call_without_permission():
    outbox = ActionOutbox()
    with pytest.raises(PermissionDeniedError):
        await DeviceActionTools(outbox).create_call(CallToolCall(tel="123"))
    assert len(outbox) == 0

async def test_outbox_refuses_missing_package(granted_outbox):
    granted_outbox.update_capabilities(DeviceCapabilities(
        granted_permissions=frozenset({DevicePermission.CALL_PHONE}),
        installed_packages=frozenset({KEEP_PACKAGE}),
    ))
    with pytest.raises(NoMatchingActivityError):
        await DeviceActionTools(granted_outbox).create_email(EmailToolCall(to="a@x.com", subject="s", body="b"))

async def test_outbox_queues_and_drains_in_order(granted_outbox):
    tools = DeviceActionTools(granted_outbox)
    await tools.create_call(CallToolCall(tel="1"))
    await tools.create_note(NoteToolCall(title="t", body="b"))

    drained = granted_outbox.drain()
    assert [d.action for d in drained] == [DeviceActionType.CALL, DeviceActionType.SEND]
    assert granted_outbox.drain() == []

async def test_outbox_drops_oldest_when_full():
    outbox = ActionOutbox(max_pending=2)
    tools = DeviceActionTools(outbox)
    for title in ["a", "b", "c"]:
        await tools.create_note(NoteToolCall(title=title, body="x"))

    assert [d.extras[EXTRA_SUBJECT] for d in outbox.drain()] == ["b", "c"]

def test_notification_outbox_drains_messages():
    outbox = NotificationOutbox()
    outbox.notify("Memory cleared.")
    assert [n.message for n in outbox.drain()] == ["Memory cleared."]
    assert outbox.drain() == []
