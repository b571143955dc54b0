# handlers for the device action tools: call, email, calendar event, note
# each handler turns a typed tool call into an ActionDescriptor and hands it to the launcher.

from mini_assistant.agent_service.tools.tool_calls import (
    CallToolCall,
    EmailToolCall,
    CalendarEventToolCall,
    NoteToolCall,
)
from mini_assistant.common.services.device_actions.action_types import (
    ActionDescriptor,
    DeviceActionType,
    DevicePermission,
    GMAIL_PACKAGE,
    KEEP_PACKAGE,
    CALENDAR_EVENTS_URI,
    EXTRA_EMAIL,
    EXTRA_SUBJECT,
    EXTRA_TEXT,
    EXTRA_EVENT_TITLE,
    EXTRA_EVENT_DESCRIPTION,
    EXTRA_EVENT_LOCATION,
    EXTRA_EVENT_BEGIN_TIME,
    EXTRA_EVENT_END_TIME,
)
from mini_assistant.common.services.device_actions.protocols import ActionLauncherProtocol

TEL_SCHEME = "tel:"

class DeviceActionTools():
    """
    Side-effecting tools executed on the user's device.
    - Launch refusals (missing permission, no matching app) propagate as ActionLaunchError
      and are turned into failed tool results by the dispatcher.
    - Return value is the human-readable outcome placed in the tool transcript.
    """
    def __init__(self, launcher: ActionLauncherProtocol):
        self.launcher = launcher

    async def create_call(self, call: CallToolCall) -> str:
        uri = call.tel if call.tel.startswith(TEL_SCHEME) else f"{TEL_SCHEME}{call.tel}"
        await self.launcher.launch(ActionDescriptor(
            action=DeviceActionType.CALL,
            uri=uri,
            required_permission=DevicePermission.CALL_PHONE,
        ))
        return f"Calling {call.tel}"

    async def create_email(self, call: EmailToolCall) -> str:
        await self.launcher.launch(ActionDescriptor(
            action=DeviceActionType.SEND,
            mime_type="message/rfc822",
            package=GMAIL_PACKAGE,
            extras={
                EXTRA_EMAIL: [call.to],
                EXTRA_SUBJECT: call.subject,
                EXTRA_TEXT: call.body,
            },
        ))
        return f"Email to {call.to} drafted in Gmail"

    async def create_calendar_event(self, call: CalendarEventToolCall) -> str:
        await self.launcher.launch(ActionDescriptor(
            action=DeviceActionType.INSERT,
            uri=CALENDAR_EVENTS_URI,
            extras={
                EXTRA_EVENT_TITLE: call.title,
                EXTRA_EVENT_DESCRIPTION: call.description,
                EXTRA_EVENT_LOCATION: call.address,
                # epoch millis, interpreted in the device's local time zone
                EXTRA_EVENT_BEGIN_TIME: int(call.start.timestamp() * 1000),
                EXTRA_EVENT_END_TIME: int(call.end.timestamp() * 1000),
                EXTRA_EMAIL: ",".join(call.attendees),
            },
        ))
        return f"Added event '{call.title}' from {call.start:%Y-%m-%d %H:%M} to {call.end:%Y-%m-%d %H:%M}"

    async def create_note(self, call: NoteToolCall) -> str:
        await self.launcher.launch(ActionDescriptor(
            action=DeviceActionType.SEND,
            mime_type="text/plain",
            package=KEEP_PACKAGE,
            extras={
                EXTRA_SUBJECT: call.title,
                EXTRA_TEXT: call.body,
            },
        ))
        return f"Created note '{call.title}' in Google Keep"
