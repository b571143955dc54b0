# descriptors for actions the host device performs on the assistant's behalf

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field

class DeviceActionType(str, Enum):
    """Platform intent actions understood by the device client."""
    CALL = "android.intent.action.CALL"
    SEND = "android.intent.action.SEND"
    INSERT = "android.intent.action.INSERT"

class DevicePermission(str, Enum):
    CALL_PHONE = "android.permission.CALL_PHONE"

# target packages for app-specific actions
GMAIL_PACKAGE = "com.google.android.gm"
KEEP_PACKAGE = "com.google.android.keep"
CALENDAR_EVENTS_URI = "content://com.android.calendar/events"

# extra keys, mirroring the platform's intent extras
EXTRA_EMAIL = "android.intent.extra.EMAIL"
EXTRA_SUBJECT = "android.intent.extra.SUBJECT"
EXTRA_TEXT = "android.intent.extra.TEXT"
EXTRA_EVENT_TITLE = "title"
EXTRA_EVENT_DESCRIPTION = "description"
EXTRA_EVENT_LOCATION = "eventLocation"
EXTRA_EVENT_BEGIN_TIME = "beginTime"
EXTRA_EVENT_END_TIME = "endTime"

ExtraValue = Union[str, int, list[str]]

class ActionDescriptor(BaseModel):
    """
    A one-way request for the host device to perform an external action.
    The core only learns whether the request was accepted, never whether the user completed it.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    action: DeviceActionType
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    package: Optional[str] = Field(default=None, description="Application that must handle the action, if any.")
    extras: dict[str, ExtraValue] = Field(default_factory=dict)
    required_permission: Optional[DevicePermission] = None
    created_at: datetime = Field(default_factory=datetime.now)

class DeviceCapabilities(BaseModel):
    """
    What the device client has reported about itself.
    installed_packages=None means unknown, in which case package-targeted actions are not pre-checked.
    """
    granted_permissions: frozenset[DevicePermission] = frozenset()
    installed_packages: Optional[frozenset[str]] = None
