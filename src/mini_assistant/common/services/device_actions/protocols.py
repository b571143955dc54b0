# protocols for platform collaborators: action launching and user notifications

from typing import Protocol, runtime_checkable
from mini_assistant.common.services.device_actions.action_types import ActionDescriptor

@runtime_checkable
class ActionLauncherProtocol(Protocol):
    """
    Fire-and-forget launch of a device action.
    Raises ActionLaunchError (PermissionDeniedError, NoMatchingActivityError) when the request is refused.
    """
    async def launch(self, descriptor: ActionDescriptor) -> None: ...

@runtime_checkable
class NotifierProtocol(Protocol):
    """Best-effort, non-blocking user-facing notification (toast)."""
    def notify(self, message: str) -> None: ...
