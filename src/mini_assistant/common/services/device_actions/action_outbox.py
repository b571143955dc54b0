# host-side launcher: validates actions against device capabilities and queues them for the device client

from collections import deque
from mini_assistant.common.errors import PermissionDeniedError, NoMatchingActivityError
from mini_assistant.common.services.device_actions.action_types import ActionDescriptor, DeviceCapabilities
from mini_assistant.common.services.device_actions.protocols import ActionLauncherProtocol
from mini_assistant.common.logging.logger import logger

class ActionOutbox(ActionLauncherProtocol):
    """
    Accepts launch requests the device can honor and holds them until the device client drains them.
    - Permission and target-application checks happen here, so refusals surface synchronously to the tool.
    - Bounded: when full, the oldest undelivered action is dropped.
    """

    def __init__(self, capabilities: DeviceCapabilities | None = None, max_pending: int = 100):
        self.capabilities = capabilities or DeviceCapabilities()
        self._pending: deque[ActionDescriptor] = deque(maxlen=max_pending)

    def update_capabilities(self, capabilities: DeviceCapabilities) -> None:
        self.capabilities = capabilities
        logger.info(
            f"Device capabilities updated: permissions={sorted(p.value for p in capabilities.granted_permissions)}, "
            f"packages={'unknown' if capabilities.installed_packages is None else len(capabilities.installed_packages)}"
        )

    async def launch(self, descriptor: ActionDescriptor) -> None:
        permission = descriptor.required_permission
        if permission is not None and permission not in self.capabilities.granted_permissions:
            raise PermissionDeniedError(f"permission {permission.value} has not been granted")

        installed = self.capabilities.installed_packages
        if descriptor.package is not None and installed is not None and descriptor.package not in installed:
            raise NoMatchingActivityError(f"no installed application can handle {descriptor.package}")

        if len(self._pending) == self._pending.maxlen:
            dropped = self._pending[0]
            logger.warning(f"Action outbox full, dropping undelivered action {dropped.id} ({dropped.action.value})")
        self._pending.append(descriptor)
        logger.info(f"Queued device action {descriptor.id} ({descriptor.action.value})")

    def drain(self) -> list[ActionDescriptor]:
        """Hand every pending action to the caller, oldest first."""
        drained = list(self._pending)
        self._pending.clear()
        return drained

    def __len__(self) -> int:
        return len(self._pending)
