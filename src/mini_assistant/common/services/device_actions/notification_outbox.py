# host-side notifier: queues toast messages for the device client

from collections import deque
from datetime import datetime
from pydantic import BaseModel, Field
from mini_assistant.common.services.device_actions.protocols import NotifierProtocol
from mini_assistant.common.logging.logger import logger

class UserNotification(BaseModel):
    message: str
    created_at: datetime = Field(default_factory=datetime.now)

class NotificationOutbox(NotifierProtocol):
    """Never blocks and never raises; the oldest message is dropped when full."""

    def __init__(self, max_pending: int = 50):
        self._pending: deque[UserNotification] = deque(maxlen=max_pending)

    def notify(self, message: str) -> None:
        self._pending.append(UserNotification(message=message))
        logger.info(f"User notification queued: {message}")

    def drain(self) -> list[UserNotification]:
        drained = list(self._pending)
        self._pending.clear()
        return drained
