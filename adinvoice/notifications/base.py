from abc import ABC, abstractmethod
from typing import Any

UPLOAD_START = "upload:start"
UPLOAD_PROGRESS = "upload:progress"
UPLOAD_COMPLETE = "upload:complete"
UPLOAD_CANCELLED = "upload:cancelled"
UPLOAD_PAUSED = "upload:paused"
UPLOAD_RESUMED = "upload:resumed"
UPLOAD_ERROR = "upload:error"


class BaseNotificationSink(ABC):
    """Receives batch progress events, e.g. to forward them to a websocket."""

    @abstractmethod
    def emit(self, event: str, payload: dict[str, Any]) -> None:
        """Deliver one event. May raise; the publisher logs and drops failures."""
