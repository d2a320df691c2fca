from typing import Any

from adinvoice.logging.logger import Log
from adinvoice.notifications.base import BaseNotificationSink


class LoggingNotificationSink(BaseNotificationSink):
    """Writes every event to the application log."""

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        message = payload.get("message", "")
        progress = payload.get("progress")
        suffix = f" ({progress}%)" if progress is not None else ""
        Log.info(f"[{event}] {payload.get('runId', '-')}: {message}{suffix}")
