import queue
import threading
from dataclasses import dataclass
from typing import Any

from adinvoice.logging.logger import Log
from adinvoice.notifications.base import BaseNotificationSink


@dataclass(frozen=True)
class _Event:
    name: str
    payload: dict[str, Any]


_STOP = object()


class ProgressPublisher:
    """Single consumer thread that forwards queued events to a sink.

    Workers only enqueue, so a slow or failing sink never blocks or breaks
    a batch. Delivery is at-most-once: sink errors are logged and the event
    is dropped.
    """

    def __init__(self, sink: BaseNotificationSink) -> None:
        self._sink = sink
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._consume, name="progress-publisher", daemon=True
            )
            self._thread.start()

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        """Enqueue an event. Never blocks and never raises."""
        self._queue.put(_Event(name=event, payload=payload))

    def flush(self) -> None:
        """Block until every event enqueued so far has been handled."""
        self.start()
        self._queue.join()

    def stop(self) -> None:
        """Deliver pending events, then end the consumer thread."""
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join()

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if isinstance(item, _Event):
                    self._deliver(item)
            finally:
                self._queue.task_done()

    def _deliver(self, event: _Event) -> None:
        try:
            self._sink.emit(event.name, event.payload)
        except Exception as exc:
            Log.warning(f"Dropped {event.name} notification: {exc}")
