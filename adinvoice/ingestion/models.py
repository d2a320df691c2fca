import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from adinvoice.classification.platform import Platform
from adinvoice.extraction.models import InvoiceData


@dataclass(frozen=True)
class UploadItem:
    """One submitted file, already staged in temporary storage."""

    file_name: str
    path: Path
    media_type: str | None = None


@dataclass(frozen=True)
class SubmissionReceipt:
    """Returned by submit() before any processing happens."""

    run_id: str
    total_files: int


class ItemStatus(str, Enum):
    COMPLETED = "completed"
    DUPLICATE = "duplicate"
    FAILED = "failed"
    CANCELLED = "cancelled"


class RunStatus(str, Enum):
    STARTING = "starting"
    EXPANDING_ARCHIVES = "expanding-archives"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ItemResult:
    """Outcome of one item of a batch."""

    file_name: str
    status: ItemStatus
    record_id: int | None = None
    platform: Platform | None = None
    extracted_data: InvoiceData | None = None
    stored_path: str | None = None
    duplicate_type: str | None = None
    reason: str | None = None
    existing_record_id: int | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"fileName": self.file_name, "status": self.status.value}
        if self.record_id is not None:
            payload["recordId"] = self.record_id
        if self.platform is not None:
            payload["platform"] = self.platform.value
        if self.extracted_data is not None:
            payload["extractedData"] = self.extracted_data.to_payload()
        if self.stored_path is not None:
            payload["storedPath"] = self.stored_path
        if self.duplicate_type is not None:
            payload["duplicateType"] = self.duplicate_type
            payload["existingRecordId"] = self.existing_record_id
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class BatchSummary:
    """Terminal report of a batch: every submitted item appears in results."""

    run_id: str
    status: RunStatus
    total_files: int
    successful: int
    failed: int
    duplicates: int
    cancelled: int
    results: list[ItemResult]


@dataclass(frozen=True)
class BatchRunSnapshot:
    run_id: str
    status: RunStatus
    total_files: int
    processed_count: int
    paused: bool
    cancelled: bool


@dataclass
class BatchRun:
    """Mutable state of one batch, shared by its coordinator thread and workers.

    Every read and write of the counters and flags goes through the lock.
    """

    run_id: str
    total_files: int = 0
    processed_count: int = 0
    paused: bool = False
    cancelled: bool = False
    status: RunStatus = RunStatus.STARTING
    results: list[ItemResult] = field(default_factory=list)
    summary: BatchSummary | None = None
    done: threading.Event = field(default_factory=threading.Event)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def is_paused(self) -> bool:
        with self._lock:
            return self.paused

    @property
    def is_cancelled(self) -> bool:
        with self._lock:
            return self.cancelled

    @property
    def is_terminal(self) -> bool:
        with self._lock:
            return self.summary is not None

    def set_status(self, status: RunStatus) -> None:
        with self._lock:
            self.status = status

    def begin_processing(self, total_files: int) -> None:
        with self._lock:
            self.total_files = total_files
            self.status = RunStatus.PROCESSING

    def request_pause(self) -> bool:
        """Set the paused flag. False when already paused, cancelled or finished."""
        with self._lock:
            if self.paused or self.cancelled or self.summary is not None:
                return False
            self.paused = True
            return True

    def request_resume(self) -> bool:
        with self._lock:
            if not self.paused or self.cancelled or self.summary is not None:
                return False
            self.paused = False
            return True

    def request_cancel(self) -> bool:
        """Set the cancelled flag for good. False when already cancelled or finished."""
        with self._lock:
            if self.cancelled or self.summary is not None:
                return False
            self.cancelled = True
            return True

    def report(self, on_report: Callable[[int], None] | None = None) -> int:
        """Return the current percent complete.

        on_report gets the percent while the lock is held, so a report cannot
        be overtaken by a later record().
        """
        with self._lock:
            percent = self._percent()
            if on_report is not None:
                on_report(percent)
            return percent

    def record(
        self,
        result: ItemResult,
        counts_as_processed: bool = True,
        on_recorded: Callable[[int], None] | None = None,
    ) -> int:
        """Store an item outcome and return the new percent complete.

        on_recorded is called with the percent while the lock is still held,
        so progress reports leave in the order the counter moved.
        """
        with self._lock:
            self.results.append(result)
            if counts_as_processed:
                self.processed_count += 1
            percent = self._percent()
            if on_recorded is not None:
                on_recorded(percent)
            return percent

    def finish(
        self, on_finished: Callable[[BatchSummary], None] | None = None
    ) -> BatchSummary:
        """Freeze the run into its summary and wake up waiters.

        on_finished runs before waiters wake, so they see its effects.
        """
        with self._lock:
            if self.summary is None:
                self.status = RunStatus.CANCELLED if self.cancelled else RunStatus.COMPLETED
                results = list(self.results)
                self.summary = BatchSummary(
                    run_id=self.run_id,
                    status=self.status,
                    total_files=self.total_files,
                    successful=_count(results, ItemStatus.COMPLETED),
                    failed=_count(results, ItemStatus.FAILED),
                    duplicates=_count(results, ItemStatus.DUPLICATE),
                    cancelled=_count(results, ItemStatus.CANCELLED),
                    results=results,
                )
            summary = self.summary
        try:
            if on_finished is not None:
                on_finished(summary)
        finally:
            self.done.set()
        return summary

    def snapshot(self) -> BatchRunSnapshot:
        with self._lock:
            return BatchRunSnapshot(
                run_id=self.run_id,
                status=self.status,
                total_files=self.total_files,
                processed_count=self.processed_count,
                paused=self.paused,
                cancelled=self.cancelled,
            )

    def _percent(self) -> int:
        if self.total_files <= 0:
            return 0
        # Rounds half up.
        return (self.processed_count * 100 + self.total_files // 2) // self.total_files


def _count(results: list[ItemResult], status: ItemStatus) -> int:
    return sum(1 for r in results if r.status == status)
