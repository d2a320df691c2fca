import contextlib
import threading
import time
import uuid
from collections import deque
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from adinvoice.config.settings import Settings
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.database.repositories.factory import InvoiceRepositoryFactory
from adinvoice.files.archive import expand_archive, is_archive
from adinvoice.files.exceptions import ArchiveCorruptError
from adinvoice.files.storage import FileStore
from adinvoice.ingestion.exceptions import BatchValidationError, RunNotFoundError
from adinvoice.ingestion.models import (
    BatchRun,
    BatchRunSnapshot,
    BatchSummary,
    ItemResult,
    ItemStatus,
    RunStatus,
    SubmissionReceipt,
    UploadItem,
)
from adinvoice.ingestion.processor import ItemProcessor, build_item_processor
from adinvoice.logging.logger import Log
from adinvoice.notifications.base import (
    UPLOAD_CANCELLED,
    UPLOAD_COMPLETE,
    UPLOAD_ERROR,
    UPLOAD_PAUSED,
    UPLOAD_PROGRESS,
    UPLOAD_RESUMED,
    UPLOAD_START,
    BaseNotificationSink,
)
from adinvoice.notifications.logging_sink import LoggingNotificationSink
from adinvoice.notifications.publisher import ProgressPublisher

PDF_MEDIA_TYPE = "application/pdf"


def is_pdf(file_name: str, media_type: str | None) -> bool:
    return file_name.lower().endswith(".pdf") or (media_type or "").lower() == PDF_MEDIA_TYPE


class BatchCoordinator:
    """Drives batches of uploaded invoices from submission to summary.

    Each batch runs on its own thread: archives are expanded first, then the
    PDFs are processed in fixed-size windows on a thread pool. A window must
    settle completely before the next one is dispatched. Pause and cancel are
    cooperative flags checked before every window and every item.
    """

    def __init__(
        self,
        *,
        item_processor: ItemProcessor,
        file_store: FileStore,
        publisher: ProgressPublisher,
        window_size: int = 15,
        pause_poll_interval: float = 0.1,
        max_batch_files: int = 200,
        max_retained_runs: int = 100,
    ) -> None:
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        if max_retained_runs < 1:
            raise ValueError("max_retained_runs must be at least 1")
        self._item_processor = item_processor
        self._file_store = file_store
        self._publisher = publisher
        self._window_size = window_size
        self._pause_poll_interval = pause_poll_interval
        self._max_batch_files = max_batch_files
        self._max_retained_runs = max_retained_runs
        self._runs: dict[str, BatchRun] = {}
        self._finished: deque[str] = deque()
        self._threads: dict[str, threading.Thread] = {}
        self._lock = threading.Lock()

    def submit(self, items: Sequence[UploadItem]) -> SubmissionReceipt:
        """Validate a batch and start it in the background.

        Raises:
            BatchValidationError: if the batch is empty, too large or holds a
                file that is neither a PDF nor a ZIP archive. Staged files of
                a rejected batch are discarded.
        """
        items = list(items)
        try:
            self._validate(items)
        except BatchValidationError:
            for item in items:
                self._file_store.discard(item.path)
            raise

        run = BatchRun(run_id=f"upload_{uuid.uuid4().hex}", total_files=len(items))
        thread = threading.Thread(
            target=self._execute,
            args=(run, items),
            name=f"batch-{run.run_id[-8:]}",
            daemon=True,
        )
        with self._lock:
            self._runs[run.run_id] = run
            self._threads[run.run_id] = thread

        self._publisher.start()
        self._publisher.publish(
            UPLOAD_START,
            {
                "runId": run.run_id,
                "totalFiles": len(items),
                "message": f"Starting upload of {len(items)} files",
            },
        )
        Log.info(f"Upload {run.run_id} accepted with {len(items)} files")
        thread.start()
        return SubmissionReceipt(run_id=run.run_id, total_files=len(items))

    def run(self, items: Sequence[UploadItem], timeout: float | None = None) -> BatchSummary:
        """Submit a batch and block until its summary is available."""
        receipt = self.submit(items)
        return self.wait(receipt.run_id, timeout=timeout)

    def pause(self, run_id: str) -> None:
        run = self._find(run_id)
        if run is None or not run.request_pause():
            return
        Log.info(f"Upload {run_id} paused")
        self._publisher.publish(UPLOAD_PAUSED, {"runId": run_id, "message": "Upload paused"})

    def resume(self, run_id: str) -> None:
        run = self._find(run_id)
        if run is None or not run.request_resume():
            return
        Log.info(f"Upload {run_id} resumed")
        self._publisher.publish(UPLOAD_RESUMED, {"runId": run_id, "message": "Upload resumed"})

    def cancel(self, run_id: str) -> None:
        run = self._find(run_id)
        if run is None or not run.request_cancel():
            return
        Log.info(f"Upload {run_id} cancelled")
        self._publisher.publish(
            UPLOAD_CANCELLED, {"runId": run_id, "message": "Upload cancelled"}
        )

    def status(self, run_id: str) -> BatchRunSnapshot:
        return self._get(run_id).snapshot()

    def wait(self, run_id: str, timeout: float | None = None) -> BatchSummary:
        """Block until the batch is finished and its events are delivered.

        Raises:
            RunNotFoundError: if run_id is unknown.
            TimeoutError: if the batch is still running after timeout seconds.
        """
        run = self._get(run_id)
        if not run.done.wait(timeout):
            raise TimeoutError(f"Upload {run_id} still running after {timeout}s")
        self._publisher.flush()
        summary = run.summary
        if summary is None:
            raise RuntimeError(f"Upload {run_id} finished without a summary")
        return summary

    def close(self) -> None:
        """Wait for running batches, then stop the publisher."""
        with self._lock:
            threads = list(self._threads.values())
        for thread in threads:
            if thread.is_alive():
                thread.join()
        self._publisher.stop()

    def _validate(self, items: list[UploadItem]) -> None:
        if not items:
            raise BatchValidationError("No files uploaded")
        if len(items) > self._max_batch_files:
            raise BatchValidationError(
                f"Too many files: {len(items)} (maximum {self._max_batch_files})"
            )
        for item in items:
            if not is_pdf(item.file_name, item.media_type) and not is_archive(
                item.file_name, item.media_type
            ):
                raise BatchValidationError(
                    f"Only PDF and ZIP files are allowed: {item.file_name}"
                )

    def _find(self, run_id: str) -> BatchRun | None:
        with self._lock:
            return self._runs.get(run_id)

    def _get(self, run_id: str) -> BatchRun:
        run = self._find(run_id)
        if run is None:
            raise RunNotFoundError(f"Upload {run_id} not found")
        return run

    def _execute(self, run: BatchRun, items: list[UploadItem]) -> None:
        try:
            with Log.run_context(run.run_id):
                self._drive(run, items)
        finally:
            with self._lock:
                self._threads.pop(run.run_id, None)

    def _drive(self, run: BatchRun, items: list[UploadItem]) -> None:
        try:
            run.set_status(RunStatus.EXPANDING_ARCHIVES)
            pdf_items = self._expand_archives(run, items)

            run.begin_processing(len(pdf_items))
            self._progress(
                run,
                "total_count",
                f"Total PDF files to process: {len(pdf_items)}",
                totalFiles=len(pdf_items),
            )
            if not pdf_items:
                self._publisher.publish(
                    UPLOAD_ERROR,
                    {
                        "runId": run.run_id,
                        "message": "No PDF files found in uploaded files",
                        "error": "No PDF files found in uploaded files",
                    },
                )
            else:
                self._process_windows(run, pdf_items)
        except Exception as exc:
            Log.exception(f"Upload {run.run_id} failed: {exc}")
            self._publisher.publish(
                UPLOAD_ERROR,
                {"runId": run.run_id, "message": "Upload processing failed", "error": str(exc)},
            )
        finally:
            run.finish(on_finished=self._complete)

    def _complete(self, summary: BatchSummary) -> None:
        self._publish_complete(summary)
        self._retain(summary.run_id)

    def _retain(self, run_id: str) -> None:
        """Keep finished runs queryable, dropping the oldest beyond the cap."""
        with self._lock:
            self._finished.append(run_id)
            while len(self._finished) > self._max_retained_runs:
                evicted = self._finished.popleft()
                self._runs.pop(evicted, None)
                Log.debug(f"Upload {evicted} evicted from finished runs")

    def _expand_archives(self, run: BatchRun, items: list[UploadItem]) -> list[UploadItem]:
        pdf_items: list[UploadItem] = []
        for index, item in enumerate(items):
            if run.is_cancelled:
                self._skip(run, items[index:])
                break
            if not is_archive(item.file_name, item.media_type):
                pdf_items.append(item)
                continue

            self._progress(
                run, "processing_zip", f"Extracting ZIP file: {item.file_name}",
                fileName=item.file_name,
            )
            extracted: list[UploadItem] = []
            try:
                with contextlib.closing(expand_archive(item.path)) as entries:
                    for entry in entries:
                        if run.is_cancelled:
                            break
                        path = self._file_store.stage_bytes(entry.data, entry.name)
                        extracted.append(
                            UploadItem(file_name=entry.name, path=path, media_type=PDF_MEDIA_TYPE)
                        )
            except (ArchiveCorruptError, OSError) as exc:
                for staged in extracted:
                    self._file_store.discard(staged.path)
                self._file_store.discard(item.path)
                error = f"Failed to extract ZIP file: {exc}"
                Log.error(f"{item.file_name}: {error}")
                run.record(
                    ItemResult(file_name=item.file_name, status=ItemStatus.FAILED, error=error),
                    counts_as_processed=False,
                )
                self._progress(run, "error", error, fileName=item.file_name, error=error)
                continue

            pdf_items.extend(extracted)
            Log.info(f"Extracted {len(extracted)} PDF files from {item.file_name}")
            self._progress(
                run,
                "zip_extracted",
                f"Extracted {len(extracted)} PDF files from {item.file_name}",
                fileName=item.file_name,
                extractedCount=len(extracted),
            )
        return pdf_items

    def _process_windows(self, run: BatchRun, items: list[UploadItem]) -> None:
        with ThreadPoolExecutor(
            max_workers=self._window_size, thread_name_prefix=f"{run.run_id[-8:]}-item"
        ) as executor:
            for start in range(0, len(items), self._window_size):
                window = items[start:start + self._window_size]
                Log.debug(
                    f"Upload {run.run_id}: window {start // self._window_size + 1} "
                    f"with {len(window)} files"
                )
                futures: list[Future[None]] = []
                for offset, item in enumerate(window):
                    if not self._wait_while_paused(run):
                        self._settle(futures)
                        self._skip(run, items[start + offset:])
                        return
                    futures.append(executor.submit(self._process_item, run, item))
                self._settle(futures)

    def _settle(self, futures: list[Future[None]]) -> None:
        wait(futures)
        for future in futures:
            future.result()

    def _wait_while_paused(self, run: BatchRun) -> bool:
        """Block while the run is paused. False once it is cancelled."""
        while True:
            if run.is_cancelled:
                return False
            if not run.is_paused:
                return True
            time.sleep(self._pause_poll_interval)

    def _process_item(self, run: BatchRun, item: UploadItem) -> None:
        with Log.run_context(run.run_id):
            self._run_item(run, item)

    def _run_item(self, run: BatchRun, item: UploadItem) -> None:
        run.report(
            lambda percent: self._progress(
                run, "processing", f"Processing {item.file_name}",
                fileName=item.file_name, progress=percent,
            )
        )
        result = self._item_processor.process(
            run.run_id, item, is_cancelled=lambda: run.is_cancelled
        )

        if result.status == ItemStatus.CANCELLED:
            run.record(result, counts_as_processed=False)
            self._progress(
                run, "cancelled", f"Skipped {item.file_name}", fileName=item.file_name
            )
            return

        run.record(result, on_recorded=lambda percent: self._report(run, result, percent))

    def _report(self, run: BatchRun, result: ItemResult, percent: int) -> None:
        if result.status == ItemStatus.COMPLETED:
            self._progress(
                run, "completed", f"Successfully processed {result.file_name}",
                fileName=result.file_name, progress=percent, result=result.to_payload(),
            )
        elif result.status == ItemStatus.DUPLICATE:
            self._progress(
                run, "duplicate", f"Duplicate file skipped: {result.file_name}",
                fileName=result.file_name, progress=percent, reason=result.reason,
                duplicateType=result.duplicate_type,
            )
        else:
            self._progress(
                run, "error", f"Error processing {result.file_name}",
                fileName=result.file_name, progress=percent, error=result.error,
            )

    def _skip(self, run: BatchRun, items: Sequence[UploadItem]) -> None:
        if not items:
            return
        Log.info(f"Upload {run.run_id}: {len(items)} files not processed after cancel")
        for item in items:
            self._file_store.discard(item.path)
            run.record(
                ItemResult(file_name=item.file_name, status=ItemStatus.CANCELLED),
                counts_as_processed=False,
            )

    def _progress(self, run: BatchRun, status: str, message: str, **fields: Any) -> None:
        payload: dict[str, Any] = {"runId": run.run_id, "status": status, "message": message}
        payload.update({key: value for key, value in fields.items() if value is not None})
        self._publisher.publish(UPLOAD_PROGRESS, payload)

    def _publish_complete(self, summary: BatchSummary) -> None:
        Log.info(
            f"Upload {summary.run_id} {summary.status.value}: {summary.successful} successful, "
            f"{summary.failed} failed, {summary.duplicates} duplicates, "
            f"{summary.cancelled} cancelled"
        )
        self._publisher.publish(
            UPLOAD_COMPLETE,
            {
                "runId": summary.run_id,
                "status": summary.status.value,
                "successful": summary.successful,
                "failed": summary.failed,
                "duplicates": summary.duplicates,
                "cancelled": summary.cancelled,
                "totalFiles": summary.total_files,
                "message": (
                    f"Upload {summary.status.value}: {summary.successful} successful, "
                    f"{summary.failed} failed, {summary.duplicates} duplicates"
                ),
            },
        )


def build_coordinator(
    settings: Settings,
    sink: BaseNotificationSink | None = None,
    repository: BaseInvoiceRepository | None = None,
) -> BatchCoordinator:
    """Build a BatchCoordinator with all required adapters."""
    if repository is None:
        repository = InvoiceRepositoryFactory.create(settings)
    file_store = FileStore(temp_dir=settings.temp_dir, uploads_dir=settings.uploads_dir)
    publisher = ProgressPublisher(sink or LoggingNotificationSink())
    return BatchCoordinator(
        item_processor=build_item_processor(settings, repository, file_store),
        file_store=file_store,
        publisher=publisher,
        window_size=settings.batch_window_size,
        pause_poll_interval=settings.pause_poll_interval_seconds,
        max_batch_files=settings.max_batch_files,
        max_retained_runs=settings.max_retained_runs,
    )
