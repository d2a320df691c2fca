from collections.abc import Callable, Sequence

from adinvoice.config.settings import Settings
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.extraction.factory import FieldExtractorFactory
from adinvoice.files.storage import FileStore
from adinvoice.ingestion.duplicates import DuplicateDetector
from adinvoice.ingestion.exceptions import ItemCancelledError
from adinvoice.ingestion.models import ItemResult, ItemStatus, UploadItem
from adinvoice.ingestion.pipeline import ItemContext, PipelineStep
from adinvoice.ingestion.steps import (
    CheckCancelledStep,
    CheckDuplicateStep,
    ClassifyPlatformStep,
    CreateRecordStep,
    ExtractFieldsStep,
    ExtractTextStep,
    HashContentStep,
    MarkCompletedStep,
    MarkFailedStep,
    PersistExtractedStep,
    PersistRawTextStep,
    PromoteFileStep,
)
from adinvoice.logging.logger import Log
from adinvoice.pdf.factory import PdfExtractorFactory


class ItemProcessor:
    """Runs one staged PDF through the item pipeline.

    Pipeline: hash -> duplicate check -> record -> text -> platform ->
    fields -> promote -> completed. The pipeline stops early on a duplicate.
    process() never raises: every outcome is an ItemResult.
    """

    def __init__(
        self,
        steps: Sequence[PipelineStep],
        failed_step: PipelineStep,
        file_store: FileStore,
    ) -> None:
        self._steps = list(steps)
        self._failed_step = failed_step
        self._file_store = file_store

    def process(
        self,
        run_id: str,
        item: UploadItem,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> ItemResult:
        context = ItemContext(run_id=run_id, item=item)
        if is_cancelled is not None:
            context.is_cancelled = is_cancelled
        try:
            for step in self._steps:
                context = step.run(context)
                if context.is_duplicate:
                    return self._duplicate(context)
        except ItemCancelledError:
            Log.info(f"Skipping {item.file_name}: upload {run_id} cancelled")
            self._file_store.discard(item.path)
            return ItemResult(file_name=item.file_name, status=ItemStatus.CANCELLED)
        except Exception as exc:
            return self._failed(context, exc)

        return ItemResult(
            file_name=item.file_name,
            status=ItemStatus.COMPLETED,
            record_id=context.record_id,
            platform=context.platform,
            extracted_data=context.invoice_data,
            stored_path=str(context.final_path) if context.final_path else None,
        )

    def _duplicate(self, context: ItemContext) -> ItemResult:
        verdict = context.verdict
        self._file_store.discard(context.item.path)
        existing = verdict.existing if verdict is not None else None
        return ItemResult(
            file_name=context.item.file_name,
            status=ItemStatus.DUPLICATE,
            duplicate_type=verdict.duplicate_type.value
            if verdict is not None and verdict.duplicate_type is not None
            else None,
            reason=verdict.reason if verdict is not None else None,
            existing_record_id=existing.id if existing is not None else None,
        )

    def _failed(self, context: ItemContext, exc: Exception) -> ItemResult:
        context.error_message = str(exc)
        Log.error(f"Error processing {context.item.file_name}: {context.error_message}")
        self._failed_step.run(context)
        self._file_store.discard(context.item.path)
        self._file_store.discard(context.final_path)
        return ItemResult(
            file_name=context.item.file_name,
            status=ItemStatus.FAILED,
            record_id=context.record_id,
            error=context.error_message,
        )


def build_item_processor(
    settings: Settings,
    repository: BaseInvoiceRepository,
    file_store: FileStore,
) -> ItemProcessor:
    """Build an ItemProcessor with the configured adapters."""
    pdf_extractor = PdfExtractorFactory.create(settings)
    field_extractor = FieldExtractorFactory.create(settings)
    steps: list[PipelineStep] = [
        CheckCancelledStep(),
        HashContentStep(),
        CheckDuplicateStep(DuplicateDetector(repository)),
        CheckCancelledStep(),
        CreateRecordStep(repository),
        ExtractTextStep(pdf_extractor),
        PersistRawTextStep(repository),
        ClassifyPlatformStep(),
        ExtractFieldsStep(field_extractor),
        PersistExtractedStep(repository),
        PromoteFileStep(file_store),
        MarkCompletedStep(repository),
    ]
    return ItemProcessor(
        steps=steps,
        failed_step=MarkFailedStep(repository),
        file_store=file_store,
    )
