from adinvoice.classification.platform import classify_platform
from adinvoice.database.models import InvoiceRecord, InvoiceStatus
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.extraction.base import BaseFieldExtractor
from adinvoice.files.hasher import hash_file
from adinvoice.files.storage import FileStore
from adinvoice.ingestion.duplicates import DuplicateDetector
from adinvoice.ingestion.exceptions import ItemCancelledError
from adinvoice.ingestion.pipeline import ItemContext, PipelineStep
from adinvoice.logging.logger import Log
from adinvoice.pdf.base import BasePdfExtractor


class HashContentStep(PipelineStep):
    def run(self, context: ItemContext) -> ItemContext:
        context.file_hash = hash_file(context.item.path)
        return context


class CheckDuplicateStep(PipelineStep):
    def __init__(self, detector: DuplicateDetector) -> None:
        self._detector = detector

    def run(self, context: ItemContext) -> ItemContext:
        context.verdict = self._detector.check(context.file_hash, context.item.file_name)
        if context.verdict.is_duplicate:
            Log.info(f"Duplicate detected for {context.item.file_name}: {context.verdict.reason}")
        return context


class CheckCancelledStep(PipelineStep):
    def run(self, context: ItemContext) -> ItemContext:
        if context.is_cancelled():
            raise ItemCancelledError(f"Upload {context.run_id} cancelled")
        return context


class CreateRecordStep(PipelineStep):
    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def run(self, context: ItemContext) -> ItemContext:
        context.record_id = self._repository.create(
            InvoiceRecord(
                id=None,
                file_name=context.item.file_name,
                file_hash=context.file_hash,
                status=InvoiceStatus.PROCESSING,
            )
        )
        Log.debug(f"Created invoice {context.record_id} for {context.item.file_name}")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def run(self, context: ItemContext) -> ItemContext:
        context.extracted_text = self._pdf_extractor.extract(context.item.path.read_bytes())
        Log.info(
            f"Extracted {len(context.extracted_text)} chars from {context.item.file_name}"
        )
        return context


class PersistRawTextStep(PipelineStep):
    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def run(self, context: ItemContext) -> ItemContext:
        _require_record(context)
        self._repository.update(context.record_id, raw_text=context.extracted_text)
        return context


class ClassifyPlatformStep(PipelineStep):
    def run(self, context: ItemContext) -> ItemContext:
        context.platform = classify_platform(context.extracted_text)
        Log.info(f"Classified {context.item.file_name} as {context.platform.value}")
        return context


class ExtractFieldsStep(PipelineStep):
    def __init__(self, field_extractor: BaseFieldExtractor) -> None:
        self._field_extractor = field_extractor

    def run(self, context: ItemContext) -> ItemContext:
        context.invoice_data = self._field_extractor.extract(
            context.extracted_text, context.platform
        )
        return context


class PersistExtractedStep(PipelineStep):
    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def run(self, context: ItemContext) -> ItemContext:
        _require_record(context)
        if context.invoice_data is None:
            raise ValueError("ItemContext.invoice_data must be set before persist")
        self._repository.update(
            context.record_id,
            platform=context.platform,
            extracted_data=context.invoice_data,
        )
        return context


class PromoteFileStep(PipelineStep):
    def __init__(self, file_store: FileStore) -> None:
        self._file_store = file_store

    def run(self, context: ItemContext) -> ItemContext:
        context.final_path = self._file_store.promote(
            context.item.path, context.item.file_name
        )
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def run(self, context: ItemContext) -> ItemContext:
        _require_record(context)
        self._repository.update(
            context.record_id,
            file_path=str(context.final_path),
            status=InvoiceStatus.COMPLETED,
        )
        Log.info(f"Invoice {context.record_id} ({context.item.file_name}) completed")
        return context


class MarkFailedStep(PipelineStep):
    """Marks the item's record failed. Runs only on the failure path and never raises."""

    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def run(self, context: ItemContext) -> ItemContext:
        if context.record_id is None:
            return context
        try:
            self._repository.update(
                context.record_id,
                status=InvoiceStatus.FAILED,
                error_message=context.error_message,
                file_path=None,
            )
        except Exception as exc:
            Log.error(f"Could not mark invoice {context.record_id} as failed: {exc}")
        return context


def _require_record(context: ItemContext) -> None:
    if context.record_id is None:
        raise ValueError("ItemContext.record_id must be set before updating the record")
