from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from adinvoice.classification.platform import Platform
from adinvoice.extraction.models import InvoiceData
from adinvoice.ingestion.duplicates import DuplicateVerdict
from adinvoice.ingestion.models import UploadItem


def _never_cancelled() -> bool:
    return False


@dataclass(slots=True)
class ItemContext:
    run_id: str
    item: UploadItem
    is_cancelled: Callable[[], bool] = _never_cancelled
    file_hash: str = ""
    verdict: DuplicateVerdict | None = None
    record_id: int | None = None
    extracted_text: str = ""
    platform: Platform = Platform.OTHER
    invoice_data: InvoiceData | None = None
    final_path: Path | None = None
    error_message: str = ""

    @property
    def is_duplicate(self) -> bool:
        return self.verdict is not None and self.verdict.is_duplicate


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ItemContext) -> ItemContext:
        raise NotImplementedError
