from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from adinvoice.classification.platform import Platform
from adinvoice.extraction.models import InvoiceData


class InvoiceStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class InvoiceRecord:
    """Represents a row from the invoices table."""

    id: int | None
    file_name: str
    file_path: str | None = None
    file_hash: str | None = None
    platform: Platform = Platform.OTHER
    status: InvoiceStatus = InvoiceStatus.PROCESSING
    extracted_data: InvoiceData | None = None
    raw_text: str | None = None
    error_message: str | None = None
    processed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
