from abc import ABC, abstractmethod
from typing import Any

from adinvoice.classification.platform import Platform
from adinvoice.database.models import InvoiceRecord

UPDATABLE_FIELDS = frozenset({
    "file_path",
    "file_hash",
    "platform",
    "status",
    "extracted_data",
    "raw_text",
    "error_message",
})


class BaseInvoiceRepository(ABC):
    """Storage contract consumed by the ingestion pipeline.

    Implementations must be safe to call from several worker threads at once.
    All methods raise StorageError when the backend fails.
    """

    @abstractmethod
    def create(self, record: InvoiceRecord) -> int:
        """Insert a record and return its new id."""

    @abstractmethod
    def update(self, record_id: int, **fields: Any) -> None:
        """Update a subset of UPDATABLE_FIELDS.

        Raises:
            RecordNotFoundError: if no record with this id exists.
            ValueError: if a field is not updatable.
        """

    @abstractmethod
    def find_by_id(self, record_id: int) -> InvoiceRecord | None:
        """Return the record with this id."""

    @abstractmethod
    def find_by_hash(self, file_hash: str) -> InvoiceRecord | None:
        """Return any record whose content digest equals file_hash."""

    @abstractmethod
    def find_by_name(self, file_name: str) -> InvoiceRecord | None:
        """Return any record whose file name equals file_name exactly."""

    @abstractmethod
    def find_by_name_stem(self, stem: str) -> InvoiceRecord | None:
        """Return any record named "<stem>.<any extension>", case-insensitively."""

    @abstractmethod
    def find_by_name_case_insensitive(self, file_name: str) -> InvoiceRecord | None:
        """Return any record whose file name equals file_name ignoring case."""

    @abstractmethod
    def find_by_platform(self, platform: Platform) -> list[InvoiceRecord]:
        """Return all records of a platform, most recently processed first."""

    @abstractmethod
    def delete(self, record_id: int) -> None:
        """Delete a record. Unknown ids are ignored."""


def check_updatable(fields: dict[str, Any]) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
