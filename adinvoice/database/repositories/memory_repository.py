import itertools
import re
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from adinvoice.classification.platform import Platform
from adinvoice.database.exceptions import RecordNotFoundError
from adinvoice.database.models import InvoiceRecord
from adinvoice.database.repositories.base import BaseInvoiceRepository, check_updatable

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class InMemoryInvoiceRepository(BaseInvoiceRepository):
    """Process-local invoice store for development runs and tests."""

    def __init__(self) -> None:
        self._records: dict[int, InvoiceRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, record: InvoiceRecord) -> int:
        now = datetime.now(timezone.utc)
        with self._lock:
            record_id = next(self._ids)
            self._records[record_id] = replace(
                record,
                id=record_id,
                processed_at=now,
                created_at=now,
                updated_at=now,
            )
        return record_id

    def update(self, record_id: int, **fields: Any) -> None:
        check_updatable(fields)
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise RecordNotFoundError(f"Invoice {record_id} not found")
            self._records[record_id] = replace(
                record, **fields, updated_at=datetime.now(timezone.utc)
            )

    def find_by_id(self, record_id: int) -> InvoiceRecord | None:
        with self._lock:
            return self._records.get(record_id)

    def find_by_hash(self, file_hash: str) -> InvoiceRecord | None:
        return self._first(lambda r: r.file_hash == file_hash)

    def find_by_name(self, file_name: str) -> InvoiceRecord | None:
        return self._first(lambda r: r.file_name == file_name)

    def find_by_name_stem(self, stem: str) -> InvoiceRecord | None:
        lowered = stem.lower()
        return self._first(
            lambda r: _EXTENSION_RE.search(r.file_name) is not None
            and _EXTENSION_RE.sub("", r.file_name).lower() == lowered
        )

    def find_by_name_case_insensitive(self, file_name: str) -> InvoiceRecord | None:
        lowered = file_name.lower()
        return self._first(lambda r: r.file_name.lower() == lowered)

    def find_by_platform(self, platform: Platform) -> list[InvoiceRecord]:
        with self._lock:
            matches = [r for r in self._records.values() if r.platform == platform]
        return sorted(matches, key=lambda r: r.id or 0, reverse=True)

    def delete(self, record_id: int) -> None:
        with self._lock:
            self._records.pop(record_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _first(self, predicate) -> InvoiceRecord | None:  # type: ignore[no-untyped-def]
        with self._lock:
            for record in self._records.values():
                if predicate(record):
                    return record
        return None
