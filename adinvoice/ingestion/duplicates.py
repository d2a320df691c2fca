import re
from dataclasses import dataclass
from enum import Enum

from adinvoice.database.models import InvoiceRecord
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.logging.logger import Log

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class DuplicateType(str, Enum):
    CONTENT = "content"
    FILENAME = "filename"
    SIMILAR_NAME = "similar_name"
    CASE_INSENSITIVE = "case_insensitive"


@dataclass(frozen=True)
class DuplicateVerdict:
    """Result of a duplicate check. error is set when the check failed open."""

    is_duplicate: bool
    duplicate_type: DuplicateType | None = None
    reason: str | None = None
    existing: InvoiceRecord | None = None
    error: str | None = None


NOT_DUPLICATE = DuplicateVerdict(is_duplicate=False)


def name_stem(file_name: str) -> str:
    """File name without its last extension."""
    return _EXTENSION_RE.sub("", file_name)


class DuplicateDetector:
    """Decides whether an upload repeats an already ingested invoice.

    Checks run from most to least specific and the first hit wins:
    content digest, exact name, same stem with any extension, name
    ignoring case.
    """

    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def check(self, file_hash: str, file_name: str) -> DuplicateVerdict:
        try:
            return self._check(file_hash, file_name)
        except Exception as exc:
            Log.warning(f"Duplicate check failed for {file_name}, accepting file: {exc}")
            return DuplicateVerdict(is_duplicate=False, error=str(exc))

    def _check(self, file_hash: str, file_name: str) -> DuplicateVerdict:
        existing = self._repository.find_by_hash(file_hash)
        if existing is not None:
            return DuplicateVerdict(
                is_duplicate=True,
                duplicate_type=DuplicateType.CONTENT,
                reason=f"File content already exists ({existing.file_name})",
                existing=existing,
            )

        existing = self._repository.find_by_name(file_name)
        if existing is not None:
            return DuplicateVerdict(
                is_duplicate=True,
                duplicate_type=DuplicateType.FILENAME,
                reason="File with exact same name already exists",
                existing=existing,
            )

        existing = self._repository.find_by_name_stem(name_stem(file_name))
        if existing is not None:
            return DuplicateVerdict(
                is_duplicate=True,
                duplicate_type=DuplicateType.SIMILAR_NAME,
                reason=f"File with similar name already exists ({existing.file_name})",
                existing=existing,
            )

        existing = self._repository.find_by_name_case_insensitive(file_name)
        if existing is not None:
            return DuplicateVerdict(
                is_duplicate=True,
                duplicate_type=DuplicateType.CASE_INSENSITIVE,
                reason="File with same name (case-insensitive) already exists",
                existing=existing,
            )

        return NOT_DUPLICATE
