from unittest.mock import MagicMock

import pytest

from adinvoice.database.exceptions import StorageError
from adinvoice.database.models import InvoiceRecord
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.database.repositories.memory_repository import InMemoryInvoiceRepository
from adinvoice.ingestion.duplicates import DuplicateDetector, DuplicateType, name_stem


def _repo_with(*records: tuple[str, str]) -> InMemoryInvoiceRepository:
    repo = InMemoryInvoiceRepository()
    for file_name, file_hash in records:
        repo.create(InvoiceRecord(id=None, file_name=file_name, file_hash=file_hash))
    return repo


class TestNameStem:
    @pytest.mark.parametrize(
        ("name", "stem"),
        [("a.pdf", "a"), ("a.b.pdf", "a.b"), ("noext", "noext"), (".pdf", "")],
    )
    def test_stem(self, name: str, stem: str) -> None:
        assert name_stem(name) == stem


class TestDuplicateDetector:
    def test_new_file_is_not_duplicate(self) -> None:
        verdict = DuplicateDetector(_repo_with(("a.pdf", "h1"))).check("h2", "b.pdf")
        assert not verdict.is_duplicate
        assert verdict.error is None

    def test_content_match(self) -> None:
        verdict = DuplicateDetector(_repo_with(("a.pdf", "h1"))).check("h1", "renamed.pdf")
        assert verdict.is_duplicate
        assert verdict.duplicate_type == DuplicateType.CONTENT
        assert verdict.existing is not None
        assert verdict.existing.file_name == "a.pdf"
        assert "a.pdf" in (verdict.reason or "")

    def test_content_checked_before_name(self) -> None:
        repo = _repo_with(("a.pdf", "h1"), ("b.pdf", "h2"))
        verdict = DuplicateDetector(repo).check("h2", "a.pdf")
        assert verdict.duplicate_type == DuplicateType.CONTENT
        assert verdict.existing is not None
        assert verdict.existing.file_name == "b.pdf"

    def test_exact_name_match(self) -> None:
        verdict = DuplicateDetector(_repo_with(("a.pdf", "h1"))).check("h2", "a.pdf")
        assert verdict.duplicate_type == DuplicateType.FILENAME

    def test_similar_name_match(self) -> None:
        verdict = DuplicateDetector(_repo_with(("March.pdf", "h1"))).check("h2", "MARCH.zip")
        assert verdict.duplicate_type == DuplicateType.SIMILAR_NAME

    def test_stem_with_regex_characters_is_literal(self) -> None:
        repo = _repo_with(("inv(1).pdf", "h1"))
        assert DuplicateDetector(repo).check("h2", "inv(1).PDF").duplicate_type == (
            DuplicateType.SIMILAR_NAME
        )
        assert not DuplicateDetector(repo).check("h2", "inv1.pdf").is_duplicate

    def test_case_insensitive_match(self) -> None:
        repo = MagicMock(spec=BaseInvoiceRepository)
        existing = InvoiceRecord(id=7, file_name="A.pdf")
        repo.find_by_hash.return_value = None
        repo.find_by_name.return_value = None
        repo.find_by_name_stem.return_value = None
        repo.find_by_name_case_insensitive.return_value = existing

        verdict = DuplicateDetector(repo).check("h", "a.pdf")

        assert verdict.duplicate_type == DuplicateType.CASE_INSENSITIVE
        assert verdict.existing is existing
        repo.find_by_name_stem.assert_called_once_with("a")

    def test_fails_open_on_storage_error(self) -> None:
        repo = MagicMock(spec=BaseInvoiceRepository)
        repo.find_by_hash.side_effect = StorageError("db down")
        verdict = DuplicateDetector(repo).check("h", "a.pdf")
        assert not verdict.is_duplicate
        assert verdict.error == "db down"
