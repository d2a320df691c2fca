import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from adinvoice.files.archive import expand_archive, is_archive
from adinvoice.files.exceptions import ArchiveCorruptError


def _write_zip(tmp_path: Path, zip_factory: Callable[[dict[str, bytes]], bytes], entries: dict[str, bytes]) -> Path:
    path = tmp_path / "batch.zip"
    path.write_bytes(zip_factory(entries))
    return path


class TestIsArchive:
    @pytest.mark.parametrize(
        ("name", "media_type", "expected"),
        [
            ("invoices.zip", None, True),
            ("INVOICES.ZIP", "application/octet-stream", True),
            ("upload", "application/zip", True),
            ("upload", "application/x-zip-compressed", True),
            ("invoice.pdf", "application/pdf", False),
            ("upload", "application/octet-stream", False),
        ],
    )
    def test_detection(self, name: str, media_type: str | None, expected: bool) -> None:
        assert is_archive(name, media_type) is expected


class TestExpandArchive:
    def test_yields_only_pdf_entries(
        self, tmp_path: Path, zip_factory: Callable[[dict[str, bytes]], bytes]
    ) -> None:
        path = _write_zip(
            tmp_path,
            zip_factory,
            {
                "a.pdf": b"%PDF-a",
                "nested/dir/B.PDF": b"%PDF-b",
                "c.pdf": b"%PDF-c",
                "readme.txt": b"hello",
                "image.png": b"png",
            },
        )
        entries = list(expand_archive(path))
        assert [e.name for e in entries] == ["a.pdf", "B.PDF", "c.pdf"]
        assert entries[1].data == b"%PDF-b"

    def test_skips_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "dirs.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("folder.pdf/", b"")
            archive.writestr("folder.pdf/x.pdf", b"%PDF-x")
        assert [e.name for e in expand_archive(path)] == ["x.pdf"]

    def test_archive_removed_after_exhaustion(
        self, tmp_path: Path, zip_factory: Callable[[dict[str, bytes]], bytes]
    ) -> None:
        path = _write_zip(tmp_path, zip_factory, {"a.pdf": b"%PDF-a"})
        list(expand_archive(path))
        assert not path.exists()

    def test_archive_removed_when_closed_early(
        self, tmp_path: Path, zip_factory: Callable[[dict[str, bytes]], bytes]
    ) -> None:
        path = _write_zip(tmp_path, zip_factory, {"a.pdf": b"%PDF-a", "b.pdf": b"%PDF-b"})
        entries = expand_archive(path)
        next(entries)
        entries.close()
        assert not path.exists()

    def test_generator_is_lazy(
        self, tmp_path: Path, zip_factory: Callable[[dict[str, bytes]], bytes]
    ) -> None:
        path = _write_zip(tmp_path, zip_factory, {"a.pdf": b"%PDF-a"})
        entries = expand_archive(path)
        assert path.exists()
        list(entries)
        assert not path.exists()

    def test_corrupt_archive_raises_and_is_removed(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.zip"
        path.write_bytes(b"this is not a zip file")
        with pytest.raises(ArchiveCorruptError, match="Cannot open archive"):
            list(expand_archive(path))
        assert not path.exists()

    def test_missing_archive_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ArchiveCorruptError):
            list(expand_archive(tmp_path / "missing.zip"))
