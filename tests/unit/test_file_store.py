from pathlib import Path
from unittest.mock import patch

import pytest

from adinvoice.files.storage import FileStore, unique_file_name


def _make_store(tmp_path: Path) -> FileStore:
    return FileStore(temp_dir=tmp_path / "tmp", uploads_dir=tmp_path / "uploads")


class TestUniqueFileName:
    def test_prefix_and_base_name(self) -> None:
        name = unique_file_name("some/dir/invoice.pdf")
        prefix, _, rest = name.partition("-")
        assert rest == "invoice.pdf"
        assert len(prefix) == 12

    def test_names_differ(self) -> None:
        assert unique_file_name("a.pdf") != unique_file_name("a.pdf")


class TestFileStore:
    def test_stage_bytes_writes_into_temp_dir(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        path = store.stage_bytes(b"%PDF-1", "invoice.pdf")
        assert path.parent == tmp_path / "tmp"
        assert path.name.endswith("-invoice.pdf")
        assert path.read_bytes() == b"%PDF-1"

    def test_same_name_staged_twice_gets_two_paths(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        first = store.stage_bytes(b"1", "invoice.pdf")
        second = store.stage_bytes(b"2", "invoice.pdf")
        assert first != second
        assert first.read_bytes() == b"1"

    def test_stage_file_keeps_source(self, tmp_path: Path) -> None:
        source = tmp_path / "source.pdf"
        source.write_bytes(b"local")
        path = _make_store(tmp_path).stage_file(source)
        assert path.read_bytes() == b"local"
        assert source.exists()

    def test_promote_moves_into_uploads(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        staged = store.stage_bytes(b"data", "invoice.pdf")
        final = store.promote(staged, "invoice.pdf")
        assert final.parent == tmp_path / "uploads"
        assert final.read_bytes() == b"data"
        assert not staged.exists()

    def test_promote_missing_file_raises(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        with pytest.raises(OSError):
            store.promote(tmp_path / "tmp" / "missing.pdf", "missing.pdf")

    def test_discard_removes_and_tolerates_missing(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        staged = store.stage_bytes(b"data", "invoice.pdf")
        store.discard(staged)
        assert not staged.exists()
        store.discard(staged)
        store.discard(None)

    def test_discard_logs_errors(self, tmp_path: Path) -> None:
        store = _make_store(tmp_path)
        staged = store.stage_bytes(b"data", "invoice.pdf")
        with (
            patch.object(Path, "unlink", side_effect=PermissionError("denied")),
            patch("adinvoice.files.storage.Log") as mock_log,
        ):
            store.discard(staged)
        mock_log.error.assert_called_once()
