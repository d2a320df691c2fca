import hashlib
import io
from pathlib import Path

import pytest

from adinvoice.files.hasher import hash_file, hash_stream


class TestHasher:
    def test_hash_file_matches_md5(self, tmp_path: Path, sample_pdf_bytes: bytes) -> None:
        path = tmp_path / "a.pdf"
        path.write_bytes(sample_pdf_bytes)
        digest = hash_file(path)
        assert digest == hashlib.md5(sample_pdf_bytes).hexdigest()
        assert len(digest) == 32
        assert digest == digest.lower()

    def test_same_bytes_same_digest(self, tmp_path: Path) -> None:
        a = tmp_path / "a.pdf"
        b = tmp_path / "renamed.pdf"
        a.write_bytes(b"same content")
        b.write_bytes(b"same content")
        assert hash_file(a) == hash_file(b)

    def test_stream_larger_than_chunk(self) -> None:
        data = b"x" * (200 * 1024 + 3)
        assert hash_stream(io.BytesIO(data)) == hashlib.md5(data).hexdigest()

    def test_missing_file_raises_oserror(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            hash_file(tmp_path / "missing.pdf")
