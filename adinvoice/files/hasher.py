import hashlib
from pathlib import Path
from typing import BinaryIO

_CHUNK_SIZE = 64 * 1024


def hash_stream(stream: BinaryIO) -> str:
    """Return the MD5 hex digest of a binary stream, read in chunks."""
    digest = hashlib.md5(usedforsecurity=False)
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def hash_file(path: Path) -> str:
    """Return the MD5 hex digest of a file without loading it into memory.

    Raises:
        OSError: if the file cannot be read.
    """
    with path.open("rb") as stream:
        return hash_stream(stream)
