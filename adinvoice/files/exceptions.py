class FileStoreError(Exception):
    """Base exception for staged and stored invoice files."""


class ArchiveCorruptError(FileStoreError):
    """Raised when an uploaded archive cannot be opened or read."""
