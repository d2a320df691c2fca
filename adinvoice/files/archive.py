import zipfile
import zlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from adinvoice.files.exceptions import ArchiveCorruptError
from adinvoice.logging.logger import Log

ZIP_MEDIA_TYPES = frozenset({
    "application/zip",
    "application/x-zip-compressed",
    "application/x-zip",
})


@dataclass(frozen=True)
class ArchiveEntry:
    """A PDF pulled out of an uploaded archive."""

    name: str
    data: bytes


def is_archive(file_name: str, media_type: str | None) -> bool:
    """True for .zip names and zip media types (octet-stream needs the extension)."""
    if file_name.lower().endswith(".zip"):
        return True
    return (media_type or "").lower() in ZIP_MEDIA_TYPES


def expand_archive(archive_path: Path) -> Iterator[ArchiveEntry]:
    """Yield every PDF entry of a ZIP archive, one at a time.

    Directory entries and non-PDF entries are skipped. Entry names are
    reduced to their base name. The archive file is removed once the
    generator is exhausted, fails or is closed.

    Raises:
        ArchiveCorruptError: if the archive or one of its entries is unreadable.
    """
    try:
        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ArchiveCorruptError(f"Cannot open archive: {exc}") from exc
        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                name = PurePosixPath(info.filename.replace("\\", "/")).name
                if not name.lower().endswith(".pdf"):
                    continue
                try:
                    data = archive.read(info)
                except (
                    zipfile.BadZipFile,
                    zlib.error,
                    OSError,
                    RuntimeError,
                    EOFError,
                ) as exc:
                    raise ArchiveCorruptError(
                        f"Cannot read entry '{info.filename}': {exc}"
                    ) from exc
                yield ArchiveEntry(name=name, data=data)
    finally:
        _remove_archive(archive_path)


def _remove_archive(archive_path: Path) -> None:
    try:
        archive_path.unlink(missing_ok=True)
    except OSError as exc:
        Log.error(f"Could not remove archive {archive_path}: {exc}")
