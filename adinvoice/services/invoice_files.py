import zipfile
from dataclasses import dataclass
from pathlib import Path

from adinvoice.classification.platform import Platform
from adinvoice.database.exceptions import RecordNotFoundError
from adinvoice.database.models import InvoiceRecord, InvoiceStatus
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.extraction.models import InvoiceData
from adinvoice.logging.logger import Log


@dataclass(frozen=True)
class FileStatus:
    file_name: str
    status: InvoiceStatus
    platform: Platform
    extracted_data: InvoiceData | None
    error_message: str | None


@dataclass(frozen=True)
class DeleteResult:
    file_name: str
    deleted: bool
    error: str | None = None


class InvoiceFilesService:
    """Operations on already ingested invoices, addressed by file name."""

    def __init__(self, repository: BaseInvoiceRepository) -> None:
        self._repository = repository

    def status(self, file_name: str) -> FileStatus:
        """Raises RecordNotFoundError for unknown file names."""
        record = self._get(file_name)
        return FileStatus(
            file_name=record.file_name,
            status=record.status,
            platform=record.platform,
            extracted_data=record.extracted_data,
            error_message=record.error_message,
        )

    def delete(self, file_name: str) -> None:
        """Remove the stored PDF (best effort) and then the record.

        Raises:
            RecordNotFoundError: if no invoice has this file name.
        """
        record = self._get(file_name)
        if record.file_path:
            try:
                Path(record.file_path).unlink(missing_ok=True)
            except OSError as exc:
                Log.error(f"Error deleting file {record.file_path}: {exc}")
        if record.id is not None:
            self._repository.delete(record.id)
        Log.info(f"Deleted invoice {record.id} ({file_name})")

    def bulk_delete(self, file_names: list[str]) -> list[DeleteResult]:
        results: list[DeleteResult] = []
        for file_name in file_names:
            try:
                self.delete(file_name)
            except Exception as exc:
                Log.warning(f"Could not delete {file_name}: {exc}")
                results.append(DeleteResult(file_name=file_name, deleted=False, error=str(exc)))
            else:
                results.append(DeleteResult(file_name=file_name, deleted=True))
        return results

    def export_platform_archive(self, platform: str | Platform, destination: Path) -> int:
        """Write every stored PDF of a platform into a ZIP file.

        Returns the number of PDFs written. Files missing on disk are skipped.

        Raises:
            ValueError: if platform is not a known platform.
            RecordNotFoundError: if no invoice of the platform exists.
        """
        try:
            platform = Platform(platform)
        except ValueError:
            raise ValueError(
                f"Invalid platform '{platform}'. Choose from: {[p.value for p in Platform]}"
            ) from None

        records = self._repository.find_by_platform(platform)
        if not records:
            raise RecordNotFoundError(f"No invoices found for platform {platform.value}")

        destination.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        used_names: set[str] = set()
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for record in records:
                source = Path(record.file_path) if record.file_path else None
                if source is None or not source.is_file():
                    Log.warning(f"File not found for invoice {record.id}: {record.file_path}")
                    continue
                arcname = record.file_name
                if arcname in used_names:
                    arcname = f"{record.id}-{record.file_name}"
                used_names.add(arcname)
                archive.write(source, arcname=arcname)
                written += 1
        Log.info(f"Exported {written} {platform.value} invoices to {destination}")
        return written

    def _get(self, file_name: str) -> InvoiceRecord:
        record = self._repository.find_by_name(file_name)
        if record is None:
            raise RecordNotFoundError(f"Invoice {file_name} not found")
        return record
