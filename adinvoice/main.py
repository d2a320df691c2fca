import argparse
import sys
from pathlib import Path

from adinvoice.config.settings import Settings
from adinvoice.database.connection import apply_schema, close_pool, init_pool
from adinvoice.files.storage import FileStore
from adinvoice.ingestion.coordinator import build_coordinator
from adinvoice.ingestion.exceptions import BatchValidationError
from adinvoice.ingestion.models import BatchSummary, UploadItem
from adinvoice.logging.logger import Log


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="adinvoice",
        description="Ingest advertising platform PDF invoices and ZIP archives of them.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="PDF or ZIP files to ingest")
    return parser.parse_args(argv)


def stage_paths(paths: list[Path], file_store: FileStore) -> list[UploadItem]:
    """Copy local files into temporary storage as upload items.

    Raises:
        OSError: if a file cannot be read; copies made so far are discarded.
    """
    items: list[UploadItem] = []
    try:
        for path in paths:
            items.append(UploadItem(file_name=path.name, path=file_store.stage_file(path)))
    except OSError:
        for item in items:
            file_store.discard(item.path)
        raise
    return items


def main(argv: list[str] | None = None) -> int:
    """Entry point: ingest the PDF and ZIP files given on the command line.

    Exit codes: 0 all items ingested or duplicate, 1 some item failed,
    2 bad usage or a batch that could not be started.
    """
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = Settings()
    Log.configure(settings.log_level)
    if not args.files:
        Log.error("Usage: adinvoice FILE [FILE ...]")
        return 2

    use_postgres = settings.storage_backend.lower() == "postgres"
    if use_postgres:
        init_pool(settings)
        apply_schema()

    try:
        coordinator = build_coordinator(settings)
        file_store = FileStore(temp_dir=settings.temp_dir, uploads_dir=settings.uploads_dir)
        try:
            summary = coordinator.run(stage_paths(args.files, file_store))
        except (BatchValidationError, OSError) as exc:
            Log.error(f"Upload not started: {exc}")
            return 2
        finally:
            coordinator.close()
    finally:
        if use_postgres:
            close_pool()

    _log_summary(summary)
    return 1 if summary.failed else 0


def _log_summary(summary: BatchSummary) -> None:
    Log.info(
        f"Upload {summary.run_id} {summary.status.value}: {summary.total_files} files, "
        f"{summary.successful} successful, {summary.failed} failed, "
        f"{summary.duplicates} duplicates"
    )
    for result in summary.results:
        detail = result.error or result.reason or result.stored_path or ""
        Log.info(f"  {result.file_name}: {result.status.value} {detail}".rstrip())


if __name__ == "__main__":
    sys.exit(main())
