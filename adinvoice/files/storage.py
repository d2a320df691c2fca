import shutil
import uuid
from pathlib import Path, PurePath

from adinvoice.logging.logger import Log


def unique_file_name(original_name: str) -> str:
    """Build a collision-free file name: {random hex}-{base name}."""
    return f"{uuid.uuid4().hex[:12]}-{PurePath(original_name).name}"


class FileStore:
    """Owns the temporary staging area and the permanent uploads directory.

    Every staged or promoted file gets a random prefix, so two items of a
    batch never share a path even when their original names are equal.
    """

    def __init__(self, temp_dir: Path, uploads_dir: Path) -> None:
        self._temp_dir = temp_dir
        self._uploads_dir = uploads_dir

    @property
    def uploads_dir(self) -> Path:
        return self._uploads_dir

    def stage_bytes(self, data: bytes, original_name: str) -> Path:
        """Write uploaded bytes into temporary storage and return the path."""
        path = self._new_temp_path(original_name)
        path.write_bytes(data)
        return path

    def stage_file(self, source: Path) -> Path:
        """Copy a local file into temporary storage, leaving the source alone."""
        path = self._new_temp_path(source.name)
        shutil.copyfile(source, path)
        return path

    def promote(self, temp_path: Path, original_name: str) -> Path:
        """Move a staged file into permanent storage.

        Raises:
            OSError: if the move fails; the staged file is left in place.
        """
        self._uploads_dir.mkdir(parents=True, exist_ok=True)
        final_path = self._uploads_dir / unique_file_name(original_name)
        shutil.move(str(temp_path), final_path)
        return final_path

    def discard(self, path: Path | None) -> None:
        """Best-effort removal. Failures are logged, never raised."""
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            Log.error(f"Error cleaning up file {path}: {exc}")

    def _new_temp_path(self, original_name: str) -> Path:
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        return self._temp_dir / unique_file_name(original_name)
