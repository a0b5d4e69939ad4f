from pathlib import Path

from app.processor.exceptions import FileReadError


def archive_file_path(files_root: Path, archive_uuid: str) -> Path:
    """Build path to an uploaded archive: {files_root}/{archive_uuid}.zip"""
    return files_root / f"{archive_uuid}.zip"


class FileLoader:
    """Resolves filesystem path for an uploaded archive and reads its bytes."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def load(self, archive_uuid: str) -> bytes:
        """Read archive bytes from disk.

        Raises:
            FileNotFoundError: if the file does not exist at resolved path.
            FileReadError: if the file exists but cannot be read.
        """
        path = archive_file_path(self._files_root, archive_uuid)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Cannot read {path}: {exc}") from exc
