from pathlib import Path, PurePath

from app.database.models import JobRecord
from app.preprocessing.models import SourceFile
from app.processor.exceptions import FileReadError


def petition_file_path(files_root: Path, owner_id: str, campaign_id: str, filename: str) -> Path:
    """Build path to an uploaded petition: {files_root}/{owner_id}/{campaign_id}/{filename}"""
    return files_root / owner_id / campaign_id / filename


class FileLoader:
    """Resolves the uploaded files of a job and reads their bytes."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def load(self, job: JobRecord) -> list[SourceFile]:
        """Read every file of the job, in job order.

        Raises:
            FileReadError: if a file name is not a plain name, or a file is
                missing or unreadable.
        """
        return [self._load_one(job, filename) for filename in job.filenames]

    def _load_one(self, job: JobRecord, filename: str) -> SourceFile:
        if not filename or PurePath(filename).name != filename:
            raise FileReadError(f"Invalid petition file name: {filename!r}")
        path = petition_file_path(self._files_root, job.owner_id, job.campaign_id, filename)
        try:
            return SourceFile(filename=filename, content=path.read_bytes())
        except OSError as exc:
            raise FileReadError(f"Cannot read {path}: {exc}") from exc
