import logging
import os
import uuid
from pathlib import Path

from clipstore.config import BLOB_EXTENSION, IMAGE_DIR
from clipstore.models import ErrorKind, Result, classify_os_error
from clipstore.utils import OWNER_ONLY_DIR, OWNER_READ_WRITE, atomic_write

logger = logging.getLogger(__name__)


class BlobStore:
    """Image payloads kept as one file per blob, outside the JSON stores."""

    def __init__(self, directory: str | Path | None = None):
        self._directory = Path(directory) if directory else IMAGE_DIR

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure_directory(self) -> Result:
        missing = [p for p in (self._directory, *self._directory.parents) if not p.exists()]
        try:
            # outermost first, so every directory created here is owner-only
            for directory in reversed(missing):
                directory.mkdir(mode=OWNER_ONLY_DIR, exist_ok=True)
                os.chmod(directory, OWNER_ONLY_DIR)
            os.chmod(self._directory, OWNER_ONLY_DIR)
        except OSError as exc:
            logger.error("Failed to create blob directory %s: %s", self._directory, exc)
            return Result.failure(classify_os_error(exc), str(exc))
        return Result.success(str(self._directory))

    def save(self, data: bytes | None) -> Result:
        if not data:
            return Result.failure(ErrorKind.INVALID_INPUT, "empty blob")

        ensured = self.ensure_directory()
        if not ensured:
            return ensured

        path = self._directory / (uuid.uuid4().hex + BLOB_EXTENSION)
        try:
            atomic_write(path, bytes(data), mode=OWNER_READ_WRITE)
        except OSError as exc:
            logger.error("Failed to save blob %s: %s", path, exc)
            return Result.failure(classify_os_error(exc), str(exc))
        return Result.success(str(path))

    def delete(self, path: str | Path | None) -> Result:
        if not path:
            return Result.failure(ErrorKind.INVALID_INPUT, "no path")

        target = Path(path)
        if target.suffix != BLOB_EXTENSION:
            logger.warning("Refusing to delete %s, not a %s blob", target, BLOB_EXTENSION)
            return Result.failure(ErrorKind.INVALID_INPUT, "not a blob file")

        try:
            target.unlink()
        except OSError as exc:
            logger.warning("Failed to delete blob %s: %s", target, exc)
            return Result.failure(classify_os_error(exc), str(exc))
        return Result.success(str(target))

    def exists(self, path: str | Path | None) -> bool:
        return bool(path) and Path(path).is_file()
