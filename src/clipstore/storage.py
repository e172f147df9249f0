import json
import logging
import math
import os
import shutil
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from clipstore.blobs import BlobStore
from clipstore.config import BACKUP_SUFFIX, DEFAULT_CONFIG
from clipstore.models import (
    ErrorKind,
    Generation,
    LoadResult,
    Record,
    Result,
    classify_os_error,
    image_path_of,
)
from clipstore.retention import enforce_max_items, expire_by_age
from clipstore.utils import OWNER_READ_WRITE, atomic_write

logger = logging.getLogger(__name__)


def _reject_constant(token: str) -> float:
    raise ValueError(f"non-standard JSON constant {token}")


def _finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {token}")
    return value


class VersionedJsonFile:
    """A JSON array file kept in two generations: current and previous.

    Every write copies the current file over the previous one before the new
    content is atomically renamed into place. Reads fall back to the previous
    generation when the current one cannot be parsed.
    """

    def __init__(self, path: str | Path, backup_suffix: str = BACKUP_SUFFIX):
        self._path = Path(path)
        self._backup_path = Path(str(self._path) + backup_suffix)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    def read(self) -> LoadResult:
        if not self._path.exists():
            return LoadResult(source=Generation.NONE, error=ErrorKind.NOT_FOUND)

        items, error = self._read_array(self._path)
        if error is None:
            return LoadResult(records=items, source=Generation.CURRENT)

        logger.warning("Store %s unusable (%s), trying backup %s", self._path, error.value, self._backup_path)
        backup_items, backup_error = self._read_array(self._backup_path)
        if backup_error is None:
            logger.info("Recovered %d records from %s", len(backup_items), self._backup_path)
            return LoadResult(records=backup_items, source=Generation.PREVIOUS, error=error)

        logger.error("Store %s and its backup are unusable, starting empty", self._path)
        return LoadResult(source=Generation.NONE, error=error)

    def write(self, items: Sequence[Record]) -> Result:
        try:
            data = json.dumps(list(items), indent=2, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            logger.error("Failed to serialize %s: %s", self._path, exc)
            return Result.failure(ErrorKind.SERIALIZATION, str(exc))

        self._rotate()

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self._path, data, mode=OWNER_READ_WRITE)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self._path, exc)
            return Result.failure(classify_os_error(exc), str(exc))
        return Result.success(len(items))

    def _rotate(self) -> None:
        if not self._path.exists():
            return
        try:
            shutil.copyfile(self._path, self._backup_path)
            os.chmod(self._backup_path, OWNER_READ_WRITE)
        except OSError as exc:
            logger.warning("Failed to back up %s: %s", self._path, exc)

    @staticmethod
    def _read_array(path: Path) -> tuple[list[Record], ErrorKind | None]:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            return [], classify_os_error(exc)

        try:
            parsed = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant, parse_float=_finite_float)
        except ValueError:
            return [], ErrorKind.CORRUPT

        if not isinstance(parsed, list):
            return [], ErrorKind.CORRUPT

        records = [item for item in parsed if isinstance(item, dict)]
        if len(records) != len(parsed):
            logger.warning("Dropped %d non-object entries from %s", len(parsed) - len(records), path)
        return records, None


class RecordStore:
    """Ordered records (newest first) persisted in one JSON array file.

    ``blobs`` is where image payloads of removed records are deleted; a store
    built without one never deletes files. ``blob_in_use`` lets a sibling store
    veto deletion of a blob it still references.
    """

    def __init__(
        self,
        path: str | Path,
        max_items: int = DEFAULT_CONFIG.max_history_items,
        max_age_days: int = DEFAULT_CONFIG.max_age_days,
        blobs: BlobStore | None = None,
        blob_in_use: Callable[[str], bool] | None = None,
    ):
        self._file = VersionedJsonFile(path)
        self.max_items = max_items
        self.max_age_days = max_age_days
        self._blobs = blobs
        self.blob_in_use = blob_in_use

    @property
    def path(self) -> Path:
        return self._file.path

    @property
    def backup_path(self) -> Path:
        return self._file.backup_path

    def load(self) -> list[Record]:
        return self._file.read().records

    def load_result(self) -> LoadResult:
        return self._file.read()

    def save(self, records: Sequence[Record]) -> Result:
        return self._commit(records, dropped=())

    def cleanup_expired(self, now: float | None = None) -> int:
        records = self.load()
        if not records:
            return 0

        kept, expired = expire_by_age(records, self.max_age_days, now)
        if not expired:
            return 0

        if not self._commit(kept, dropped=expired):
            return 0
        return len(expired)

    def add(self, record: Record) -> Result:
        record_id = record.get("id")
        others = [r for r in self.load() if record_id is None or r.get("id") != record_id]
        return self._commit([record, *others], dropped=())

    def get(self, record_id: str) -> Record | None:
        for record in self.load():
            if record.get("id") == record_id:
                return record
        return None

    def search(self, query: str, limit: int | None = None) -> list[Record]:
        """Records whose ``content`` or ``label`` contains ``query``, ignoring case."""
        needle = query.strip().casefold()
        if not needle:
            return []
        matches = [
            record
            for record in self.load()
            if any(
                isinstance(record.get(key), str) and needle in record[key].casefold()
                for key in ("content", "label")
            )
        ]
        return matches[:limit] if limit is not None else matches

    def remove(self, record_id: str) -> Result:
        records = self.load()
        kept = [r for r in records if r.get("id") != record_id]
        if len(kept) == len(records):
            return Result.failure(ErrorKind.NOT_FOUND, f"no record {record_id}")
        removed = [r for r in records if r.get("id") == record_id]
        return self._commit(kept, dropped=removed)

    def detach(self, record_id: str) -> Record | None:
        """Remove a record but keep its blob, for handing it to another store."""
        records = self.load()
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                rest = records[:index] + records[index + 1 :]
                return record if self._commit(rest, dropped=()) else None
        return None

    def move_to_front(self, record_id: str) -> Result:
        records = self.load()
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                if index == 0:
                    return Result.success(len(records))
                rest = records[:index] + records[index + 1 :]
                return self._commit([record, *rest], dropped=())
        return Result.failure(ErrorKind.NOT_FOUND, f"no record {record_id}")

    def clear(self) -> int:
        records = self.load()
        if not records:
            return 0
        if not self._commit([], dropped=records):
            return 0
        return len(records)

    def references(self, path: str) -> bool:
        return any(image_path_of(r) == path for r in self.load())

    def count(self) -> int:
        return len(self.load())

    def _commit(self, records: Sequence[Record], dropped: Iterable[Record]) -> Result:
        kept, evicted = enforce_max_items(records, self.max_items)
        result = self._file.write(kept)
        if result:
            self._release_blobs([*dropped, *evicted], kept)
        return result

    def _release_blobs(self, dropped: Sequence[Record], kept: Sequence[Record]) -> None:
        if self._blobs is None:
            return
        live = {image_path_of(r) for r in kept}
        for record in dropped:
            path = image_path_of(record)
            if path is None or path in live:
                continue
            if self.blob_in_use is not None and self.blob_in_use(path):
                continue
            self._blobs.delete(path)
