import errno
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Record = dict[str, Any]


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    IO = "io"
    CORRUPT = "corrupt"
    SERIALIZATION = "serialization"
    INVALID_INPUT = "invalid_input"


class Generation(str, Enum):
    CURRENT = "current"
    PREVIOUS = "previous"
    NONE = "none"


@dataclass(frozen=True)
class Result:
    """Outcome of a store operation. Truthy when the operation happened."""

    ok: bool
    value: Any = None
    error: ErrorKind | None = None
    detail: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str | None = None) -> "Result":
        return cls(ok=False, error=error, detail=detail)


@dataclass(frozen=True)
class LoadResult:
    records: list[Record] = field(default_factory=list)
    source: Generation = Generation.NONE
    error: ErrorKind | None = None

    @property
    def recovered(self) -> bool:
        return self.source == Generation.PREVIOUS


def classify_os_error(exc: OSError) -> ErrorKind:
    if isinstance(exc, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
        return ErrorKind.PERMISSION
    return ErrorKind.IO


def new_record_id() -> str:
    return uuid.uuid4().hex


def new_text_record(content: str, **extra: Any) -> Record:
    return {
        "id": new_record_id(),
        "type": ContentType.TEXT.value,
        "content": content,
        "timestamp": time.time(),
        **extra,
    }


def new_image_record(image_path: str, **extra: Any) -> Record:
    return {
        "id": new_record_id(),
        "type": ContentType.IMAGE.value,
        "imagePath": image_path,
        "timestamp": time.time(),
        **extra,
    }


def image_path_of(record: Record) -> str | None:
    path = record.get("imagePath")
    if record.get("type") == ContentType.IMAGE.value and isinstance(path, str) and path:
        return path
    return None
