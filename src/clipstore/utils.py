import contextlib
import os
import struct
import tempfile
from pathlib import Path

OWNER_READ_WRITE = 0o600
OWNER_ONLY_DIR = 0o700


def truncate_entry(text: str, max_len: int, marker: str) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + marker


def atomic_write(path: Path, data: bytes, mode: int = OWNER_READ_WRITE) -> None:
    """Write ``data`` to ``path`` so readers see either the old or the new file.

    The bytes go to a temporary file in the same directory, which is synced and
    then renamed over ``path``. Raises ``OSError``; the temporary file is removed
    on failure.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def get_image_dimensions(png_bytes: bytes) -> tuple[int, int]:
    if len(png_bytes) < 24 or png_bytes[:8] != b"\x89PNG\r\n\x1a\n":
        return (0, 0)
    width = struct.unpack(">I", png_bytes[16:20])[0]
    height = struct.unpack(">I", png_bytes[20:24])[0]
    return (width, height)
