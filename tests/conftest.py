import time

import pytest

from clipstore.blobs import BlobStore
from clipstore.config import Config
from clipstore.history import ClipboardHistory
from clipstore.storage import RecordStore

DAY = 24 * 60 * 60


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(tmp_path / "data" / "images")


@pytest.fixture
def store(tmp_path, blobs):
    return RecordStore(tmp_path / ".clipboard_history", max_items=50, max_age_days=30, blobs=blobs)


@pytest.fixture
def clipboard(tmp_path):
    config = Config(max_history_items=5, max_pins=3, max_entry_length=20)
    return ClipboardHistory(
        config,
        history_path=tmp_path / ".clipboard_history",
        pins_path=tmp_path / ".clipboard_pins",
        image_dir=tmp_path / "data" / "images",
    )


@pytest.fixture
def make_record():
    """Factory fixture for plain text records, optionally aged by ``age_days``."""
    counter = iter(range(1_000_000))

    def _make_record(content: str = "hello world", age_days: float | None = 0, **extra) -> dict:
        record = {
            "id": f"rec-{next(counter)}",
            "type": "text",
            "content": content,
            **extra,
        }
        if age_days is not None:
            record["timestamp"] = time.time() - age_days * DAY
        return record

    return _make_record


PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    + b"\x00\x00\x00\rIHDR"
    + (640).to_bytes(4, "big")
    + (480).to_bytes(4, "big")
    + b"\x00" * 32
)


@pytest.fixture
def png_bytes():
    return PNG_BYTES
