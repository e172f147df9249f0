import logging
from pathlib import Path

from clipstore.blobs import BlobStore
from clipstore.config import DEFAULT_CONFIG, HISTORY_PATH, PINS_PATH, TRUNCATION_MARKER, Config
from clipstore.models import ContentType, Record, new_image_record, new_text_record
from clipstore.retention import CleanupSchedule
from clipstore.storage import RecordStore
from clipstore.utils import get_image_dimensions, truncate_entry

logger = logging.getLogger(__name__)


class ClipboardHistory:
    """History and pins stores sharing one blob directory.

    Producers (the daemon, the CLI) go through this class so that records
    moving between the two stores never lose or orphan their image files.
    """

    def __init__(
        self,
        config: Config = DEFAULT_CONFIG,
        history_path: str | Path | None = None,
        pins_path: str | Path | None = None,
        image_dir: str | Path | None = None,
    ):
        self.config = config
        self.blobs = BlobStore(image_dir)
        self.history = RecordStore(
            history_path or HISTORY_PATH,
            max_items=config.max_history_items,
            max_age_days=config.max_age_days,
            blobs=self.blobs,
        )
        self.pins = RecordStore(
            pins_path or PINS_PATH,
            max_items=config.max_pins,
            max_age_days=config.max_age_days,
            blobs=self.blobs,
        )
        self.history.blob_in_use = self.pins.references
        self.pins.blob_in_use = self.history.references

    def add_text(self, text: str | None) -> Record | None:
        if not text:
            return None

        text = truncate_entry(text, self.config.max_entry_length, TRUNCATION_MARKER)
        recent = self.history.load()
        if recent and recent[0].get("type") == ContentType.TEXT.value and recent[0].get("content") == text:
            return None

        record = new_text_record(text)
        return record if self.history.add(record) else None

    def add_image(self, data: bytes | None) -> Record | None:
        saved = self.blobs.save(data)
        if not saved:
            return None

        extra = {"byteSize": len(data)}
        width, height = get_image_dimensions(data)
        if width > 0:
            extra.update(width=width, height=height)

        record = new_image_record(saved.value, **extra)
        if not self.history.add(record):
            self.blobs.delete(saved.value)
            return None
        return record

    def pin(self, record_id: str, label: str | None = None) -> Record | None:
        record = self.history.get(record_id)
        from_history = record is not None
        if record is None:
            record = self.pins.get(record_id)
            if record is None:
                return None

        pinned = {**record, "pinned": True}
        if label:
            pinned["label"] = label
        if not self.pins.add(pinned):
            return None

        if from_history:
            self.history.detach(record_id)
        return pinned

    def unpin(self, record_id: str) -> Record | None:
        record = self.pins.get(record_id)
        if record is None:
            return None

        restored = {k: v for k, v in record.items() if k != "pinned"}
        if not self.history.add(restored):
            return None
        self.pins.detach(record_id)
        return restored

    def delete(self, record_id: str) -> bool:
        removed = [bool(store.remove(record_id)) for store in (self.history, self.pins)]
        return any(removed)

    def search(self, query: str) -> list[Record]:
        """Pinned matches first, then history matches, each newest first."""
        return self.pins.search(query) + self.history.search(query)

    def clear_history(self) -> int:
        return self.history.clear()

    def run_cleanup(self, now: float | None = None) -> tuple[int, int]:
        history_removed = self.history.cleanup_expired(now)
        pins_removed = self.pins.cleanup_expired(now)
        if history_removed or pins_removed:
            logger.info(
                "Cleanup - removed %d history, %d pins (older than %d days)",
                history_removed,
                pins_removed,
                self.config.max_age_days,
            )
        return history_removed, pins_removed

    def cleanup_schedule(self, last_run: float | None = None) -> CleanupSchedule:
        return CleanupSchedule(self.config.cleanup_interval_sec, last_run=last_run)
