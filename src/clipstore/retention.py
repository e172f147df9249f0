"""Count and age bounds for record sequences.

Everything here is pure: functions take the ordered records (newest first)
and return new lists, leaving deletion of files to the caller.
"""

import time
from collections.abc import Sequence

from clipstore.config import SECONDS_PER_DAY
from clipstore.models import Record


def enforce_max_items(records: Sequence[Record], max_items: int) -> tuple[list[Record], list[Record]]:
    """Split ``records`` into the newest ``max_items`` and the evicted tail."""
    limit = max(max_items, 0)
    return list(records[:limit]), list(records[limit:])


def _timestamp_of(record: Record) -> float | None:
    value = record.get("timestamp")
    # bool is an int subclass; true/false is not a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def is_expired(record: Record, max_age_seconds: float, now: float) -> bool:
    timestamp = _timestamp_of(record)
    if timestamp is None:
        return False
    return now - timestamp > max_age_seconds


def expire_by_age(
    records: Sequence[Record], max_age_days: int, now: float | None = None
) -> tuple[list[Record], list[Record]]:
    current = time.time() if now is None else now
    max_age = max_age_days * SECONDS_PER_DAY
    kept: list[Record] = []
    expired: list[Record] = []
    for record in records:
        (expired if is_expired(record, max_age, current) else kept).append(record)
    return kept, expired


class CleanupSchedule:
    def __init__(self, interval_sec: int, last_run: float | None = None):
        self._interval = interval_sec
        self._last_run = time.time() if last_run is None else last_run

    @property
    def last_run(self) -> float:
        return self._last_run

    def due(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current - self._last_run >= self._interval

    def mark(self, now: float | None = None) -> None:
        self._last_run = time.time() if now is None else now
