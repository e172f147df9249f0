import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

HOME_DIR = Path(os.environ.get("CLIPSTORE_HOME", Path.home()))
HISTORY_PATH = HOME_DIR / ".clipboard_history"
PINS_PATH = HOME_DIR / ".clipboard_pins"
CONFIG_PATH = HOME_DIR / ".clipstore.conf"
DATA_DIR = HOME_DIR / ".clipstore_data"
IMAGE_DIR = DATA_DIR / "images"
LOG_PATH = DATA_DIR / "clipstore.log"

BACKUP_SUFFIX = ".backup"
BLOB_EXTENSION = ".png"
TRUNCATION_MARKER = "... [truncated]"
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Config:
    poll_interval_ms: int = 500
    max_history_items: int = 50
    max_pins: int = 50
    max_entry_length: int = 10_000
    max_age_days: int = 30
    cleanup_interval_sec: int = 3600  # seconds between age cleanups

    @property
    def max_age_seconds(self) -> float:
        return self.max_age_days * SECONDS_PER_DAY


DEFAULT_CONFIG = Config()
CONFIG_KEYS = frozenset(f.name for f in fields(Config))


def _parse_positive_int(raw: str) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def parse_config(text: str, base: Config = DEFAULT_CONFIG) -> Config:
    """Apply ``key=value`` overrides from ``text`` on top of ``base``.

    Blank lines and ``#`` comments are skipped. Lines that do not split into
    exactly one key and one value, unknown keys, and values that are not
    positive integers leave the corresponding setting untouched.
    """
    overrides: dict[str, int] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        parts = stripped.split("=")
        if len(parts) != 2:
            logger.debug("Ignoring malformed config line: %r", stripped)
            continue

        key, raw = parts[0].strip(), parts[1].strip()
        if key not in CONFIG_KEYS:
            logger.debug("Ignoring unknown config key: %s", key)
            continue

        value = _parse_positive_int(raw)
        if value is None:
            logger.debug("Ignoring invalid value for %s: %r", key, raw)
            continue
        overrides[key] = value

    return replace(base, **overrides)


def load_config(path: str | Path | None = None) -> Config:
    config_path = Path(path) if path else CONFIG_PATH
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return DEFAULT_CONFIG
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read config %s, using defaults: %s", config_path, exc)
        return DEFAULT_CONFIG
    return parse_config(text)
