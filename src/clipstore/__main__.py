import argparse
import logging
import sys
from dataclasses import asdict

from clipstore.config import CONFIG_PATH, DATA_DIR, LOG_PATH, load_config
from clipstore.history import ClipboardHistory


def setup_logging(verbose: bool = False) -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )


def show_status(history: ClipboardHistory) -> int:
    """Print where the stores live and how full they are."""
    for name, store, limit in (
        ("history", history.history, history.config.max_history_items),
        ("pins", history.pins, history.config.max_pins),
    ):
        loaded = store.load_result()
        line = f"{name}: {len(loaded.records)}/{limit} records ({store.path})"
        if loaded.recovered:
            line += " [recovered from backup]"
        print(line)
    print(f"images: {history.blobs.directory}")
    return 0


def run_cleanup(history: ClipboardHistory) -> int:
    history_removed, pins_removed = history.run_cleanup()
    print(f"Removed {history_removed} history and {pins_removed} pinned records "
          f"older than {history.config.max_age_days} days.")
    return 0


def show_config(history: ClipboardHistory) -> int:
    print(f"# {CONFIG_PATH}")
    for key, value in asdict(history.config).items():
        print(f"{key}={value}")
    return 0


COMMANDS = {
    "status": show_status,
    "cleanup": run_cleanup,
    "config": show_config,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="clipstore - clipboard history record store maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  status    Show record counts for history and pins (default)
  cleanup   Remove records older than max_age_days
  config    Print the effective configuration
""",
    )
    parser.add_argument("command", nargs="?", choices=sorted(COMMANDS), default="status", help="Command to run")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    history = ClipboardHistory(load_config())
    return COMMANDS[args.command](history)


if __name__ == "__main__":
    sys.exit(main())
