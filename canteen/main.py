"""Entry point for the canteen Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from canteen.canteen_app import CanteenApp
from canteen.config import DEBUG_LOG_PATH


def configure_logging(path: str = DEBUG_LOG_PATH, level: int = logging.DEBUG) -> None:
    """Send core and UI debug lines to a file so they never draw over the terminal UI."""
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    root = logging.getLogger("canteen")
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False


def main() -> None:
    configure_logging()
    CanteenApp().run()


if __name__ == "__main__":
    main()
