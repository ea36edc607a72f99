from __future__ import annotations

import logging
from pathlib import Path

from twinpane.core.paths import app_data_dir

ROOT_LOGGER = "twinpane"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def log_path() -> Path:
    return app_data_dir() / "app.log"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger below the ``twinpane`` tree; bare area names are prefixed."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
