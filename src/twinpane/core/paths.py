from __future__ import annotations

import os
from pathlib import Path


def app_data_dir() -> Path:
    """Per-user app data directory used for logs and config.

    ``TWINPANE_HOME`` overrides the location (used by tests and portable installs).
    """
    override = os.environ.get("TWINPANE_HOME", "").strip()
    base = Path(override) if override else Path.home() / ".twinpane"
    base.mkdir(parents=True, exist_ok=True)
    return base


def documents_dir() -> Path | None:
    """Best-effort Documents folder, None when the platform has none."""
    d = Path.home() / "Documents"
    return d if d.is_dir() else None
