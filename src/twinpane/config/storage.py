from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from twinpane.config.models import AppConfig, SFTPConfig
from twinpane.core.logging import get_logger
from twinpane.core.paths import app_data_dir, documents_dir

RECENT_LIMIT = 10

_log = get_logger("twinpane.config")


def _config_path() -> Path:
    return app_data_dir() / "config.json"


def load_config() -> Dict[str, Any]:
    p = _config_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except Exception:
        # corrupted config; keep a backup and start fresh
        _log.warning("config.json is unreadable, moving it aside")
        try:
            p.rename(p.with_suffix(".json.bak"))
        except OSError:
            pass
        return {}


def save_config(cfg: Dict[str, Any]) -> None:
    p = _config_path()
    p.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")


def load_app_config() -> AppConfig:
    return AppConfig.from_dict(load_config().get("app", {}))


def save_app_config(app: AppConfig) -> None:
    cfg = load_config()
    cfg["app"] = app.to_dict()
    save_config(cfg)


def save_last_local_path(path: str) -> None:
    cfg = load_config()
    cfg["last_local_path"] = path
    save_config(cfg)


def initial_local_path() -> str:
    """Last visited local folder if it still exists, else Documents, else home."""
    saved = load_config().get("last_local_path")
    if isinstance(saved, str) and saved.strip() and Path(saved.strip()).exists():
        return saved.strip()
    docs = documents_dir()
    if docs is not None:
        return str(docs)
    try:
        return str(Path.home())
    except RuntimeError:
        return "/"


def load_recent_folders() -> List[str]:
    recents = load_config().get("recent_folders", [])
    if not isinstance(recents, list):
        return []
    return [p for p in recents if isinstance(p, str) and p]


def add_recent_folder(path: str) -> List[str]:
    """Move ``path`` to the front of the recent list and persist it."""
    cfg = load_config()
    recents = [p for p in load_recent_folders() if p != path]
    recents.insert(0, path)
    cfg["recent_folders"] = recents[:RECENT_LIMIT]
    save_config(cfg)
    return cfg["recent_folders"]


def load_connection() -> Optional[SFTPConfig]:
    raw = load_config().get("connection")
    if not isinstance(raw, dict) or not str(raw.get("host", "")).strip():
        return None
    try:
        port = int(raw.get("port", 22))
    except (TypeError, ValueError):
        port = 22
    return SFTPConfig(
        host=str(raw.get("host", "")).strip(),
        port=port,
        username=str(raw.get("username", "")),
        key_path=str(raw.get("key_path", "")),
    )


def save_connection(conn: SFTPConfig) -> None:
    """Persist connection details. The password is deliberately left out."""
    if not conn.host.strip():
        raise ValueError("host is required")
    cfg = load_config()
    cfg["connection"] = {
        "host": conn.host.strip(),
        "port": int(conn.port),
        "username": conn.username,
        "key_path": conn.key_path,
    }
    save_config(cfg)
