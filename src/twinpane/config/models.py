from dataclasses import dataclass, fields
from typing import Any, Dict


@dataclass
class SFTPConfig:
    host: str = ""
    port: int = 22
    username: str = ""
    password: str = ""  # never persisted
    key_path: str = ""
    dry_run: bool = False  # mock backend


@dataclass
class AppConfig:
    language: str = "en"
    drag_threshold_px: float = 5.0
    frame_interval_s: float = 1 / 60
    progress_tick_s: float = 0.1
    progress_duration_s: float = 3.0
    progress_ceiling: float = 95.0
    current_transfer_grace_s: float = 1.0
    toast_ttl_s: float = 3.0
    inter_item_delay_s: float = 0.1
    upload_verify_delay_s: float = 0.5
    page_size: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AppConfig":
        """Build from a loosely-typed dict; unknown keys and bad values are ignored."""
        cfg = cls()
        if not isinstance(raw, dict):
            return cfg
        for f in fields(cls):
            if f.name not in raw:
                continue
            default = getattr(cfg, f.name)
            try:
                setattr(cfg, f.name, type(default)(raw[f.name]))
            except (TypeError, ValueError):
                pass
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
