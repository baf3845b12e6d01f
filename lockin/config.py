"""
Central configuration for the LockIn companion service.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8766
    log_level: str = "INFO"

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    store_db: str = "storage.db"

    # Alarms
    alarm_poll_interval_ms: int = 500        # how often due alarms are checked

    # Extension pages
    extension_base_url: str = "chrome-extension://lockin"
    extension_scheme: str = "chrome-extension"
    lock_page: str = "html/locked.html"
    alert_page: str = "html/alert.html"
    alert_width: int = 400
    alert_height: int = 200

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_db

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (LOCKIN_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"LOCKIN_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, type(getattr(cfg, k))(os.environ[env_key]))
        cfg.__post_init__()
        return cfg


# Module-level singleton
config = Config.load()
