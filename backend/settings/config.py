from __future__ import annotations

import os
from pathlib import Path


def repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def map_config_path() -> Path:
    return Path(
        os.getenv("VISITMAP_CONFIG_PATH") or (repo_root() / "config" / "map.yaml")
    )


def feed_url_override() -> str | None:
    v = (os.getenv("VISITMAP_FEED_URL") or "").strip()
    return v or None


def feed_timeout_override_s() -> float | None:
    raw = (os.getenv("VISITMAP_FEED_TIMEOUT_S") or "").strip()
    if not raw:
        return None
    try:
        v = float(raw)
    except ValueError:
        return None
    return v if v > 0 else None


def log_level() -> str:
    return (os.getenv("VISITMAP_LOG_LEVEL") or "INFO").strip().upper()


def autostart_feed() -> bool:
    v = (os.getenv("VISITMAP_AUTOSTART_FEED") or "1").strip().lower()
    return v not in {"0", "false", "no", "off"}
