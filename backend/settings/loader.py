from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml

from settings.config import (
    feed_timeout_override_s,
    feed_url_override,
    map_config_path,
    repo_root,
)
from settings.types import MapConfig


def _load_yaml(path: Path) -> dict:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid map config yaml root: {path}")
    return data


def load_map_config(path: Path) -> MapConfig:
    data = _load_yaml(path) if path.exists() else {}
    cfg = MapConfig.model_validate(data)
    if cfg.boundaryReferenceLayer and cfg.boundaryReferenceLayer not in cfg.baseLayers:
        raise ValueError(
            f"boundaryReferenceLayer `{cfg.boundaryReferenceLayer}` is not one of baseLayers: {path}"
        )
    return cfg


@lru_cache(maxsize=1)
def get_map_config() -> MapConfig:
    cfg = load_map_config(map_config_path())

    # Environment wins over YAML for deploy-time knobs.
    url = feed_url_override()
    timeout_s = feed_timeout_override_s()
    if url or timeout_s:
        feed = cfg.feed.model_copy(
            update={
                **({"url": url} if url else {}),
                **({"timeoutS": timeout_s} if timeout_s else {}),
            }
        )
        cfg = cfg.model_copy(update={"feed": feed})
    return cfg


def resolve_repo_path(repo_relative: str) -> Path:
    p = Path(repo_relative or "")
    if p.is_absolute() and p.exists():
        return p
    # Allow both "data/..." and "/data/..." inputs (normalize to repo-relative).
    rel = (repo_relative or "").lstrip("/")
    return repo_root() / rel


def clear_config_cache() -> None:
    """
    Clear the cached map config (env/YAML changes are otherwise not picked up until
    the process restarts).
    """
    get_map_config.cache_clear()
