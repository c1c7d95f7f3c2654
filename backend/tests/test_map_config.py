from __future__ import annotations

import pytest
from pydantic import ValidationError

from settings.loader import clear_config_cache, get_map_config, load_map_config
from settings.types import MapConfig, Palette


def test_repo_config_loads():
    clear_config_cache()
    cfg = get_map_config()
    assert cfg.sources.state.filterAttribute == "gn_name"
    assert cfg.sources.country.filterAttribute == "name"
    assert cfg.boundaryReferenceLayer in cfg.baseLayers


def test_env_overrides_feed_settings(monkeypatch):
    monkeypatch.setenv("VISITMAP_FEED_URL", "http://localhost:9999/visited.json")
    monkeypatch.setenv("VISITMAP_FEED_TIMEOUT_S", "2.5")
    clear_config_cache()
    try:
        cfg = get_map_config()
        assert cfg.feed.url == "http://localhost:9999/visited.json"
        assert cfg.feed.timeoutS == 2.5
    finally:
        clear_config_cache()


def test_missing_file_falls_back_to_defaults(tmp_path):
    cfg = load_map_config(tmp_path / "nope.yaml")
    assert cfg == MapConfig()


def test_reference_must_be_a_base_layer(tmp_path):
    p = tmp_path / "map.yaml"
    p.write_text("baseLayers: [background]\nboundaryReferenceLayer: admin\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_map_config(p)


def test_palette_rejects_non_hex_colors():
    with pytest.raises(ValidationError):
        Palette(country="orange")
    assert Palette(highlight="#FF0000").highlight == "#ff0000"
