from __future__ import annotations

from typing import Any

from render.in_memory import InMemoryMapRenderer, StyleLayer
from render.viewport import BBox


def hex_to_rgba(color: str, opacity: float) -> str:
    c = (color or "").strip().lstrip("#")
    if len(c) == 3:
        c = "".join(ch * 2 for ch in c)
    try:
        r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    except ValueError:
        r, g, b = 0, 0, 0
    a = max(0.0, min(1.0, float(opacity)))
    return f"rgba({r}, {g}, {b}, {a:.3f})"


def trace_fill_layer(layer: StyleLayer) -> dict[str, Any]:
    lons: list[float | None] = []
    lats: list[float | None] = []
    for f in layer.features:
        if not f.rings:
            continue
        ring = f.rings[0]
        if not ring:
            continue
        if ring[0] != ring[-1]:
            ring = [*ring, ring[0]]
        for lon, lat in ring:
            lons.append(lon)
            lats.append(lat)
        lons.append(None)
        lats.append(None)

    fill = hex_to_rgba(layer.fill_color or "#000000", layer.fill_opacity or 0.0)
    return {
        "type": "scattermapbox",
        "name": layer.id,
        "lon": lons,
        "lat": lats,
        "mode": "lines",
        "fill": "toself",
        "fillcolor": fill,
        "line": {"color": "rgba(0, 0, 0, 0)", "width": 0},
        "text": layer.id,
        "hoverinfo": "text",
        "showlegend": False,
    }


def build_map_figure(
    renderer: InMemoryMapRenderer,
    *,
    map_style: str,
    bounds: BBox,
    zoom: float = 0.6,
    highlighted: str | None = None,
) -> dict[str, Any]:
    """
    Plotly-structured figure for the current style state of `renderer`.

    Fill layers are emitted in render order so layers inserted below the boundary
    reference stay under it.
    """
    traces: list[dict[str, Any]] = []
    for layer in renderer.snapshot():
        if layer.kind != "fill":
            continue
        traces.append(trace_fill_layer(layer))

    meta: dict[str, Any] = {
        "layerOrder": renderer.layer_ids(),
        "stats": renderer.stats(),
    }
    if highlighted:
        meta["highlight"] = {"region": highlighted}

    return {
        "data": traces,
        "layout": {
            "mapbox": {
                "center": bounds.center(),
                "zoom": float(zoom),
                "style": map_style,
            },
            "showlegend": False,
            "dragmode": False,
            "margin": {"l": 0, "r": 0, "t": 0, "b": 0},
            "meta": meta,
        },
    }
