from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

Ring = list[tuple[float, float]]


@dataclass(frozen=True)
class PolygonFeature:
    id: str
    rings: list[Ring]  # [outer_ring, *holes]; each ring is [(lon, lat), ...]
    props: dict[str, Any]


@dataclass
class VectorSource:
    """
    A vector source with named source layers, e.g. `countries` -> {"countries": [...]}.
    """

    id: str
    layers: dict[str, list[PolygonFeature]] = field(default_factory=dict)

    def features(self, source_layer_id: str) -> list[PolygonFeature]:
        return self.layers.get(source_layer_id) or []


def load_geojson_polygons(path: Path) -> list[PolygonFeature]:
    return parse_geojson_polygons(json.loads(path.read_text(encoding="utf-8")))


def parse_geojson_polygons(data: dict[str, Any]) -> list[PolygonFeature]:
    """
    Region shapes from a GeoJSON FeatureCollection.

    A MultiPolygon region (e.g. a state with islands) yields one feature per part,
    ids suffixed `-0`, `-1`, ...; every part carries the region's properties, so a
    fill layer filtering on the name attribute picks up all of them.
    """
    out: list[PolygonFeature] = []
    for i, feature in enumerate((data or {}).get("features") or []):
        feature = feature or {}
        props = feature.get("properties") or {}
        fid = str(feature.get("id") or props.get("id") or f"region-{i}")

        parts = list(_polygon_parts(feature.get("geometry") or {}))
        if len(parts) == 1 and (feature.get("geometry") or {}).get("type") == "Polygon":
            out.append(PolygonFeature(id=fid, rings=parts[0], props=props))
            continue
        out.extend(
            PolygonFeature(id=f"{fid}-{j}", rings=rings, props=props)
            for j, rings in enumerate(parts)
        )
    return out


def _polygon_parts(geometry: dict[str, Any]) -> Iterator[list[Ring]]:
    coords = geometry.get("coordinates") or []
    gtype = geometry.get("type")
    if gtype == "Polygon":
        polys = [coords]
    elif gtype == "MultiPolygon":
        polys = coords
    else:
        return
    for poly in polys:
        rings = [_ring(r) for r in poly or []]
        rings = [r for r in rings if r]
        if rings:
            yield rings


def _ring(raw: Any) -> Ring:
    return [(float(p[0]), float(p[1])) for p in raw or [] if p and len(p) >= 2]
