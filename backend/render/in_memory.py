from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from shapely.geometry import Point, Polygon
from shapely.strtree import STRtree

from render.sources import PolygonFeature, VectorSource
from render.types import FillLayerSpec, LayerHandle, ScreenPoint
from render.viewport import Viewport

StyleLayerKind = Literal["base", "fill"]


@dataclass
class StyleLayer:
    id: str
    kind: StyleLayerKind
    spec: FillLayerSpec | None = None
    fill_color: str | None = None
    fill_opacity: float | None = None
    features: list[PolygonFeature] = field(default_factory=list, repr=False)


@dataclass
class InMemoryMapRenderer:
    """
    Headless map renderer: an ordered style-layer stack over in-memory vector sources.

    - `stack` is bottom -> top; base cartography layers come from config.
    - Fill layers select source features by a single attribute equality filter.
    - Hit testing resolves a screen point through `viewport` and returns matching
      fill-layer ids topmost-first (one entry per matching geometry).
    """

    sources: dict[str, VectorSource]
    viewport: Viewport
    base_layer_ids: list[str] = field(default_factory=list)
    boundary_reference_id: str | None = None

    _layers: dict[str, StyleLayer] = field(default_factory=dict, repr=False)
    _stack: list[str] = field(default_factory=list, repr=False)

    _tree: STRtree | None = field(default=None, repr=False)
    _tree_owner: list[str] = field(default_factory=list, repr=False)
    _tree_dirty: bool = field(default=True, repr=False)

    def __post_init__(self) -> None:
        for lid in self.base_layer_ids:
            if lid in self._layers:
                continue
            self._layers[lid] = StyleLayer(id=lid, kind="base")
            self._stack.append(lid)

    # -- RenderAdapter -------------------------------------------------------

    def create_or_replace_fill_layer(
        self, spec: FillLayerSpec, *, below: LayerHandle | None = None
    ) -> LayerHandle:
        existing = self._layers.get(spec.layer_id)
        if existing is not None and existing.kind == "base":
            raise ValueError(f"Layer id collides with a base layer: {spec.layer_id}")
        if below is not None and below.layer_id not in self._layers:
            raise KeyError(f"Unknown reference layer: {below.layer_id}")

        source = self.sources.get(spec.source_id)
        if source is None:
            raise KeyError(f"Unknown source: {spec.source_id}")
        feats = [
            f
            for f in source.features(spec.source_layer_id)
            if str((f.props or {}).get(spec.filter_attribute) or "") == spec.filter_value
        ]

        if existing is not None:
            self._stack.remove(spec.layer_id)
        if below is not None:
            self._stack.insert(self._stack.index(below.layer_id), spec.layer_id)
        else:
            self._stack.append(spec.layer_id)

        self._layers[spec.layer_id] = StyleLayer(
            id=spec.layer_id,
            kind="fill",
            spec=spec,
            fill_color=spec.fill_color,
            fill_opacity=float(spec.fill_opacity),
            features=feats,
        )
        self._tree_dirty = True
        return LayerHandle(layer_id=spec.layer_id)

    def set_fill_color(self, handle: LayerHandle, color: str) -> None:
        self._fill_layer(handle).fill_color = color

    def set_fill_opacity(self, handle: LayerHandle, opacity: float) -> None:
        self._fill_layer(handle).fill_opacity = float(opacity)

    def hit_test(self, point: ScreenPoint, candidate_ids: Sequence[str]) -> list[str]:
        wanted = set(candidate_ids)
        if not wanted:
            return []
        tree = self._ensure_tree()
        if tree is None:
            return []

        lon, lat = self.viewport.screen_to_lonlat(point)
        idxs = _to_int_list(tree.query(Point(lon, lat), predicate="intersects"))
        hits = [self._tree_owner[i] for i in idxs if self._tree_owner[i] in wanted]

        # Topmost-rendered first; stable for parts of the same layer.
        z = {lid: i for i, lid in enumerate(self._stack)}
        return sorted(hits, key=lambda lid: -z.get(lid, -1))

    def get_boundary_reference_layer(self) -> LayerHandle | None:
        lid = self.boundary_reference_id
        if not lid or lid not in self._layers:
            return None
        return LayerHandle(layer_id=lid)

    # -- Inspection ----------------------------------------------------------

    def layer_ids(self) -> list[str]:
        return list(self._stack)

    def fill_style(self, layer_id: str) -> tuple[str | None, float | None]:
        layer = self._layers[layer_id]
        return layer.fill_color, layer.fill_opacity

    def snapshot(self) -> list[StyleLayer]:
        """
        Style layers in render order (bottom -> top).
        """
        return [self._layers[lid] for lid in self._stack]

    def stats(self) -> dict[str, Any]:
        fills = [layer for layer in self._layers.values() if layer.kind == "fill"]
        return {
            "baseLayers": len(self._layers) - len(fills),
            "fillLayers": len(fills),
            "fillFeatures": sum(len(layer.features) for layer in fills),
        }

    def _fill_layer(self, handle: LayerHandle) -> StyleLayer:
        layer = self._layers.get(handle.layer_id)
        if layer is None or layer.kind != "fill":
            raise KeyError(f"Unknown fill layer: {handle.layer_id}")
        return layer

    def _ensure_tree(self) -> STRtree | None:
        if not self._tree_dirty:
            return self._tree
        geoms: list[Polygon] = []
        owner: list[str] = []
        for lid in self._stack:
            layer = self._layers[lid]
            if layer.kind != "fill":
                continue
            for f in layer.features:
                poly = _to_polygon(f)
                if poly is None:
                    continue
                geoms.append(poly)
                owner.append(lid)
        self._tree = STRtree(geoms) if geoms else None
        self._tree_owner = owner
        self._tree_dirty = False
        return self._tree


def _to_polygon(feature: PolygonFeature) -> Polygon | None:
    if not feature.rings:
        return None
    shell = feature.rings[0]
    if len(shell) < 3:
        return None
    holes = [r for r in feature.rings[1:] if len(r) >= 3]
    return Polygon(shell, holes)


def _to_int_list(idxs: Any) -> list[int]:
    return [int(i) for i in idxs]
