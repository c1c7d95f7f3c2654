from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from regions.decay import HIGHLIGHT_OPACITY, recency_opacity
from regions.types import RegionKind, RegionPalette, RegionRecord, RegisteredLayer
from render.types import FillLayerSpec, RenderAdapter

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionSource:
    source_id: str
    source_layer_id: str
    filter_attribute: str


DEFAULT_SOURCES: dict[RegionKind, RegionSource] = {
    RegionKind.country: RegionSource("countries", "countries", "name"),
    RegionKind.state: RegionSource("states", "states", "gn_name"),
}


class LayerRegistry:
    """
    Owns the region name -> `RegisteredLayer` mapping and is the only component that
    changes a region layer's fill color/opacity.

    Mutations are guarded by a re-entrant lock; the renderer itself must still only be
    driven from one thread (see `render.dispatch.UiDispatcher`).
    """

    def __init__(
        self,
        adapter: RenderAdapter,
        *,
        palette: RegionPalette | None = None,
        sources: Mapping[RegionKind, RegionSource] | None = None,
    ):
        self._adapter = adapter
        self._palette = palette or RegionPalette()
        self._sources = dict(sources or DEFAULT_SOURCES)
        self._layers: dict[str, RegisteredLayer] = {}
        self._highlighted: str | None = None
        self._lock = threading.RLock()

    @property
    def palette(self) -> RegionPalette:
        return self._palette

    @property
    def highlighted(self) -> str | None:
        return self._highlighted

    @contextmanager
    def transaction(self) -> Iterator["LayerRegistry"]:
        with self._lock:
            yield self

    def register(self, record: RegionRecord, current_year: int) -> RegisteredLayer:
        opacity = recency_opacity(record.last_visited_year, current_year)
        color = self._palette.base_color(record.kind)
        source = self._sources[record.kind]
        spec = FillLayerSpec(
            layer_id=record.name,
            source_id=source.source_id,
            source_layer_id=source.source_layer_id,
            filter_attribute=source.filter_attribute,
            filter_value=record.name,
            fill_color=color,
            fill_opacity=opacity,
        )

        with self._lock:
            below = self._adapter.get_boundary_reference_layer()
            if below is None:
                log.warning(
                    "Boundary reference layer missing; adding %r without z-order", record.name
                )
            handle = self._adapter.create_or_replace_fill_layer(spec, below=below)
            entry = RegisteredLayer(
                name=record.name,
                kind=record.kind,
                base_color=color,
                base_opacity=opacity,
                handle=handle,
            )
            if record.name in self._layers:
                log.info("Replacing region layer %r", record.name)
            self._layers[record.name] = entry
            if self._highlighted == record.name:
                # A fresh layer carries the base style.
                self._highlighted = None
            return entry

    def register_many(
        self, records: Iterable[RegionRecord], current_year: int
    ) -> list[RegisteredLayer]:
        return [self.register(r, current_year) for r in records]

    def reset_all(self) -> None:
        """
        Put every registered region back on its base style. Safe to call repeatedly.
        """
        with self._lock:
            for entry in self._layers.values():
                self._apply_base(entry)
            self._highlighted = None

    def highlight(self, name: str) -> bool:
        """
        Show `name` in the highlight style. Unknown names are ignored (returns False).
        """
        with self._lock:
            entry = self._layers.get(name)
            if entry is None:
                return False
            prev = self._highlighted
            if prev is not None and prev != name and prev in self._layers:
                self._apply_base(self._layers[prev])
            self._adapter.set_fill_color(entry.handle, self._palette.highlight)
            self._adapter.set_fill_opacity(entry.handle, HIGHLIGHT_OPACITY)
            self._highlighted = name
            return True

    def names(self) -> list[str]:
        with self._lock:
            return list(self._layers.keys())

    def get(self, name: str) -> RegisteredLayer | None:
        return self._layers.get(name)

    def layers(self) -> list[RegisteredLayer]:
        with self._lock:
            return list(self._layers.values())

    def __len__(self) -> int:
        return len(self._layers)

    def __contains__(self, name: object) -> bool:
        return name in self._layers

    def _apply_base(self, entry: RegisteredLayer) -> None:
        self._adapter.set_fill_color(entry.handle, entry.base_color)
        self._adapter.set_fill_opacity(entry.handle, entry.base_opacity)
