from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Literal

from feed.errors import FeedError
from feed.loader import FeedParseResult, VisitFeedLoader
from highlight.controller import (
    GestureKind,
    GestureSample,
    HighlightController,
    HighlightState,
)
from highlight.label import TooltipLabel
from highlight.registry import LayerRegistry, RegionSource
from regions.types import RegionKind, RegionPalette, RegionRecord
from render.dispatch import DispatcherClosed, UiDispatcher
from render.figure import build_map_figure
from render.in_memory import InMemoryMapRenderer
from render.sources import VectorSource, load_geojson_polygons
from render.viewport import Viewport
from settings.loader import resolve_repo_path
from settings.types import MapConfig

log = logging.getLogger(__name__)

FeedState = Literal["idle", "pending", "loaded", "failed"]


@dataclass
class FeedStatus:
    state: FeedState = "idle"
    error_kind: str | None = None
    error: str | None = None
    registered: int = 0
    rejected: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "errorKind": self.error_kind,
            "error": self.error,
            "registered": self.registered,
            "rejected": self.rejected,
        }


def build_renderer(cfg: MapConfig) -> InMemoryMapRenderer:
    """
    In-memory renderer backed by the GeoJSON files named in `cfg.sources`.
    """
    sources: dict[str, VectorSource] = {}
    for src in (cfg.sources.country, cfg.sources.state):
        path = resolve_repo_path(src.path)
        if not path.exists():
            raise FileNotFoundError(f"Region source `{src.sourceId}` missing file: {src.path}")
        vs = sources.setdefault(src.sourceId, VectorSource(id=src.sourceId))
        vs.layers.setdefault(src.sourceLayerId, []).extend(load_geojson_polygons(path))

    return InMemoryMapRenderer(
        sources=sources,
        viewport=Viewport(
            width_px=cfg.viewport.widthPx,
            height_px=cfg.viewport.heightPx,
            bounds=cfg.worldBounds.to_bbox(),
        ),
        base_layer_ids=list(cfg.baseLayers),
        boundary_reference_id=cfg.boundaryReferenceLayer,
    )


def _region_sources(cfg: MapConfig) -> dict[RegionKind, RegionSource]:
    return {
        RegionKind.country: RegionSource(
            cfg.sources.country.sourceId,
            cfg.sources.country.sourceLayerId,
            cfg.sources.country.filterAttribute,
        ),
        RegionKind.state: RegionSource(
            cfg.sources.state.sourceId,
            cfg.sources.state.sourceLayerId,
            cfg.sources.state.filterAttribute,
        ),
    }


@dataclass
class MapSession:
    config: MapConfig
    renderer: InMemoryMapRenderer
    loader: VisitFeedLoader
    dispatcher: UiDispatcher = field(default_factory=UiDispatcher)
    clock: Callable[[], date] = date.today

    status: FeedStatus = field(default_factory=FeedStatus)
    _started: bool = field(default=False, repr=False)
    _status_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.registry = LayerRegistry(
            self.renderer,
            palette=RegionPalette(
                country=self.config.palette.country,
                state=self.config.palette.state,
                highlight=self.config.palette.highlight,
            ),
            sources=_region_sources(self.config),
        )
        self.label = TooltipLabel(fade_s=self.config.label.fadeS)
        self.controller = HighlightController(
            self.registry,
            self.renderer,
            label=self.label,
            label_gestures=[GestureKind(g) for g in self.config.label.gestures],
            label_offset_px=self.config.label.offsetPx,
        )

    def current_year(self) -> int:
        return self.clock().year

    def start(self) -> threading.Thread | None:
        """
        Fire the one feed load for this session. Later calls are no-ops.
        """
        with self._status_lock:
            if self._started:
                return None
            self._started = True
            self.status.state = "pending"
        self.dispatcher.start()
        return self.loader.load_async(self._on_feed_loaded, self._on_feed_failed)

    @property
    def closed(self) -> bool:
        return self.dispatcher.closed

    def close(self) -> None:
        self.dispatcher.stop()

    def merge(self, result: FeedParseResult) -> bool:
        """
        Queue one register per record on the dispatcher. Callable from any thread.

        A closed session drops the result and returns False.
        """
        year = self.current_year()
        try:
            for record in result.records:
                self.dispatcher.submit(self._register, record, year)
        except DispatcherClosed:
            log.info("Session closed; dropping %d feed records", len(result.records))
            return False
        with self._status_lock:
            self.status.rejected += len(result.rejected)
        return True

    def handle_gesture(self, sample: GestureSample) -> HighlightState:
        return self.dispatcher.call(self.controller.handle, sample)

    def regions(self) -> list[dict[str, Any]]:
        return self.dispatcher.call(self._regions)

    def figure(self) -> dict[str, Any]:
        return self.dispatcher.call(self._figure)

    def feed_status(self) -> dict[str, Any]:
        with self._status_lock:
            return self.status.as_dict()

    def _on_feed_loaded(self, result: FeedParseResult) -> None:
        if not self.merge(result):
            return
        try:
            # Marks the status after every queued register has run.
            self.dispatcher.submit(self._mark_loaded)
        except DispatcherClosed:
            log.info("Session closed before the visit feed finished merging")

    def _on_feed_failed(self, exc: FeedError) -> None:
        with self._status_lock:
            self.status.state = "failed"
            self.status.error_kind = exc.kind
            self.status.error = str(exc)

    def _mark_loaded(self) -> None:
        with self._status_lock:
            self.status.state = "loaded"
        log.info("Visit feed merged: %d regions registered", len(self.registry))

    def _register(self, record: RegionRecord, year: int) -> None:
        try:
            self.registry.register(record, year)
        except (KeyError, ValueError) as exc:
            log.warning("Could not add region layer %r: %s", record.name, exc)
            return
        with self._status_lock:
            self.status.registered = len(self.registry)

    def _regions(self) -> list[dict[str, Any]]:
        highlighted = self.registry.highlighted
        return [
            {
                "name": entry.name,
                "kind": entry.kind.value,
                "baseColor": entry.base_color,
                "baseOpacity": entry.base_opacity,
                "highlighted": entry.name == highlighted,
            }
            for entry in self.registry.layers()
        ]

    def _figure(self) -> dict[str, Any]:
        return build_map_figure(
            self.renderer,
            map_style=self.config.mapStyle,
            bounds=self.config.worldBounds.to_bbox(),
            highlighted=self.registry.highlighted,
        )


def create_session(cfg: MapConfig, **kwargs: Any) -> MapSession:
    loader = kwargs.pop("loader", None) or VisitFeedLoader(
        url=cfg.feed.url, timeout_s=cfg.feed.timeoutS
    )
    renderer = kwargs.pop("renderer", None) or build_renderer(cfg)
    return MapSession(config=cfg, renderer=renderer, loader=loader, **kwargs)
