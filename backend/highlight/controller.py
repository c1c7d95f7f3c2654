from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

from highlight.registry import LayerRegistry
from render.types import RenderAdapter, ScreenPoint

log = logging.getLogger(__name__)


class GesturePhase(str, Enum):
    began = "began"
    changed = "changed"
    ended = "ended"
    cancelled = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in (GesturePhase.began, GesturePhase.changed)


class GestureKind(str, Enum):
    pan = "pan"
    long_press = "long_press"


@dataclass(frozen=True)
class GestureSample:
    phase: GesturePhase
    point: ScreenPoint
    kind: GestureKind = GestureKind.pan


@dataclass(frozen=True)
class HighlightState:
    region: str | None = None

    @property
    def is_idle(self) -> bool:
        return self.region is None


IDLE = HighlightState()


class LabelPresenter(Protocol):
    def show(self, text: str, anchor: ScreenPoint) -> None: ...

    def hide(self) -> None: ...


class HighlightController:
    """
    Pointer-driven highlight state machine: Idle <-> Highlighting(name).

    Every sample first resets all regions to their base style, then (for an active
    gesture over a registered region) highlights exactly that one region.
    """

    def __init__(
        self,
        registry: LayerRegistry,
        adapter: RenderAdapter,
        *,
        label: LabelPresenter | None = None,
        label_gestures: Iterable[GestureKind] = (GestureKind.long_press,),
        label_offset_px: float = 50.0,
    ):
        self._registry = registry
        self._adapter = adapter
        self._label = label
        self._label_gestures = frozenset(label_gestures)
        self._label_offset_px = float(label_offset_px)
        self._label_visible = False

    @property
    def state(self) -> HighlightState:
        # Single source of truth: the registry.
        region = self._registry.highlighted
        return IDLE if region is None else HighlightState(region=region)

    def handle(self, sample: GestureSample) -> HighlightState:
        with self._registry.transaction():
            prev = self.state
            self._registry.reset_all()

            target: str | None = None
            if sample.phase.is_active:
                target = self._region_at(sample.point)

            if target is not None and self._registry.highlight(target):
                new_state = HighlightState(region=target)
            else:
                new_state = IDLE

            if new_state != prev:
                log.debug("Highlight %s -> %s", prev.region, new_state.region)

        self._signal_label(sample, new_state)
        return new_state

    def _region_at(self, point: ScreenPoint) -> str | None:
        names = self._registry.names()
        if not names:
            return None
        registered = set(names)
        hits = self._adapter.hit_test(point, names)
        # The adapter may list a region once per matching shape; keep its order.
        for name in dict.fromkeys(hits):
            if name in registered:
                return name
        return None

    def _signal_label(self, sample: GestureSample, state: HighlightState) -> None:
        if self._label is None:
            return
        if state.region is not None and sample.kind in self._label_gestures:
            anchor = ScreenPoint(
                x=sample.point.x, y=sample.point.y - self._label_offset_px
            )
            self._label.show(state.region, anchor)
            self._label_visible = True
        elif self._label_visible:
            self._label.hide()
            self._label_visible = False
