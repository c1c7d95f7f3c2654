from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float


@dataclass(frozen=True)
class LayerHandle:
    layer_id: str


@dataclass(frozen=True)
class FillLayerSpec:
    """
    A fill layer showing the features of one source layer whose
    `filter_attribute` equals `filter_value`.
    """

    layer_id: str
    source_id: str
    source_layer_id: str
    filter_attribute: str
    filter_value: str
    fill_color: str
    fill_opacity: float


class RenderAdapter(Protocol):
    """
    What the highlight engine needs from a map renderer.

    Implementations are single-threaded: callers must serialize access.
    """

    def create_or_replace_fill_layer(
        self, spec: FillLayerSpec, *, below: LayerHandle | None = None
    ) -> LayerHandle: ...

    def set_fill_color(self, handle: LayerHandle, color: str) -> None: ...

    def set_fill_opacity(self, handle: LayerHandle, opacity: float) -> None: ...

    def hit_test(
        self, point: ScreenPoint, candidate_ids: Sequence[str]
    ) -> list[str]: ...

    def get_boundary_reference_layer(self) -> LayerHandle | None: ...
