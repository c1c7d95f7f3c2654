from .controller import (
    IDLE,
    GestureKind,
    GesturePhase,
    GestureSample,
    HighlightController,
    HighlightState,
    LabelPresenter,
)
from .label import TooltipLabel
from .registry import LayerRegistry, RegionSource

__all__ = [
    "IDLE",
    "GestureKind",
    "GesturePhase",
    "GestureSample",
    "HighlightController",
    "HighlightState",
    "LabelPresenter",
    "LayerRegistry",
    "RegionSource",
    "TooltipLabel",
]
