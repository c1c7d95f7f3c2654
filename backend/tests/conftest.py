import sys
from pathlib import Path

import pytest

# Ensure `backend/` is on sys.path so tests can import local modules
# like `regions.*`, `highlight.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

from render.types import FillLayerSpec, LayerHandle  # noqa: E402


class RecordingAdapter:
    """
    RenderAdapter double: records every call, hit-tests from a canned table.
    """

    def __init__(self, *, reference: str | None = "admin-3-4-boundaries-bg"):
        self.reference = reference
        self.calls: list[tuple] = []
        self.hits: dict[tuple[float, float], list[str]] = {}
        self.color: dict[str, str] = {}
        self.opacity: dict[str, float] = {}
        self.below: dict[str, str | None] = {}

    def create_or_replace_fill_layer(self, spec: FillLayerSpec, *, below=None):
        self.calls.append(("create", spec.layer_id))
        self.color[spec.layer_id] = spec.fill_color
        self.opacity[spec.layer_id] = spec.fill_opacity
        self.below[spec.layer_id] = below.layer_id if below is not None else None
        self.last_spec = spec
        return LayerHandle(layer_id=spec.layer_id)

    def set_fill_color(self, handle, color):
        self.calls.append(("color", handle.layer_id, color))
        self.color[handle.layer_id] = color

    def set_fill_opacity(self, handle, opacity):
        self.calls.append(("opacity", handle.layer_id, opacity))
        self.opacity[handle.layer_id] = opacity

    def hit_test(self, point, candidate_ids):
        self.calls.append(("hit", point.x, point.y))
        return list(self.hits.get((point.x, point.y), []))

    def get_boundary_reference_layer(self):
        if self.reference is None:
            return None
        return LayerHandle(layer_id=self.reference)

    def style_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in {"color", "opacity"}]


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()
