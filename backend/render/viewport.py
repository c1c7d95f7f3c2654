from __future__ import annotations

from dataclasses import dataclass

from render.types import ScreenPoint


@dataclass(frozen=True)
class BBox:
    """
    Lon/lat window shown by the map, e.g. the world bounds the view is locked to.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.max_lon <= self.min_lon or self.max_lat <= self.min_lat:
            raise ValueError(f"Empty or inverted bounds: {self}")

    @property
    def span_lon(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def span_lat(self) -> float:
        return self.max_lat - self.min_lat

    def center(self) -> dict[str, float]:
        return {
            "lat": self.min_lat + self.span_lat / 2.0,
            "lon": self.min_lon + self.span_lon / 2.0,
        }


WORLD_BOUNDS = BBox(min_lon=-179.0, min_lat=-55.0, max_lon=179.0, max_lat=75.0)


@dataclass(frozen=True)
class Viewport:
    """
    Screen-space window onto `bounds`, origin at the top-left corner.

    The mapping is linear in lon/lat; it is only used to resolve pointer samples.
    """

    width_px: int
    height_px: int
    bounds: BBox = WORLD_BOUNDS

    def screen_to_lonlat(self, point: ScreenPoint) -> tuple[float, float]:
        b = self.bounds
        fx = float(point.x) / max(1, int(self.width_px))
        fy = float(point.y) / max(1, int(self.height_px))
        return b.min_lon + fx * b.span_lon, b.max_lat - fy * b.span_lat

    def lonlat_to_screen(self, lon: float, lat: float) -> ScreenPoint:
        b = self.bounds
        return ScreenPoint(
            x=(float(lon) - b.min_lon) / b.span_lon * self.width_px,
            y=(b.max_lat - float(lat)) / b.span_lat * self.height_px,
        )
