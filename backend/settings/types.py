from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from render.viewport import BBox

_HEX_DIGITS = set("0123456789abcdefABCDEF")


class Palette(BaseModel):
    """
    The three logical colors: country base, state base, highlight.
    """

    country: str = "#f1a340"
    state: str = "#998ec3"
    highlight: str = "#ff0000"

    @field_validator("country", "state", "highlight")
    @classmethod
    def _hex_color(cls, v: str) -> str:
        s = (v or "").strip()
        body = s[1:] if s.startswith("#") else ""
        if len(body) not in {3, 6} or not set(body) <= _HEX_DIGITS:
            raise ValueError(f"Expected a #rgb/#rrggbb color, got {v!r}")
        return s.lower()


class RegionSourceConfig(BaseModel):
    """
    Where a region kind's shapes come from and how a layer selects one region.
    """

    sourceId: str
    sourceLayerId: str
    # Countries filter on `name`, states on `gn_name` (quirk of the state source).
    filterAttribute: str
    # Repo-relative GeoJSON file backing the source in the in-memory renderer.
    path: str


class RegionSources(BaseModel):
    country: RegionSourceConfig = Field(
        default_factory=lambda: RegionSourceConfig(
            sourceId="countries",
            sourceLayerId="countries",
            filterAttribute="name",
            path="data/regions/countries.geojson",
        )
    )
    state: RegionSourceConfig = Field(
        default_factory=lambda: RegionSourceConfig(
            sourceId="states",
            sourceLayerId="states",
            filterAttribute="gn_name",
            path="data/regions/states.geojson",
        )
    )


class FeedConfig(BaseModel):
    url: str = "http://justinmiller.io/travel/visited.json"
    timeoutS: float = Field(default=10.0, gt=0.0, le=120.0)


class BoundsConfig(BaseModel):
    minLon: float = -179.0
    minLat: float = -55.0
    maxLon: float = 179.0
    maxLat: float = 75.0

    def to_bbox(self) -> BBox:
        return BBox(
            min_lon=self.minLon,
            min_lat=self.minLat,
            max_lon=self.maxLon,
            max_lat=self.maxLat,
        )


class ViewportConfig(BaseModel):
    widthPx: int = Field(default=1024, gt=0)
    heightPx: int = Field(default=512, gt=0)


class LabelConfig(BaseModel):
    # Gesture kinds that show the region-name label while highlighting.
    gestures: list[str] = Field(default_factory=lambda: ["long_press"])
    offsetPx: float = Field(default=50.0, ge=0.0)
    fadeS: float = Field(default=0.25, ge=0.0)


class MapConfig(BaseModel):
    feed: FeedConfig = Field(default_factory=FeedConfig)
    palette: Palette = Field(default_factory=Palette)
    sources: RegionSources = Field(default_factory=RegionSources)

    # Base cartography, bottom -> top. Region layers go right below the boundary
    # reference so admin boundary lines stay visible.
    baseLayers: list[str] = Field(
        default_factory=lambda: ["background", "admin-3-4-boundaries-bg", "admin-3-4-boundaries"]
    )
    boundaryReferenceLayer: str = "admin-3-4-boundaries-bg"

    mapStyle: str = "carto-darkmatter"
    worldBounds: BoundsConfig = Field(default_factory=BoundsConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    label: LabelConfig = Field(default_factory=LabelConfig)
