from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from render.types import LayerHandle


class RegionKind(str, Enum):
    country = "country"
    state = "state"


@dataclass(frozen=True)
class RegionRecord:
    """
    One visited region as delivered by the visit feed.
    """

    name: str
    kind: RegionKind
    last_visited_year: int


@dataclass(frozen=True)
class RegionStyle:
    fill_color: str  # "#rrggbb"
    opacity: float


@dataclass(frozen=True, eq=False)
class RegisteredLayer:
    """
    A region that currently has a fill layer on the map, plus its cached base style.

    Identity is the region name (case-sensitive). Two entries with the same name are
    the same region regardless of kind/opacity.
    """

    name: str
    kind: RegionKind
    base_color: str
    base_opacity: float
    handle: "LayerHandle" = field(repr=False)

    @property
    def base_style(self) -> RegionStyle:
        return RegionStyle(fill_color=self.base_color, opacity=self.base_opacity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisteredLayer):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(frozen=True)
class RegionPalette:
    country: str = "#f1a340"
    state: str = "#998ec3"
    highlight: str = "#ff0000"

    def base_color(self, kind: RegionKind) -> str:
        return self.country if kind == RegionKind.country else self.state
