"""Drawable primitives produced by node render rules.

A render rule turns a node's geometry and properties into a short list of
layers; the canvas stacks them in order. Coordinates are canvas coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Geometry:
    """Center position and size of a node."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def contains(self, px: float, py: float) -> bool:
        return self.left <= px <= self.right and self.top <= py <= self.bottom

    def anchors(self) -> list[tuple[float, float]]:
        """Connection affordances: the midpoints of the four sides."""

        return [
            (self.x, self.top),
            (self.right, self.y),
            (self.x, self.bottom),
            (self.left, self.y),
        ]


@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str
    radius: float = 0.0
    dashed: bool = False


@dataclass(frozen=True, slots=True)
class Polygon:
    points: tuple[tuple[float, float], ...]
    fill: str
    stroke: str


@dataclass(frozen=True, slots=True)
class TextLayer:
    x: float
    y: float
    value: str
    color: str = "#1f2937"
    font_size: int = 12


@dataclass(frozen=True, slots=True)
class Connector:
    """A straight edge segment, already clipped to both node boundaries."""

    edge_id: str
    start: tuple[float, float]
    end: tuple[float, float]
    label: str | None = None
    stroke: str = "#6b7280"


Drawable = Rect | Polygon | TextLayer


@dataclass(frozen=True, slots=True)
class NodeLayer:
    node_id: str
    type_tag: str
    geometry: Geometry
    label: str
    drawables: list[Drawable] = field(default_factory=list)
    selected: bool = False
