"""Plane geometry helpers for connectors and hit testing."""

from __future__ import annotations

import math

from workflow_designer.nodes.drawing import Geometry

Point = tuple[float, float]


def clip_to_boundary(geometry: Geometry, toward: Point) -> Point:
    """Point where the ray from the node center toward ``toward`` leaves the node."""

    dx = toward[0] - geometry.x
    dy = toward[1] - geometry.y
    if dx == 0 and dy == 0:
        return (geometry.x, geometry.y)

    half_w = geometry.width / 2
    half_h = geometry.height / 2
    scale_x = half_w / abs(dx) if dx else math.inf
    scale_y = half_h / abs(dy) if dy else math.inf
    scale = min(scale_x, scale_y, 1.0)
    return (geometry.x + dx * scale, geometry.y + dy * scale)


def connector_between(source: Geometry, target: Geometry) -> tuple[Point, Point]:
    start = clip_to_boundary(source, (target.x, target.y))
    end = clip_to_boundary(target, (source.x, source.y))
    return start, end


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def distance_to_segment(p: Point, a: Point, b: Point) -> float:
    seg_x = b[0] - a[0]
    seg_y = b[1] - a[1]
    length_sq = seg_x * seg_x + seg_y * seg_y
    if length_sq == 0:
        return distance(p, a)
    t = ((p[0] - a[0]) * seg_x + (p[1] - a[1]) * seg_y) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(p, (a[0] + t * seg_x, a[1] + t * seg_y))
