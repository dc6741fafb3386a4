from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from pygame.math import Vector2


def _nearest_on_segment(point: Vector2, start: Vector2, end: Vector2) -> Vector2:
    seg_x = end.x - start.x
    seg_y = end.y - start.y
    length_sq = seg_x * seg_x + seg_y * seg_y
    if length_sq < 1e-18:
        return Vector2(start)
    t = ((point.x - start.x) * seg_x + (point.y - start.y) * seg_y) / length_sq
    t = max(0.0, min(1.0, t))
    return Vector2(start.x + seg_x * t, start.y + seg_y * t)


@dataclass(frozen=True, slots=True)
class RectObstacle:
    """Axis-aligned rectangle in viewport coordinates (y grows downward)."""

    left: float
    top: float
    right: float
    bottom: float

    def __post_init__(self) -> None:
        for value in (self.left, self.top, self.right, self.bottom):
            if not math.isfinite(value):
                raise ValueError(f"rectangle edges must be finite, got {self!r}")
        if self.right < self.left or self.bottom < self.top:
            raise ValueError(f"rectangle edges are inverted: {self!r}")

    @classmethod
    def from_bounding_box(cls, left: float, top: float, right: float, bottom: float) -> "RectObstacle":
        return cls(float(left), float(top), float(right), float(bottom))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def degenerate(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def contains(self, point: Vector2) -> bool:
        if self.degenerate:
            return False
        return self.left < point.x < self.right and self.top < point.y < self.bottom

    def nearest_point(self, point: Vector2) -> Vector2:
        clamped_x = min(max(point.x, self.left), self.right)
        clamped_y = min(max(point.y, self.top), self.bottom)
        if not self.contains(point):
            return Vector2(clamped_x, clamped_y)
        # Inside: project onto the closest edge.
        to_left = point.x - self.left
        to_right = self.right - point.x
        to_top = point.y - self.top
        to_bottom = self.bottom - point.y
        nearest = min(to_left, to_right, to_top, to_bottom)
        if nearest == to_left:
            return Vector2(self.left, point.y)
        if nearest == to_right:
            return Vector2(self.right, point.y)
        if nearest == to_top:
            return Vector2(point.x, self.top)
        return Vector2(point.x, self.bottom)

    def as_payload(self) -> dict:
        return {"kind": "rect", "left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


@dataclass(frozen=True, slots=True)
class PolygonObstacle:
    vertices: Tuple[Tuple[float, float], ...]

    def __post_init__(self) -> None:
        if not self.vertices:
            raise ValueError("polygon needs at least one vertex")
        for x, y in self.vertices:
            if not (math.isfinite(x) and math.isfinite(y)):
                raise ValueError(f"polygon vertices must be finite, got {self.vertices!r}")

    @classmethod
    def from_points(cls, points: Iterable[Iterable[float]]) -> "PolygonObstacle":
        return cls(tuple((float(x), float(y)) for x, y in points))

    @property
    def area(self) -> float:
        total = 0.0
        count = len(self.vertices)
        for index in range(count):
            x1, y1 = self.vertices[index]
            x2, y2 = self.vertices[(index + 1) % count]
            total += x1 * y2 - x2 * y1
        return abs(total) * 0.5

    def contains(self, point: Vector2) -> bool:
        if len(self.vertices) < 3 or self.area <= 0.0:
            return False
        inside = False
        px = point.x
        py = point.y
        count = len(self.vertices)
        j = count - 1
        for i in range(count):
            xi, yi = self.vertices[i]
            xj, yj = self.vertices[j]
            if (yi > py) != (yj > py):
                cross_x = xi + (py - yi) * (xj - xi) / (yj - yi)
                if px < cross_x:
                    inside = not inside
            j = i
        return inside

    def nearest_point(self, point: Vector2) -> Vector2:
        if len(self.vertices) == 1:
            return Vector2(self.vertices[0])
        best = None
        best_dist_sq = math.inf
        count = len(self.vertices)
        for index in range(count):
            start = Vector2(self.vertices[index])
            end = Vector2(self.vertices[(index + 1) % count])
            candidate = _nearest_on_segment(point, start, end)
            dist_sq = point.distance_squared_to(candidate)
            if dist_sq < best_dist_sq:
                best_dist_sq = dist_sq
                best = candidate
        return best

    def as_payload(self) -> dict:
        return {"kind": "polygon", "vertices": [list(vertex) for vertex in self.vertices]}


Obstacle = RectObstacle | PolygonObstacle


def obstacle_from_payload(payload: dict) -> Obstacle:
    """Build an obstacle from a JSON-style mapping.

    Accepts ``{"left", "top", "right", "bottom"}`` for a bounding box or
    ``{"vertices": [[x, y], ...]}`` for a polygon. Raises ``ValueError`` on
    anything else.
    """
    if "vertices" in payload:
        try:
            return PolygonObstacle.from_points(payload["vertices"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid polygon vertices: {payload['vertices']!r}") from exc
    try:
        return RectObstacle.from_bounding_box(payload["left"], payload["top"], payload["right"], payload["bottom"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"invalid obstacle payload: {payload!r}") from exc
