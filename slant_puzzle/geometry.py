"""Plain 2D helpers shared by lines, areas and pieces.

Points are ``(x, y)`` tuples in view coordinates (y grows downwards).  Every
helper here is pure; degenerate input is reported through ``None`` rather than
exceptions so that callers on the input path can clamp instead of failing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

Point2D = Tuple[float, float]
Segment = Tuple[Point2D, Point2D]

# matches LayoutConfig.degenerate_eps
DEFAULT_EPS = 1e-9


def vec(a: Point2D, b: Point2D) -> Point2D:
    return b[0] - a[0], b[1] - a[1]


def cross(u: Point2D, v: Point2D) -> float:
    """Return the z component of ``u × v``.

    Positive means ``v`` turns clockwise from ``u`` on screen (y down).
    """

    return u[0] * v[1] - u[1] * v[0]


def dot(u: Point2D, v: Point2D) -> float:
    return u[0] * v[0] + u[1] * v[1]


def distance(a: Point2D, b: Point2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def midpoint(a: Point2D, b: Point2D) -> Point2D:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def lerp(a: Point2D, b: Point2D, t: float) -> Point2D:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def intersect(a: Segment, b: Segment, *, eps: float = DEFAULT_EPS) -> Optional[Point2D]:
    """Intersection of the infinite lines carrying segments ``a`` and ``b``.

    Returns ``None`` when the lines are parallel (or one of the segments has
    zero length); a well-formed mesh never asks for such a pair.
    """

    a_start, a_end = a
    b_start, b_end = b
    da = vec(a_start, a_end)
    db = vec(b_start, b_end)
    denom = cross(da, db)
    scale = max(math.hypot(*da) * math.hypot(*db), eps)
    if abs(denom) <= eps * scale:
        return None
    diff = vec(a_start, b_start)
    t = cross(diff, db) / denom
    return a_start[0] + t * da[0], a_start[1] + t * da[1]


def polygon_centroid(points: Sequence[Point2D]) -> Point2D:
    """Area-weighted centroid; falls back to the vertex mean for flat polygons."""

    count = len(points)
    if count == 0:
        raise ValueError("centroid of an empty polygon")
    area2 = 0.0
    cx = 0.0
    cy = 0.0
    for i in range(count):
        x0, y0 = points[i]
        x1, y1 = points[(i + 1) % count]
        w = x0 * y1 - x1 * y0
        area2 += w
        cx += (x0 + x1) * w
        cy += (y0 + y1) * w
    if abs(area2) <= DEFAULT_EPS:
        return (
            sum(p[0] for p in points) / count,
            sum(p[1] for p in points) / count,
        )
    return cx / (3.0 * area2), cy / (3.0 * area2)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in view coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point2D:
        return (self.left + self.right) * 0.5, (self.top + self.bottom) * 0.5

    def corners(self) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        """Corners clockwise on screen: top-left, top-right, bottom-right, bottom-left."""

        return (
            (self.left, self.top),
            (self.right, self.top),
            (self.right, self.bottom),
            (self.left, self.bottom),
        )

    def contains(self, point: Point2D) -> bool:
        return self.left <= point[0] <= self.right and self.top <= point[1] <= self.bottom

    @classmethod
    def from_points(cls, points: Iterable[Point2D]) -> "Rect":
        pts = list(points)
        if not pts:
            raise ValueError("bounding box of no points")
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))


__all__ = [
    "Point2D",
    "Segment",
    "Rect",
    "vec",
    "cross",
    "dot",
    "distance",
    "midpoint",
    "lerp",
    "intersect",
    "DEFAULT_EPS",
    "polygon_centroid",
]
