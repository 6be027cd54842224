"""Cells of the puzzle mesh."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import product
from typing import List, Sequence, Tuple, Union

from .geometry import DEFAULT_EPS, Point2D, Rect, cross, distance, intersect, midpoint, polygon_centroid, vec
from .line import SlantLine

logger = logging.getLogger(__name__)

# left, top, right, bottom
CellLines = Tuple[int, int, int, int]


def _corner(lines: Sequence[SlantLine], a: int, b: int, eps: float) -> Point2D:
    point = intersect(lines[a].segment, lines[b].segment, eps=eps)
    if point is not None:
        return point
    # parallel neighbours: take the closest pair of endpoints instead
    pairs = product(lines[a].segment, lines[b].segment)
    p, q = min(pairs, key=lambda pq: distance(pq[0], pq[1]))
    logger.warning("Lines %d and %d are parallel, corner approximated at %s", a, b, midpoint(p, q))
    return midpoint(p, q)


def _line_distance(point: Point2D, a: Point2D, b: Point2D) -> float:
    length = distance(a, b)
    if length == 0.0:
        return distance(a, point)
    return abs(cross(vec(a, b), vec(a, point))) / length


@dataclass(frozen=True)
class Area:
    """Quadrilateral cell read off the current positions of its four bounding lines.

    ``points`` are ordered clockwise on screen starting at the top-left corner,
    which makes every edge/point cross product positive for interior points.
    """

    index: int
    line_ids: CellLines
    points: Tuple[Point2D, Point2D, Point2D, Point2D]

    @classmethod
    def from_lines(
        cls,
        index: int,
        line_ids: CellLines,
        lines: Sequence[SlantLine],
        eps: float = DEFAULT_EPS,
    ) -> "Area":
        left, top, right, bottom = line_ids
        points = (
            _corner(lines, left, top, eps),
            _corner(lines, top, right, eps),
            _corner(lines, right, bottom, eps),
            _corner(lines, bottom, left, eps),
        )
        return cls(index=index, line_ids=line_ids, points=points)

    @property
    def left(self) -> int:
        return self.line_ids[0]

    @property
    def top(self) -> int:
        return self.line_ids[1]

    @property
    def right(self) -> int:
        return self.line_ids[2]

    @property
    def bottom(self) -> int:
        return self.line_ids[3]

    def edges(self) -> List[Tuple[Point2D, Point2D]]:
        pts = self.points
        return [(pts[i], pts[(i + 1) % len(pts)]) for i in range(len(pts))]

    def contains_point(self, point: Point2D) -> bool:
        for a, b in self.edges():
            if cross(vec(a, b), vec(a, point)) < 0.0:
                return False
        return True

    def touches(self, line: Union[SlantLine, int]) -> bool:
        line_id = line.index if isinstance(line, SlantLine) else line
        return line_id in self.line_ids

    def bounding_box(self) -> Rect:
        return Rect.from_points(self.points)

    @property
    def width(self) -> float:
        return self.bounding_box().width

    @property
    def height(self) -> float:
        return self.bounding_box().height

    def centroid(self) -> Point2D:
        return polygon_centroid(self.points)

    def edge_lengths(self) -> List[float]:
        return [distance(a, b) for a, b in self.edges()]

    def turns(self) -> List[float]:
        """Cross products of consecutive edges; all positive for a proper cell."""

        edges = [vec(a, b) for a, b in self.edges()]
        return [cross(edges[i], edges[(i + 1) % len(edges)]) for i in range(len(edges))]

    def is_convex(self) -> bool:
        return all(turn > 0.0 for turn in self.turns())

    def corner_distances(self) -> List[float]:
        """Distance of every corner to the lines carrying its two opposite edges."""

        pts = self.points
        out = []
        for i, corner in enumerate(pts):
            for k in (1, 2):
                a, b = pts[(i + k) % 4], pts[(i + k + 1) % 4]
                out.append(_line_distance(corner, a, b))
        return out

    def min_extent(self) -> float:
        """Shortest edge or corner-to-opposite-edge distance."""

        return min(min(self.edge_lengths()), min(self.corner_distances()))

    def is_admissible(self, min_size: float) -> bool:
        """Convex, clockwise, and nothing in :meth:`min_extent` below ``min_size``."""

        return self.is_convex() and self.min_extent() >= min_size


__all__ = ["Area", "CellLines"]
