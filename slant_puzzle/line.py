"""Movable slant lines of the puzzle mesh.

Two families exist.  A HORIZONTAL line runs left to right (``start`` is the
left point, ``end`` the right one) and is dragged up/down; a VERTICAL line runs
top to bottom and is dragged left/right.  Lines never own each other: the
endpoints are attached to neighbouring lines by their index in the layout's
line list, and the four outer border lines always sit at indices 0-3.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .geometry import DEFAULT_EPS, Point2D, Segment, cross, intersect, vec

logger = logging.getLogger(__name__)

OUTER_LEFT = 0
OUTER_TOP = 1
OUTER_RIGHT = 2
OUTER_BOTTOM = 3
OUTER_COUNT = 4


class Direction(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class SlantLine:
    index: int
    direction: Direction
    start: Point2D = (0.0, 0.0)
    end: Point2D = (0.0, 0.0)
    attach_start: Optional[int] = None
    attach_end: Optional[int] = None
    previous_start: Point2D = field(default=(0.0, 0.0), repr=False)
    previous_end: Point2D = field(default=(0.0, 0.0), repr=False)

    @property
    def is_outer(self) -> bool:
        return self.index < OUTER_COUNT

    @property
    def segment(self) -> Segment:
        return self.start, self.end

    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])

    def start_anchor(self) -> int:
        """Index of the line that defines ``start`` (outer border when unattached)."""

        if self.attach_start is not None:
            return self.attach_start
        return OUTER_LEFT if self.direction is Direction.HORIZONTAL else OUTER_TOP

    def end_anchor(self) -> int:
        if self.attach_end is not None:
            return self.attach_end
        return OUTER_RIGHT if self.direction is Direction.HORIZONTAL else OUTER_BOTTOM

    def contains_point(self, point: Point2D, tolerance: float) -> bool:
        """Return ``True`` when ``point`` lies within ``tolerance`` of the segment.

        The segment is widened into a quad by shifting both endpoints across the
        movement axis; the point has to sit on the inner side of all four edges
        walked clockwise on screen.  Points on the quad's border count as inside.
        """

        sx, sy = self.start
        ex, ey = self.end
        if self.direction is Direction.VERTICAL:
            quad = ((sx - tolerance, sy), (sx + tolerance, sy), (ex + tolerance, ey), (ex - tolerance, ey))
        else:
            quad = ((sx, sy - tolerance), (ex, ey - tolerance), (ex, ey + tolerance), (sx, sy + tolerance))

        for i in range(4):
            a = quad[i]
            b = quad[(i + 1) % 4]
            if cross(vec(a, b), vec(a, point)) < 0.0:
                return False
        return True

    def prepare_move(self) -> None:
        self.previous_start = self.start
        self.previous_end = self.end

    def move(self, offset: float) -> None:
        """Shift the line by ``offset`` from the position captured by :meth:`prepare_move`.

        Only the coordinate across the line's family moves.  Repeating the call
        with the cumulative gesture offset gives the same result every time.
        """

        if self.direction is Direction.HORIZONTAL:
            self.start = (self.previous_start[0], self.previous_start[1] + offset)
            self.end = (self.previous_end[0], self.previous_end[1] + offset)
        else:
            self.start = (self.previous_start[0] + offset, self.previous_start[1])
            self.end = (self.previous_end[0] + offset, self.previous_end[1])

    def update(self, lines: Sequence["SlantLine"], eps: float = DEFAULT_EPS) -> bool:
        """Snap both endpoints onto the lines they are attached to.

        ``lines`` is the layout's full line list.  An endpoint whose
        intersection is undefined (parallel neighbour) keeps its old position;
        the return value is ``False`` in that case.
        """

        segment = self.segment
        new_start = intersect(segment, lines[self.start_anchor()].segment, eps=eps)
        new_end = intersect(segment, lines[self.end_anchor()].segment, eps=eps)
        ok = True
        if new_start is None:
            logger.warning("Line %d: start attachment %d is parallel, keeping %s", self.index, self.start_anchor(), self.start)
            ok = False
        else:
            self.start = new_start
        if new_end is None:
            logger.warning("Line %d: end attachment %d is parallel, keeping %s", self.index, self.end_anchor(), self.end)
            ok = False
        else:
            self.end = new_end
        return ok

    def __str__(self) -> str:
        return f"start --> {self.start}, end --> {self.end}"


__all__ = [
    "Direction",
    "SlantLine",
    "OUTER_LEFT",
    "OUTER_TOP",
    "OUTER_RIGHT",
    "OUTER_BOTTOM",
    "OUTER_COUNT",
]
