"""The slant layout mesh: outer border, movable lines and the cells between them.

Lines live in a single list.  Indices 0-3 hold the outer border (left, top,
right, bottom) and never move during a drag; every interior line is attached
by index to two lines created before it, so the creation order is a valid
update order.  The order is still derived from the attachment graph at build
time and a cyclic graph is rejected.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .area import Area, CellLines
from .config import LayoutConfig, get_layout_config
from .geometry import Point2D, Rect, Segment, lerp
from .line import OUTER_BOTTOM, OUTER_COUNT, OUTER_LEFT, OUTER_RIGHT, OUTER_TOP, Direction, SlantLine
from .logging_utils import apply_debug_logging
from .templates import CutStep, LayoutTemplate, Ratios

logger = logging.getLogger(__name__)

LineRef = Union[SlantLine, int]


class LayoutError(ValueError):
    """Raised when a template cannot be turned into a well-formed mesh."""


def _outer_lines(bounds: Rect) -> List[SlantLine]:
    tl, tr, br, bl = bounds.corners()
    return [
        SlantLine(OUTER_LEFT, Direction.VERTICAL, tl, bl),
        SlantLine(OUTER_TOP, Direction.HORIZONTAL, tl, tr),
        SlantLine(OUTER_RIGHT, Direction.VERTICAL, tr, br),
        SlantLine(OUTER_BOTTOM, Direction.HORIZONTAL, bl, br),
    ]


def _check_ratios(ratios: Ratios, step_no: int) -> None:
    for ratio in ratios:
        if not 0.0 < ratio < 1.0:
            raise LayoutError(f"step {step_no}: ratio {ratio!r} must lie strictly between 0 and 1")


def _dependency_order(lines: Sequence[SlantLine]) -> List[int]:
    interior = [line.index for line in lines if not line.is_outer]
    indegree: Dict[int, int] = {idx: 0 for idx in interior}
    dependants: Dict[int, List[int]] = {idx: [] for idx in interior}
    for idx in interior:
        for dep in {lines[idx].start_anchor(), lines[idx].end_anchor()}:
            if dep in indegree:
                dependants[dep].append(idx)
                indegree[idx] += 1
    queue = [idx for idx in interior if indegree[idx] == 0]
    order: List[int] = []
    i = 0
    while i < len(queue):
        node = queue[i]
        order.append(node)
        for tgt in dependants[node]:
            indegree[tgt] -= 1
            if indegree[tgt] == 0:
                queue.append(tgt)
        i += 1
    if len(order) != len(interior):
        stuck = sorted(idx for idx, deg in indegree.items() if deg > 0)
        raise LayoutError(f"attachment cycle between lines {stuck}")
    logger.debug("_dependency_order: %d line(s) -> %s", len(order), order)
    return order


class SlantLayout:
    """Mesh of slant lines inside a rectangular outer border.

    Typical lifecycle::

        layout = SlantLayout(get_template("cross"), Rect(0, 0, 100, 100))
        layout.prepare_move(line)
        layout.move_line(line, 20.0)   # once per pointer move
        layout.finish_move()
    """

    def __init__(
        self,
        template: Optional[LayoutTemplate] = None,
        bounds: Optional[Rect] = None,
        config: Optional[LayoutConfig] = None,
    ) -> None:
        self.config = config or get_layout_config()
        self.template = template
        self.bounds = bounds
        self._lines: List[SlantLine] = []
        self._cells: List[CellLines] = []
        self._order: List[int] = []
        self._snapshot: Optional[List[Segment]] = None
        self._moving: Optional[int] = None
        self._floors: Dict[int, float] = {}
        if template is not None and bounds is not None:
            self.layout()

    # -- lifecycle -----------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return bool(self._lines)

    def build(self, template: LayoutTemplate, bounds: Optional[Rect] = None) -> None:
        self.template = template
        if bounds is not None:
            self.bounds = bounds
        self.layout()

    def set_outer_boundary(self, bounds: Rect) -> None:
        """Replace the outer border; interior lines keep stale positions until :meth:`layout`."""

        self.bounds = bounds
        if self._lines:
            for idx, outer in enumerate(_outer_lines(bounds)):
                self._lines[idx] = outer

    def layout(self) -> None:
        """Lay the template out evenly inside the current bounds."""

        if self.template is None or self.bounds is None:
            raise LayoutError("layout needs both a template and outer bounds")
        if self.bounds.width <= 0.0 or self.bounds.height <= 0.0:
            raise LayoutError(f"outer bounds must have a positive size, got {self.bounds}")

        lines = _outer_lines(self.bounds)
        cells: List[CellLines] = [(OUTER_LEFT, OUTER_TOP, OUTER_RIGHT, OUTER_BOTTOM)]
        for step_no, step in enumerate(self.template.steps):
            if not 0 <= step.area_index < len(cells):
                raise LayoutError(
                    f"step {step_no}: area index {step.area_index} out of range (have {len(cells)} areas)"
                )
            self._cut(lines, cells, step, step_no)

        self._lines = lines
        self._order = _dependency_order(lines)
        self._snapshot = None
        self._moving = None
        self._floors = {}
        self.update()

        areas = [Area.from_lines(i, cell, self._lines, self.config.degenerate_eps) for i, cell in enumerate(cells)]
        areas.sort(key=lambda area: (round(area.points[0][1], 6), round(area.points[0][0], 6)))
        self._cells = [area.line_ids for area in areas]
        logger.info(
            "Laid out template %r in %s: %d line(s), %d area(s)",
            self.template.name,
            self.bounds,
            len(self._lines) - OUTER_COUNT,
            len(self._cells),
        )

    def _cut(self, lines: List[SlantLine], cells: List[CellLines], step: CutStep, step_no: int) -> None:
        left, top, right, bottom = cells[step.area_index]
        cell = Area.from_lines(step.area_index, cells[step.area_index], lines, self.config.degenerate_eps)
        tl, tr, br, bl = cell.points

        if step.kind == "cross":
            _check_ratios(step.ratios, step_no)
            _check_ratios(step.cross_ratios, step_no)
            h = len(lines)
            lines.append(
                SlantLine(
                    h,
                    Direction.HORIZONTAL,
                    lerp(tl, bl, step.ratios[0]),
                    lerp(tr, br, step.ratios[1]),
                    attach_start=left,
                    attach_end=right,
                )
            )
            v = len(lines)
            lines.append(
                SlantLine(
                    v,
                    Direction.VERTICAL,
                    lerp(tl, tr, step.cross_ratios[0]),
                    lerp(bl, br, step.cross_ratios[1]),
                    attach_start=top,
                    attach_end=bottom,
                )
            )
            cells[step.area_index] = (left, top, v, h)
            cells.append((v, top, right, h))
            cells.append((left, h, v, bottom))
            cells.append((v, h, right, bottom))
            return

        if step.direction is None:
            raise LayoutError(f"step {step_no}: line cut needs a direction")
        _check_ratios(step.ratios, step_no)
        idx = len(lines)
        if step.direction is Direction.HORIZONTAL:
            lines.append(
                SlantLine(
                    idx,
                    Direction.HORIZONTAL,
                    lerp(tl, bl, step.ratios[0]),
                    lerp(tr, br, step.ratios[1]),
                    attach_start=left,
                    attach_end=right,
                )
            )
            cells[step.area_index] = (left, top, right, idx)
            cells.append((left, idx, right, bottom))
        else:
            lines.append(
                SlantLine(
                    idx,
                    Direction.VERTICAL,
                    lerp(tl, tr, step.ratios[0]),
                    lerp(bl, br, step.ratios[1]),
                    attach_start=top,
                    attach_end=bottom,
                )
            )
            cells[step.area_index] = (left, top, idx, bottom)
            cells.append((idx, top, right, bottom))

    def reset(self) -> None:
        self._lines = []
        self._cells = []
        self._order = []
        self._snapshot = None
        self._moving = None
        self._floors = {}

    # -- queries -------------------------------------------------------------------

    @property
    def outer_lines(self) -> List[SlantLine]:
        return self._lines[:OUTER_COUNT]

    @property
    def lines(self) -> List[SlantLine]:
        """Interior (movable) lines in creation order."""

        return self._lines[OUTER_COUNT:]

    @property
    def all_lines(self) -> List[SlantLine]:
        return list(self._lines)

    @property
    def update_order(self) -> List[int]:
        return list(self._order)

    def line(self, index: int) -> SlantLine:
        return self._lines[index]

    @property
    def area_count(self) -> int:
        return len(self._cells)

    def area(self, index: int) -> Area:
        return Area.from_lines(index, self._cells[index], self._lines, self.config.degenerate_eps)

    def areas(self) -> List[Area]:
        eps = self.config.degenerate_eps
        return [Area.from_lines(i, cell, self._lines, eps) for i, cell in enumerate(self._cells)]

    def areas_touching(self, line: LineRef) -> List[Area]:
        return [area for area in self.areas() if area.touches(line)]

    def lines_near(self, point: Point2D, tolerance: Optional[float] = None) -> Optional[SlantLine]:
        """First interior line whose hit quad contains ``point``."""

        tol = self.config.line_tolerance if tolerance is None else tolerance
        for line in self.lines:
            if line.contains_point(point, tol):
                logger.debug("lines_near: %s hit line %d (%s)", point, line.index, line)
                return line
        return None

    def area_at(self, point: Point2D) -> Optional[Area]:
        for area in self.areas():
            if area.contains_point(point):
                return area
        return None

    # -- mutation ------------------------------------------------------------------

    def update(self) -> None:
        """Re-snap every interior line onto its attachments in dependency order."""

        for idx in self._order:
            self._lines[idx].update(self._lines, self.config.degenerate_eps)

    def _resolve(self, line: LineRef) -> SlantLine:
        return self._lines[line] if isinstance(line, int) else self._lines[line.index]

    def prepare_move(self, line: LineRef) -> None:
        target = self._resolve(line)
        target.prepare_move()
        self._snapshot = [ln.segment for ln in self._lines]
        self._moving = target.index
        min_size = self.config.min_cell_size
        # a cell that already starts smaller may keep its size but not shrink
        self._floors = {
            area.index: min(min_size, area.min_extent()) for area in self.areas_touching(target)
        }

    def _restore(self) -> None:
        if self._snapshot is None:
            raise LayoutError("no drag in progress, call prepare_move first")
        for ln, (start, end) in zip(self._lines, self._snapshot):
            ln.start = start
            ln.end = end

    def _apply(self, target: SlantLine, offset: float) -> None:
        self._restore()
        target.move(offset)
        self.update()

    def _admissible(self) -> bool:
        # only cells bounded by the moving line change shape
        return all(self.area(index).is_admissible(floor) for index, floor in self._floors.items())

    def move_line(self, line: LineRef, offset: float) -> float:
        """Move ``line`` by the cumulative gesture ``offset`` and re-snap the mesh.

        The offset is shortened by bisection when the full move would squeeze a
        cell bounded by ``line`` below ``min_cell_size`` (or below its size at
        :meth:`prepare_move`, if that was smaller) or turn it inside out.
        Returns the offset actually applied.
        """

        target = self._resolve(line)
        if target.is_outer:
            logger.debug("move_line: outer line %d is fixed", target.index)
            return 0.0
        if self._moving != target.index or self._snapshot is None:
            self.prepare_move(target)

        self._apply(target, offset)
        if self._admissible():
            return offset

        lo, hi = 0.0, offset
        for _ in range(self.config.clamp_iterations):
            mid = 0.5 * (lo + hi)
            self._apply(target, mid)
            if self._admissible():
                lo = mid
            else:
                hi = mid
        self._apply(target, lo)
        logger.warning("Line %d: offset %.3f clamped to %.3f", target.index, offset, lo)
        return lo

    def finish_move(self) -> None:
        self._snapshot = None
        self._moving = None
        self._floors = {}

    # -- frame output --------------------------------------------------------------

    def outer_segments(self) -> List[Segment]:
        return [line.segment for line in self.outer_lines]

    def line_segments(self) -> List[Segment]:
        return [line.segment for line in self.lines]

    def summary(self) -> List[Tuple[int, str, Point2D, Point2D]]:
        return [(line.index, line.direction.value, line.start, line.end) for line in self.lines]


apply_debug_logging(globals(), logger=logger)


__all__ = ["SlantLayout", "LayoutError"]
