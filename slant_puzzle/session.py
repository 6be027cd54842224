"""Puzzle session: owns the layout and pieces and turns pointer events into edits.

The host UI feeds normalised :class:`PointerEvent` objects into
:meth:`PuzzleSession.handle` from its single input thread and redraws from
:meth:`PuzzleSession.frame` whenever ``on_invalidate`` fires.  Within one move
event the order is always line move, mesh update, piece refit, redraw request.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Literal, Optional, Tuple

import numpy as np

from .area import Area
from .config import LayoutConfig, get_layout_config
from .geometry import Point2D, Rect, Segment, distance, midpoint
from .layout import SlantLayout
from .line import Direction, SlantLine
from .piece import Piece, Size
from .templates import LayoutTemplate

logger = logging.getLogger(__name__)

Phase = Literal["down", "pointer_down", "move", "up"]


class ActionMode(enum.Enum):
    NONE = "none"
    DRAG = "drag"
    ZOOM = "zoom"
    MOVE = "move"


@dataclass(frozen=True)
class PointerEvent:
    phase: Phase
    points: Tuple[Point2D, ...]

    @classmethod
    def of(cls, phase: Phase, *points: Point2D) -> "PointerEvent":
        return cls(phase, tuple((float(x), float(y)) for x, y in points))


@dataclass
class FramePiece:
    area_index: int
    polygon: Tuple[Point2D, ...]
    matrix: np.ndarray
    image: Any
    image_size: Size


@dataclass
class Frame:
    outer: List[Segment] = field(default_factory=list)
    lines: List[Segment] = field(default_factory=list)
    pieces: List[FramePiece] = field(default_factory=list)
    bounds: Optional[Rect] = None


class PuzzleSession:
    def __init__(
        self,
        bounds: Optional[Rect] = None,
        config: Optional[LayoutConfig] = None,
        on_invalidate: Optional[Callable[[], None]] = None,
    ) -> None:
        self.config = config or get_layout_config()
        self.bounds = bounds
        self.on_invalidate = on_invalidate
        self.layout: Optional[SlantLayout] = None
        self.template: Optional[LayoutTemplate] = None
        self.pieces: List[Piece] = []
        self.mode = ActionMode.NONE
        self.handling_line: Optional[SlantLine] = None
        self.handling_piece: Optional[Piece] = None
        self.affected_pieces: List[Piece] = []
        self.down: Point2D = (0.0, 0.0)
        self.previous_distance = 0.0
        self.mid_point: Point2D = (0.0, 0.0)
        self.redraw_requests = 0

    def _invalidate(self) -> None:
        self.redraw_requests += 1
        if self.on_invalidate is not None:
            self.on_invalidate()

    # -- configuration -------------------------------------------------------------

    def _end_gesture(self) -> None:
        if self.mode is ActionMode.MOVE and self.layout is not None:
            self.layout.finish_move()
        self.mode = ActionMode.NONE
        self.handling_line = None
        self.handling_piece = None
        self.affected_pieces = []

    def set_layout(self, template: LayoutTemplate) -> None:
        self._end_gesture()
        self.template = template
        self.layout = SlantLayout(template, self.bounds, self.config)
        if self.layout.is_built:
            count = self.layout.area_count
            if len(self.pieces) > count:
                logger.warning("New layout has %d area(s); dropping %d piece(s)", count, len(self.pieces) - count)
                del self.pieces[count:]
            self._refit(self.pieces)
        self._invalidate()

    def set_bounds(self, bounds: Rect) -> None:
        """Resize: move the outer border and lay the template out again."""

        self._end_gesture()
        self.bounds = bounds
        if self.layout is not None and self.template is not None:
            self.layout.set_outer_boundary(bounds)
            self.layout.layout()
            self._refit(self.pieces)
        self._invalidate()

    @property
    def area_count(self) -> int:
        if self.layout is None or not self.layout.is_built:
            return 0
        return self.layout.area_count

    def add_piece(self, image: Any, image_size: Size) -> Optional[Piece]:
        position = len(self.pieces)
        if self.layout is None or not self.layout.is_built:
            logger.error("add_piece: no layout has been laid out yet")
            return None
        if position >= self.layout.area_count:
            logger.error(
                "add_piece: can not add more, the current layout holds %d piece(s)",
                self.layout.area_count,
            )
            return None
        piece = Piece(image, image_size, self.layout.area(position), self.config)
        self.pieces.append(piece)
        self._invalidate()
        return piece

    def add_pieces(self, items: Iterable[Tuple[Any, Size]]) -> int:
        added = 0
        for image, size in items:
            if self.add_piece(image, size) is not None:
                added += 1
        return added

    def reset(self) -> None:
        self._end_gesture()
        if self.layout is not None:
            self.layout.reset()
        self.pieces.clear()
        self._invalidate()

    # -- input ---------------------------------------------------------------------

    def handle(self, event: PointerEvent) -> None:
        if not event.points and event.phase != "up":
            return
        if event.phase == "down":
            self.down = event.points[0]
            self._decide_mode(event)
            self._prepare_action()
        elif event.phase == "pointer_down":
            if len(event.points) > 1:
                self.previous_distance = distance(event.points[0], event.points[1])
                self.mid_point = midpoint(event.points[0], event.points[1])
            self._decide_mode(event)
        elif event.phase == "move":
            self._perform_action(event)
            self._invalidate()
        elif event.phase == "up":
            self._end_gesture()

    def _decide_mode(self, event: PointerEvent) -> None:
        if len(event.points) == 1:
            self.mode = ActionMode.NONE
            self.handling_piece = None
            self.handling_line = self._find_line()
            if self.handling_line is not None:
                self.mode = ActionMode.MOVE
            else:
                self.handling_piece = self._find_piece(self.down)
                if self.handling_piece is not None:
                    self.mode = ActionMode.DRAG
        elif len(event.points) > 1:
            piece = self.handling_piece
            if (
                piece is not None
                and self.mode is ActionMode.DRAG
                and piece.contains_point(event.points[1])
            ):
                self.mode = ActionMode.ZOOM
                piece.prepare()

    def _prepare_action(self) -> None:
        if self.mode is ActionMode.DRAG and self.handling_piece is not None:
            self.handling_piece.prepare()
        elif self.mode is ActionMode.MOVE and self.handling_line is not None and self.layout is not None:
            self.layout.prepare_move(self.handling_line)
            self.affected_pieces = [
                piece
                for piece in self.pieces
                if self.layout.area(piece.area_index).touches(self.handling_line)
            ]
            for piece in self.affected_pieces:
                piece.prepare()

    def _perform_action(self, event: PointerEvent) -> None:
        if self.mode is ActionMode.MOVE:
            self._move_line(event)
        elif self.mode is ActionMode.DRAG and self.handling_piece is not None:
            x, y = event.points[0]
            self.handling_piece.translate(x - self.down[0], y - self.down[1])
        elif self.mode is ActionMode.ZOOM and self.handling_piece is not None:
            if len(event.points) < 2 or self.previous_distance <= 0.0:
                return
            scale = distance(event.points[0], event.points[1]) / self.previous_distance
            self.handling_piece.zoom(scale, scale, self.mid_point)

    def _move_line(self, event: PointerEvent) -> None:
        line = self.handling_line
        if line is None or self.layout is None:
            return
        x, y = event.points[0]
        if line.direction is Direction.HORIZONTAL:
            offset = y - self.down[1]
        else:
            offset = x - self.down[0]
        self.layout.move_line(line, offset)
        self._refit(self.affected_pieces)

    def _find_line(self) -> Optional[SlantLine]:
        if self.layout is None:
            return None
        return self.layout.lines_near(self.down, self.config.line_tolerance)

    def _find_piece(self, point: Point2D) -> Optional[Piece]:
        if self.layout is None:
            return None
        for piece in self.pieces:
            if self.layout.area(piece.area_index).contains_point(point) and piece.contains_point(point):
                return piece
        return None

    def _refit(self, pieces: Iterable[Piece]) -> None:
        if self.layout is None:
            return
        for piece in pieces:
            piece.refit(self.layout.area(piece.area_index))

    # -- output --------------------------------------------------------------------

    def frame(self) -> Frame:
        if self.layout is None or not self.layout.is_built:
            return Frame(bounds=self.bounds)
        areas: List[Area] = self.layout.areas()
        return Frame(
            outer=self.layout.outer_segments(),
            lines=self.layout.line_segments(),
            pieces=[
                FramePiece(
                    area_index=piece.area_index,
                    polygon=areas[piece.area_index].points,
                    matrix=piece.matrix.copy(),
                    image=piece.image,
                    image_size=piece.image_size,
                )
                for piece in self.pieces
            ],
            bounds=self.bounds,
        )


__all__ = ["ActionMode", "PointerEvent", "Frame", "FramePiece", "PuzzleSession"]
