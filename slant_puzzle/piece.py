"""Image pieces and the transforms that fit them into their cells.

A piece transform is a 3x3 homogeneous matrix mapping image-local pixel
coordinates (origin at the image's top-left corner) to view coordinates.  The
*base fit* comes from geometry alone; user drags and pinches are kept as a
delta on top of it so that a cell reshape does not throw them away.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Tuple

import numpy as np

from .area import Area
from .config import LayoutConfig, get_layout_config
from .geometry import Point2D, Rect

logger = logging.getLogger(__name__)

Size = Tuple[float, float]


def translation_matrix(dx: float, dy: float) -> np.ndarray:
    return np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]], dtype=float)


def scale_matrix(sx: float, sy: float, pivot: Point2D = (0.0, 0.0)) -> np.ndarray:
    px, py = pivot
    return np.array(
        [[sx, 0.0, px - sx * px], [0.0, sy, py - sy * py], [0.0, 0.0, 1.0]],
        dtype=float,
    )


def apply_matrix(matrix: np.ndarray, point: Point2D) -> Point2D:
    x, y, w = matrix @ np.array([point[0], point[1], 1.0], dtype=float)
    return float(x / w), float(y / w)


def base_fit(image_size: Size, area: Area, config: Optional[LayoutConfig] = None) -> np.ndarray:
    """Cover-fit an ``image_size`` rectangle onto ``area``'s bounding box.

    The image is scaled uniformly by ``max(box_w / img_w, box_h / img_h)`` and
    centred on the box, so no side of the box is left uncovered.  The scale is
    clamped to ``[min_fit_scale, max_fit_scale]`` which keeps degenerate cells
    and empty images finite.
    """

    cfg = config or get_layout_config()
    box = area.bounding_box()
    img_w = max(float(image_size[0]), cfg.degenerate_eps)
    img_h = max(float(image_size[1]), cfg.degenerate_eps)
    scale = max(box.width / img_w, box.height / img_h)
    if not math.isfinite(scale) or scale > cfg.max_fit_scale:
        logger.warning("Area %d: fit scale %r clamped to %g", area.index, scale, cfg.max_fit_scale)
        scale = cfg.max_fit_scale
    elif scale < cfg.min_fit_scale:
        logger.warning("Area %d: fit scale %r clamped to %g", area.index, scale, cfg.min_fit_scale)
        scale = cfg.min_fit_scale

    cx, cy = box.center
    tx = cx - img_w * scale * 0.5
    ty = cy - img_h * scale * 0.5
    return np.array([[scale, 0.0, tx], [0.0, scale, ty], [0.0, 0.0, 1.0]], dtype=float)


class Piece:
    """One image placed in one cell of the layout."""

    def __init__(
        self,
        image: Any,
        image_size: Size,
        area: Area,
        config: Optional[LayoutConfig] = None,
    ) -> None:
        self.image = image
        self.image_size: Size = (float(image_size[0]), float(image_size[1]))
        self.area_index = area.index
        self.config = config or get_layout_config()
        self.base_matrix = base_fit(self.image_size, area, self.config)
        self.matrix = self.base_matrix.copy()
        self.previous_matrix = self.matrix.copy()

    def __repr__(self) -> str:
        return f"Piece(area_index={self.area_index}, image_size={self.image_size})"

    def refit(self, area: Area) -> None:
        """Recompute the base fit for ``area`` and re-apply the user's edits on top."""

        delta = self.matrix @ np.linalg.inv(self.base_matrix)
        self.base_matrix = base_fit(self.image_size, area, self.config)
        self.matrix = delta @ self.base_matrix

    def fill(self, area: Area) -> None:
        """Drop any user edits and show the plain base fit."""

        self.base_matrix = base_fit(self.image_size, area, self.config)
        self.matrix = self.base_matrix.copy()

    def prepare(self) -> None:
        self.previous_matrix = self.matrix.copy()

    def translate(self, dx: float, dy: float) -> None:
        self.matrix = translation_matrix(dx, dy) @ self.previous_matrix

    def zoom(self, sx: float, sy: float, pivot: Point2D) -> None:
        self.matrix = scale_matrix(sx, sy, pivot) @ self.previous_matrix

    def contains_point(self, point: Point2D) -> bool:
        try:
            inverse = np.linalg.inv(self.matrix)
        except np.linalg.LinAlgError:
            return False
        x, y = apply_matrix(inverse, point)
        w, h = self.image_size
        return 0.0 <= x <= w and 0.0 <= y <= h

    def corners(self) -> List[Point2D]:
        w, h = self.image_size
        return [apply_matrix(self.matrix, p) for p in ((0.0, 0.0), (w, 0.0), (w, h), (0.0, h))]

    def bounds(self) -> Rect:
        return Rect.from_points(self.corners())


__all__ = [
    "Piece",
    "base_fit",
    "apply_matrix",
    "scale_matrix",
    "translation_matrix",
]
