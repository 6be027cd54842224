"""Layout templates: ordered cuts applied to the initial single cell.

A template starts from one area bounded by the four outer lines.  Each
:class:`CutStep` splits one existing area, either with a single line or with a
horizontal/vertical pair (``cross``).  The half that comes first (upper or
left) keeps the area's index and the remaining halves are appended, so step
indices always refer to the area list as it stands after the previous steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional, Tuple

from .line import Direction

Ratios = Tuple[float, float]
CutKind = Literal["line", "cross"]


@dataclass(frozen=True)
class CutStep:
    kind: CutKind
    area_index: int
    direction: Optional[Direction] = None
    # line: ratios of the new line; cross: ratios of the horizontal line
    ratios: Ratios = (0.5, 0.5)
    # cross only: ratios of the vertical line
    cross_ratios: Ratios = (0.5, 0.5)

    @classmethod
    def line(
        cls,
        area_index: int,
        direction: Direction,
        start_ratio: float,
        end_ratio: Optional[float] = None,
    ) -> "CutStep":
        end = start_ratio if end_ratio is None else end_ratio
        return cls("line", area_index, direction, (float(start_ratio), float(end)))

    @classmethod
    def cross(
        cls,
        area_index: int,
        horizontal: Ratios = (0.5, 0.5),
        vertical: Ratios = (0.5, 0.5),
    ) -> "CutStep":
        return cls(
            "cross",
            area_index,
            None,
            (float(horizontal[0]), float(horizontal[1])),
            (float(vertical[0]), float(vertical[1])),
        )

    @property
    def new_area_count(self) -> int:
        return 3 if self.kind == "cross" else 1


@dataclass(frozen=True)
class LayoutTemplate:
    name: str
    steps: Tuple[CutStep, ...] = field(default_factory=tuple)

    @property
    def area_count(self) -> int:
        return 1 + sum(step.new_area_count for step in self.steps)

    @property
    def line_count(self) -> int:
        return sum(2 if step.kind == "cross" else 1 for step in self.steps)


def grid(rows: int, cols: int) -> LayoutTemplate:
    """Straight ``rows`` x ``cols`` grid; every row is cut into columns separately."""

    if rows < 1 or cols < 1:
        raise ValueError(f"grid needs at least one row and one column, got {rows}x{cols}")
    steps: List[CutStep] = []
    for r in range(rows - 1):
        steps.append(CutStep.line(r, Direction.HORIZONTAL, 1.0 / (rows - r)))
    count = rows
    for r in range(rows):
        target = r
        for c in range(cols - 1):
            steps.append(CutStep.line(target, Direction.VERTICAL, 1.0 / (cols - c)))
            target = count
            count += 1
    return LayoutTemplate(f"grid_{rows}x{cols}", tuple(steps))


_PRESETS: Dict[str, Callable[[], LayoutTemplate]] = {
    "single": lambda: LayoutTemplate("single"),
    "two_horizontal_slant": lambda: LayoutTemplate(
        "two_horizontal_slant",
        (CutStep.line(0, Direction.HORIZONTAL, 0.4, 0.6),),
    ),
    "two_vertical_slant": lambda: LayoutTemplate(
        "two_vertical_slant",
        (CutStep.line(0, Direction.VERTICAL, 0.6, 0.4),),
    ),
    "cross": lambda: LayoutTemplate("cross", (CutStep.cross(0),)),
    "three_slant": lambda: LayoutTemplate(
        "three_slant",
        (
            CutStep.line(0, Direction.HORIZONTAL, 0.45, 0.55),
            CutStep.line(1, Direction.VERTICAL, 0.6, 0.4),
        ),
    ),
    "four_slant": lambda: LayoutTemplate(
        "four_slant",
        (CutStep.cross(0, horizontal=(0.4, 0.6), vertical=(0.6, 0.4)),),
    ),
}


def template_names() -> List[str]:
    return sorted(_PRESETS)


def get_template(name: str) -> LayoutTemplate:
    """Look up a preset by name; ``grid_RxC`` names are built on demand."""

    if name.startswith("grid_"):
        try:
            rows, cols = (int(part) for part in name[len("grid_"):].split("x"))
        except ValueError:
            raise KeyError(f"malformed grid template name {name!r}") from None
        return grid(rows, cols)
    try:
        return _PRESETS[name]()
    except KeyError:
        raise KeyError(f"unknown template {name!r}; known: {', '.join(template_names())}") from None


__all__ = [
    "CutStep",
    "LayoutTemplate",
    "grid",
    "get_template",
    "template_names",
]
