"""TikZ rendering of a puzzle :class:`~slant_puzzle.session.Frame`.

View coordinates are emitted unchanged; the picture's ``y`` unit is negative so
that the screen convention (y grows downwards) survives.  Each piece is clipped
to its cell polygon and drawn in its own image coordinates under a
``cm={a,b,c,d,(tx,ty)}`` transform taken from the piece matrix, then the outer
border and the slant lines are stroked on top.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from .geometry import Point2D
from .session import Frame, FramePiece

DEFAULT_UNIT_CM = 0.05

standalone_tpl = r"""\documentclass[border=2pt]{standalone}
\usepackage{graphicx}
\usepackage{tikz}
\tikzset{
  sp/line width/.store in=\spLW,     sp/line width=1.2pt,
  sp/border width/.store in=\spBW,   sp/border width=1.6pt,
  border/.style={line width=\spBW, draw=black},
  slant/.style={line width=\spLW, draw=white, double=black, double distance=0.4pt},
  placeholder/.style={fill=black!12, draw=black!40, line width=0.4pt},
}
\begin{document}
%s
%s
\end{document}
"""


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for TikZ output")
    formatted = f"{value:.4f}"
    formatted = formatted.rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted


def _coord(point: Point2D) -> str:
    return f"({_format_float(point[0])},{_format_float(point[1])})"


def _path(points: Sequence[Point2D], *, closed: bool) -> str:
    body = " -- ".join(_coord(p) for p in points)
    return body + (" -- cycle" if closed else "")


def _cm_option(piece: FramePiece) -> str:
    m = piece.matrix
    # the picture flips y, so the off-diagonal terms change sign on the canvas
    values = (m[0, 0], -m[1, 0], -m[0, 1], m[1, 1])
    a, b, c, d = (_format_float(float(v)) for v in values)
    return f"cm={{{a},{b},{c},{d},{_coord((float(m[0, 2]), float(m[1, 2])))}}}"


def _piece_lines(piece: FramePiece, unit_cm: float) -> List[str]:
    w, h = piece.image_size
    out = [
        f"  % piece in area {piece.area_index}",
        "  \\begin{scope}",
        f"    \\clip {_path(piece.polygon, closed=True)};",
        f"    \\begin{{scope}}[{_cm_option(piece)}]",
    ]
    if isinstance(piece.image, str) and piece.image:
        out.append(
            "      \\node[anchor=north west, inner sep=0pt, transform shape] at (0,0) "
            f"{{\\includegraphics[width={_format_float(w * unit_cm)}cm,"
            f"height={_format_float(h * unit_cm)}cm]{{{piece.image}}}}};"
        )
    else:
        corner = _coord((w, h))
        out.append(f"      \\path[placeholder] (0,0) rectangle {corner};")
        out.append(f"      \\draw[black!30] (0,0) -- {corner};")
        out.append(f"      \\draw[black!30] {_coord((w, 0.0))} -- {_coord((0.0, h))};")
    out.append("    \\end{scope}")
    out.append("  \\end{scope}")
    return out


def generate_tikz_code(frame: Frame, *, unit_cm: float = DEFAULT_UNIT_CM) -> str:
    """Render ``frame`` as a single ``tikzpicture`` environment."""

    if unit_cm <= 0.0:
        raise ValueError("unit_cm must be positive")
    unit = _format_float(unit_cm)
    lines: List[str] = [f"\\begin{{tikzpicture}}[x={unit}cm, y=-{unit}cm]"]
    for piece in frame.pieces:
        lines.extend(_piece_lines(piece, unit_cm))
    for start, end in frame.outer:
        lines.append(f"  \\draw[border] {_coord(start)} -- {_coord(end)};")
    for start, end in frame.lines:
        lines.append(f"  \\draw[slant] {_coord(start)} -- {_coord(end)};")
    lines.append("\\end{tikzpicture}")
    return "\n".join(lines)


def generate_tikz_document(
    frame: Frame,
    *,
    title: str = "",
    unit_cm: float = DEFAULT_UNIT_CM,
) -> str:
    """Render a standalone LaTeX document containing ``frame``."""

    header = f"% {title.strip()}" if title.strip() else ""
    return standalone_tpl % (header, generate_tikz_code(frame, unit_cm=unit_cm))


__all__ = ["generate_tikz_code", "generate_tikz_document"]
