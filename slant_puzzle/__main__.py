import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from slant_puzzle import (
    PointerEvent,
    PuzzleSession,
    Rect,
    generate_tikz_document,
    get_template,
    template_names,
)
from slant_puzzle.geometry import lerp
from slant_puzzle.line import Direction

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_drag(value: str) -> Tuple[int, float]:
    try:
        line, offset = value.split(":", 1)
        return int(line), float(offset)
    except ValueError:
        raise argparse.ArgumentTypeError(f"drag must look like LINE:OFFSET, got {value!r}") from None


def _parse_size(value: str) -> Tuple[float, float]:
    try:
        w, h = value.lower().split("x", 1)
        return float(w), float(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like WxH, got {value!r}") from None


def _drag_line(session: PuzzleSession, position: int, offset: float) -> None:
    """Replay a drag of the ``position``-th interior line as pointer events."""

    if session.layout is None:
        logger.warning("No layout to drag line %d in", position)
        return
    lines = session.layout.lines
    if not 0 <= position < len(lines):
        logger.warning("No interior line %d (layout has %d)", position, len(lines))
        return
    line = lines[position]
    # a quarter along the line stays clear of crossing lines
    x, y = lerp(line.start, line.end, 0.25)
    if line.direction is Direction.HORIZONTAL:
        target = (x, y + offset)
    else:
        target = (x + offset, y)
    session.handle(PointerEvent.of("down", (x, y)))
    session.handle(PointerEvent.of("move", target))
    session.handle(PointerEvent.of("up"))


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out a slant photo puzzle")
    parser.add_argument(
        "--template",
        default="cross",
        help=f"Layout template: {', '.join(template_names())} or grid_RxC (default: cross)",
    )
    parser.add_argument("--width", type=float, default=400.0, help="Outer width (default: 400)")
    parser.add_argument("--height", type=float, default=300.0, help="Outer height (default: 300)")
    parser.add_argument(
        "--drag",
        type=_parse_drag,
        action="append",
        default=[],
        metavar="LINE:OFFSET",
        help="Drag interior line LINE by OFFSET along its axis (repeatable)",
    )
    parser.add_argument(
        "--image",
        action="append",
        default=[],
        help="Image path to place into the next free cell (repeatable)",
    )
    parser.add_argument(
        "--images",
        type=int,
        default=0,
        help="Number of placeholder pieces to add after --image entries",
    )
    parser.add_argument(
        "--image-size",
        type=_parse_size,
        default=(400.0, 300.0),
        help="Natural image size WxH used for every piece (default: 400x300)",
    )
    parser.add_argument("--tikz-output-path", help="Write a standalone TikZ document to the given path")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        template = get_template(args.template)
    except KeyError as exc:
        logger.error("%s", exc.args[0])
        raise SystemExit(1)

    session = PuzzleSession(Rect(0.0, 0.0, args.width, args.height))
    session.set_layout(template)

    items: List[Tuple[object, Tuple[float, float]]] = [(path, args.image_size) for path in args.image]
    items.extend((None, args.image_size) for _ in range(args.images))
    added = session.add_pieces(items)
    if added < len(items):
        logger.warning("Only %d of %d piece(s) fit into the layout", added, len(items))

    for position, offset in args.drag:
        logger.info("Dragging line %d by %.3f", position, offset)
        _drag_line(session, position, offset)

    layout = session.layout
    if layout is None:
        logger.error("Template %r did not produce a layout", template.name)
        raise SystemExit(1)
    print(f"Template: {template.name}")
    print("Lines:")
    for index, direction, start, end in layout.summary():
        print(f"  [{index}] {direction}: ({start[0]:.3f}, {start[1]:.3f}) -> ({end[0]:.3f}, {end[1]:.3f})")
    print("Areas:")
    for area in layout.areas():
        corners = ", ".join(f"({x:.3f}, {y:.3f})" for x, y in area.points)
        print(f"  [{area.index}] {corners}")
    print(f"Pieces: {len(session.pieces)}/{session.area_count}")

    if args.tikz_output_path:
        output_path = Path(args.tikz_output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing TikZ document to %s", output_path)
        document = generate_tikz_document(session.frame(), title=template.name)
        output_path.write_text(document, encoding="utf-8")
        print(f"TikZ document written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
