import logging

import numpy as np
import pytest

from slant_puzzle import CutStep, Direction, LayoutError, LayoutTemplate, Rect, SlantLayout, get_template, grid
from slant_puzzle import layout as layout_module
from slant_puzzle.geometry import intersect
from slant_puzzle.line import SlantLine

SQUARE = Rect(0.0, 0.0, 100.0, 100.0)


def _pts(value):
    return np.asarray(value, dtype=float)


def _cross_layout() -> SlantLayout:
    return SlantLayout(get_template("cross"), SQUARE)


def _segments(layout: SlantLayout):
    return [line.segment for line in layout.all_lines]


def _assert_attached(layout: SlantLayout) -> None:
    lines = layout.all_lines
    for line in layout.lines:
        assert line.start == pytest.approx(intersect(line.segment, lines[line.start_anchor()].segment))
        assert line.end == pytest.approx(intersect(line.segment, lines[line.end_anchor()].segment))


def test_cross_layout_positions_and_area_order():
    layout = _cross_layout()
    h, v = layout.lines
    assert h.direction is Direction.HORIZONTAL and v.direction is Direction.VERTICAL
    assert _pts(h.segment) == pytest.approx(_pts(((0.0, 50.0), (100.0, 50.0))))
    assert _pts(v.segment) == pytest.approx(_pts(((50.0, 0.0), (50.0, 100.0))))
    assert layout.area_count == 4
    top_lefts = [area.points[0] for area in layout.areas()]
    assert _pts(top_lefts) == pytest.approx(_pts([(0.0, 0.0), (50.0, 0.0), (0.0, 50.0), (50.0, 50.0)]))
    assert _pts(layout.area(0).points) == pytest.approx(_pts(((0.0, 0.0), (50.0, 0.0), (50.0, 50.0), (0.0, 50.0))))
    _assert_attached(layout)


def test_moving_horizontal_line_moves_its_endpoints_and_keeps_outer_lines():
    layout = _cross_layout()
    outer_before = layout.outer_segments()
    h, v = layout.lines
    layout.prepare_move(h)
    applied = layout.move_line(h, 20.0)
    assert applied == 20.0
    assert h.start == pytest.approx((0.0, 70.0))
    assert h.end == pytest.approx((100.0, 70.0))
    assert _pts(v.segment) == pytest.approx(_pts(((50.0, 0.0), (50.0, 100.0))))
    assert layout.outer_segments() == outer_before
    assert layout.area(0).points[3] == pytest.approx((0.0, 70.0))
    _assert_attached(layout)


def test_attached_vertical_endpoint_follows_slanted_horizontal_line():
    template = LayoutTemplate(
        "slant_t",
        (
            CutStep.line(0, Direction.HORIZONTAL, 0.4, 0.6),
            CutStep.line(1, Direction.VERTICAL, 0.5),
        ),
    )
    layout = SlantLayout(template, SQUARE)
    h, v = layout.lines
    assert v.attach_start == h.index
    assert layout.update_order == [h.index, v.index]
    assert v.start == pytest.approx((50.0, 50.0))

    layout.prepare_move(h)
    layout.move_line(h, 20.0)
    assert _pts(h.segment) == pytest.approx(_pts(((0.0, 60.0), (100.0, 80.0))))
    assert v.start == pytest.approx((50.0, 70.0))
    assert v.end == pytest.approx((50.0, 100.0))
    _assert_attached(layout)


def test_move_line_is_idempotent_for_the_same_cumulative_offset():
    layout = SlantLayout(get_template("four_slant"), SQUARE)
    h = layout.lines[0]
    layout.prepare_move(h)
    layout.move_line(h, 12.5)
    first = _segments(layout)
    layout.move_line(h, 12.5)
    assert _segments(layout) == first


def test_update_twice_is_stable():
    layout = SlantLayout(get_template("three_slant"), SQUARE)
    layout.update()
    first = _segments(layout)
    layout.update()
    assert _segments(layout) == first
    _assert_attached(layout)


@pytest.mark.parametrize("offset", [500.0, 40.0, 45.0])
def test_drag_past_boundary_is_clamped(offset, caplog):
    layout = _cross_layout()
    h = layout.lines[0]
    layout.prepare_move(h)
    applied = layout.move_line(h, offset)
    assert applied <= 40.0 + 1e-9
    assert 89.99 < h.start[1] <= 90.0 + 1e-9
    assert all(area.is_convex() for area in layout.areas())
    assert all(min(area.edge_lengths()) >= 10.0 - 1e-9 for area in layout.areas())
    if offset > 40.0:
        assert "clamped" in caplog.text


def test_drag_upwards_is_clamped_near_top():
    layout = _cross_layout()
    v = layout.lines[1]
    layout.prepare_move(v)
    layout.move_line(v, -1000.0)
    assert 10.0 - 1e-9 <= v.start[0] < 10.01
    assert all(area.is_convex() for area in layout.areas())


def test_slanted_drag_never_inverts_cells():
    layout = SlantLayout(get_template("four_slant"), SQUARE)
    h = layout.lines[0]
    layout.prepare_move(h)
    for offset in (10.0, 30.0, 55.0, 80.0, 200.0, -200.0):
        layout.move_line(h, offset)
        assert all(area.is_admissible(10.0 - 1e-6) for area in layout.areas())


def test_drag_is_not_blocked_by_a_small_cell_it_does_not_bound(caplog):
    template = LayoutTemplate(
        "rows",
        (
            CutStep.line(0, Direction.HORIZONTAL, 0.08),
            CutStep.line(1, Direction.HORIZONTAL, 0.5),
        ),
    )
    layout = SlantLayout(template, SQUARE)
    middle = layout.lines[1]
    assert layout.area(0).height == pytest.approx(8.0)

    with caplog.at_level(logging.WARNING, logger=layout_module.__name__):
        assert layout.move_line(middle, 10.0) == 10.0
    assert "clamped" not in caplog.text
    assert middle.start == pytest.approx((0.0, 64.0))
    layout.finish_move()


def test_cell_already_below_min_size_may_grow_but_not_shrink():
    template = LayoutTemplate(
        "rows",
        (
            CutStep.line(0, Direction.HORIZONTAL, 0.08),
            CutStep.line(1, Direction.HORIZONTAL, 0.5),
        ),
    )
    layout = SlantLayout(template, SQUARE)
    thin = layout.lines[0]
    assert layout.move_line(thin, -3.0) == 0.0
    assert thin.start == pytest.approx((0.0, 8.0))
    assert layout.move_line(thin, 5.0) == 5.0
    assert thin.start == pytest.approx((0.0, 13.0))


def test_clamp_keeps_corners_away_from_opposite_edges():
    template = LayoutTemplate(
        "steep",
        (
            CutStep.line(0, Direction.VERTICAL, 0.1, 0.6),
            CutStep.line(1, Direction.VERTICAL, 0.3, 0.5),
        ),
    )
    layout = SlantLayout(template, SQUARE)
    steep = layout.lines[1]
    layout.prepare_move(steep)
    applied = layout.move_line(steep, -1000.0)
    assert applied < 0.0
    for area in layout.areas_touching(steep):
        assert area.is_convex()
        assert min(area.corner_distances()) >= 10.0 - 1e-6


def test_outer_lines_do_not_move():
    layout = _cross_layout()
    before = layout.outer_segments()
    assert layout.move_line(1, 30.0) == 0.0
    assert layout.outer_segments() == before


def test_lines_near_returns_first_hit_or_none():
    layout = _cross_layout()
    h, v = layout.lines
    assert layout.lines_near((25.0, 55.0)) is h
    assert layout.lines_near((55.0, 20.0)) is v
    assert layout.lines_near((50.0, 50.0)) is h
    assert layout.lines_near((20.0, 20.0)) is None
    assert layout.lines_near((25.0, 58.0), tolerance=5.0) is None


def test_area_at_and_areas_touching():
    layout = _cross_layout()
    assert layout.area_at((75.0, 75.0)).index == 3
    assert layout.area_at((500.0, 500.0)) is None
    assert len(layout.areas_touching(layout.lines[0])) == 4


def test_reset_and_build_reproduce_identical_positions():
    layout = SlantLayout(get_template("four_slant"), SQUARE)
    initial = _segments(layout)
    h = layout.lines[0]
    layout.prepare_move(h)
    layout.move_line(h, 17.0)
    layout.finish_move()
    layout.reset()
    assert not layout.is_built
    assert layout.area_count == 0
    layout.build(get_template("four_slant"), SQUARE)
    assert _segments(layout) == initial


def test_set_outer_boundary_then_layout_rescales():
    layout = _cross_layout()
    layout.set_outer_boundary(Rect(0.0, 0.0, 200.0, 100.0))
    assert layout.outer_segments()[1] == ((0.0, 0.0), (200.0, 0.0))
    layout.layout()
    assert _pts(layout.lines[0].segment) == pytest.approx(_pts(((0.0, 50.0), (200.0, 50.0))))
    assert _pts(layout.lines[1].segment) == pytest.approx(_pts(((100.0, 0.0), (100.0, 100.0))))


def test_grid_template_builds_convex_cells_in_reading_order():
    layout = SlantLayout(grid(2, 3), Rect(0.0, 0.0, 90.0, 60.0))
    assert layout.area_count == 6
    assert len(layout.lines) == 1 + 2 * 2
    corners = [area.points[0] for area in layout.areas()]
    assert _pts(corners) == pytest.approx(_pts([(0.0, 0.0), (30.0, 0.0), (60.0, 0.0), (0.0, 30.0), (30.0, 30.0), (60.0, 30.0)]))
    assert all(area.is_convex() for area in layout.areas())


@pytest.mark.parametrize(
    "template",
    [
        LayoutTemplate("bad_ratio", (CutStep.line(0, Direction.HORIZONTAL, 0.0),)),
        LayoutTemplate("bad_ratio_end", (CutStep.line(0, Direction.VERTICAL, 0.5, 1.2),)),
        LayoutTemplate("bad_index", (CutStep.line(3, Direction.VERTICAL, 0.5),)),
        LayoutTemplate("bad_cross", (CutStep.cross(0, vertical=(0.5, 1.0)),)),
        LayoutTemplate("no_direction", (CutStep("line", 0),)),
    ],
)
def test_malformed_templates_raise_layout_error(template):
    with pytest.raises(LayoutError):
        SlantLayout(template, SQUARE)


def test_layout_needs_template_and_bounds():
    with pytest.raises(LayoutError):
        SlantLayout(get_template("cross")).layout()
    with pytest.raises(LayoutError):
        SlantLayout(get_template("cross"), Rect(0.0, 0.0, 0.0, 10.0))


def test_dependency_order_rejects_cycles():
    layout = _cross_layout()
    lines = layout.all_lines
    a = SlantLine(6, Direction.HORIZONTAL, (0.0, 20.0), (100.0, 20.0), attach_start=7, attach_end=2)
    b = SlantLine(7, Direction.VERTICAL, (20.0, 0.0), (20.0, 100.0), attach_start=6, attach_end=3)
    with pytest.raises(LayoutError, match="cycle"):
        layout_module._dependency_order(lines + [a, b])


def test_debug_logging_traces_layout_calls(caplog):
    layout = _cross_layout()
    with caplog.at_level(logging.DEBUG, logger="slant_puzzle.layout"):
        layout.update()
    assert any("Entering SlantLayout.update" in record.getMessage() for record in caplog.records)


def test_restoring_without_a_prepared_move_raises():
    layout = _cross_layout()
    with pytest.raises(LayoutError):
        layout._restore()
