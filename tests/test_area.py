import pytest

from slant_puzzle import Rect, SlantLayout, get_template
from slant_puzzle.area import Area


@pytest.fixture
def layout():
    return SlantLayout(get_template("four_slant"), Rect(0.0, 0.0, 100.0, 100.0))


def test_every_area_contains_its_centroid(layout):
    for area in layout.areas():
        assert area.contains_point(area.centroid())


def test_area_rejects_points_outside_the_mesh(layout):
    for area in layout.areas():
        assert not area.contains_point((-500.0, -500.0))
        assert not area.contains_point((1000.0, 50.0))


def test_areas_partition_sample_points(layout):
    for x in range(4, 100, 10):
        for y in range(7, 100, 10):
            hits = [area.index for area in layout.areas() if area.contains_point((float(x), float(y)))]
            assert len(hits) == 1, (x, y, hits)


def test_touches_compares_bounding_lines(layout):
    h, v = layout.lines
    first = layout.area(0)
    assert first.touches(h)
    assert first.touches(v.index)
    assert first.touches(0) and first.touches(1)
    assert not first.touches(2)
    assert not first.touches(3)


def test_slanted_cell_shape_and_box(layout):
    # horizontal line runs (0,40)-(100,60), vertical (60,0)-(40,100)
    area = layout.area(0)
    tl, tr, br, bl = area.points
    assert tl == pytest.approx((0.0, 0.0))
    assert tr == pytest.approx((60.0, 0.0))
    assert bl == pytest.approx((0.0, 40.0))
    assert br[0] == pytest.approx(50.0, abs=1.0)
    assert area.bounding_box().left == pytest.approx(0.0)
    assert area.width == pytest.approx(60.0)
    assert area.is_convex()
    assert area.is_admissible(10.0)
    assert not area.is_admissible(100.0)


def test_inverted_cell_is_not_convex():
    area = Area(0, (0, 1, 2, 3), ((0.0, 0.0), (0.0, 10.0), (10.0, 10.0), (10.0, 0.0)))
    assert not area.is_convex()
    assert all(turn < 0.0 for turn in area.turns())


def test_sheared_cell_is_limited_by_corner_to_edge_distance():
    area = Area(0, (0, 1, 2, 3), ((0.0, 0.0), (40.0, 0.0), (50.0, 10.0), (10.0, 10.0)))
    assert area.is_convex()
    assert min(area.edge_lengths()) == pytest.approx(200.0 ** 0.5)
    assert min(area.corner_distances()) == pytest.approx(10.0)
    assert area.min_extent() == pytest.approx(10.0)
    assert area.is_admissible(10.0 - 1e-9)
    assert not area.is_admissible(12.0)


def test_rectangle_corner_distances_are_its_sides():
    area = Area(0, (0, 1, 2, 3), ((0.0, 0.0), (50.0, 0.0), (50.0, 20.0), (0.0, 20.0)))
    assert sorted(area.corner_distances()) == pytest.approx([20.0] * 4 + [50.0] * 4)
