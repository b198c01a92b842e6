import math

import pytest

from flashing_core.geometry import (
    angle_at_vertex,
    angle_label_position,
    distance,
    heading,
    interior_angle,
    midpoint,
    point_from_angle_distance,
    polyline_length,
    rotate_around,
    translate,
    unit_direction,
    upright_rotation,
)
from flashing_core.types import Point


def _close(p: Point, x: float, y: float, tol: float = 1e-9) -> bool:
    return math.isclose(p.x, x, abs_tol=tol) and math.isclose(p.y, y, abs_tol=tol)


def test_distance_and_midpoint():
    a, b = Point(0, 0), Point(3, 4)
    assert distance(a, b) == 5.0
    assert midpoint(a, b) == Point(1.5, 2.0)


def test_heading_measures_from_positive_x_axis():
    assert heading(Point(0, 0), Point(10, 0)) == 0.0
    assert math.isclose(heading(Point(0, 0), Point(0, 10)), 90.0)
    assert math.isclose(heading(Point(100, 0), Point(0, 0)), 180.0)


def test_angle_at_vertex_is_signed():
    a, b = Point(0, 0), Point(100, 0)
    assert math.isclose(angle_at_vertex(a, b, Point(100, 100)), -90.0)
    assert math.isclose(angle_at_vertex(a, b, Point(100, -100)), 90.0)
    assert math.isclose(interior_angle(a, b, Point(100, 100)), 90.0)


def test_straight_vertex_reports_180():
    assert math.isclose(angle_at_vertex(Point(0, 0), Point(1, 0), Point(2, 0)), 180.0)


def test_degenerate_vertex_returns_zero():
    assert angle_at_vertex(Point(1, 1), Point(1, 1), Point(5, 2)) == 0.0
    assert angle_at_vertex(Point(0, 0), Point(1, 1), Point(1, 1)) == 0.0
    assert unit_direction(Point(2, 2), Point(2, 2)) is None


def test_point_from_angle_distance():
    assert _close(point_from_angle_distance(Point(10, 10), 90.0, 5.0), 10.0, 15.0)
    assert _close(point_from_angle_distance(Point(0, 0), 180.0, 2.0), -2.0, 0.0)


def test_rotate_around_is_rigid():
    pivot = Point(1, 1)
    points = [Point(2, 1), Point(3, 2), Point(1, 5)]
    rotated = rotate_around(pivot, points, math.pi / 2)

    assert _close(rotated[0], 1.0, 2.0)
    for before, after in zip(points, rotated):
        assert math.isclose(distance(pivot, before), distance(pivot, after), rel_tol=1e-12)
    assert math.isclose(distance(points[0], points[1]), distance(rotated[0], rotated[1]), rel_tol=1e-12)


def test_rotate_around_handles_empty_and_zero_delta():
    assert rotate_around(Point(0, 0), [], 1.0) == []
    points = [Point(1, 2)]
    assert rotate_around(Point(0, 0), points, 0.0) == points


def test_translate():
    assert translate([Point(0, 0), Point(1, 1)], 2.0, -1.0) == [Point(2, -1), Point(3, 0)]


@pytest.mark.parametrize(
    'end, expected',
    [((10, 0), 0.0), ((0, 10), 90.0), ((-10, 0), 0.0), ((-10, -10), 45.0), ((10, -10), -45.0)],
)
def test_upright_rotation_keeps_text_readable(end, expected):
    angle = upright_rotation(Point(0, 0), Point(*end))
    assert -90.0 <= angle <= 90.0
    assert math.isclose(angle, expected, abs_tol=1e-9)


def test_angle_label_position_follows_bisector():
    pos = angle_label_position(Point(0, 0), Point(100, 0), Point(100, 100), offset=30)
    # unit bisector is (-1, 1) / sqrt(2)
    assert pos == Point(79, 21)


def test_angle_label_position_for_opposite_arms():
    pos = angle_label_position(Point(0, 0), Point(10, 0), Point(20, 0), offset=5)
    assert pos == Point(10, 5)


def test_polyline_length():
    assert polyline_length([Point(0, 0), Point(3, 4), Point(3, 10)]) == 11.0
    assert polyline_length([Point(0, 0)]) == 0
