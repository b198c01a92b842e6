"""Vector helpers for polylines in drawing space.

All functions are pure. Degenerate input (coincident points) never produces
NaN: angle helpers return ``0.0`` and direction helpers return ``None``.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .types import Point

_EPS = 1e-12


def _vec(a: Point, b: Point) -> Tuple[float, float]:
    return b.x - a.x, b.y - a.y


def _cross(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return a[0] * b[1] - a[1] * b[0]


def _dot(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return a[0] * b[0] + a[1] * b[1]


def deg_to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def rad_to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) * 0.5, (p1.y + p2.y) * 0.5)


def heading(p1: Point, p2: Point) -> float:
    """Direction of ``p1 -> p2`` in degrees, measured from the +x axis."""

    return rad_to_deg(math.atan2(p2.y - p1.y, p2.x - p1.x))


def unit_direction(p1: Point, p2: Point) -> Optional[Tuple[float, float]]:
    dx, dy = _vec(p1, p2)
    length = math.hypot(dx, dy)
    if length <= _EPS:
        return None
    return dx / length, dy / length


def angle_at_vertex(a: Point, b: Point, c: Point) -> float:
    """Signed angle at ``b`` from ``b->a`` to ``b->c``, in degrees within (-180, 180].

    Returns ``0.0`` when either adjacent segment has zero length.
    """

    v1 = _vec(b, a)
    v2 = _vec(b, c)
    if _dot(v1, v1) <= _EPS or _dot(v2, v2) <= _EPS:
        return 0.0
    deg = rad_to_deg(math.atan2(_cross(v1, v2), _dot(v1, v2)))
    if deg <= -180.0:
        deg += 360.0
    if deg > 180.0:
        deg -= 360.0
    return deg


def interior_angle(a: Point, b: Point, c: Point) -> float:
    """Unsigned interior angle at ``b`` in degrees (0..180)."""

    return abs(angle_at_vertex(a, b, c))


def point_from_angle_distance(origin: Point, angle_deg: float, dist: float) -> Point:
    theta = deg_to_rad(angle_deg)
    return Point(origin.x + dist * math.cos(theta), origin.y + dist * math.sin(theta))


def translate(points: Sequence[Point], dx: float, dy: float) -> List[Point]:
    if dx == 0.0 and dy == 0.0:
        return list(points)
    return [Point(p.x + dx, p.y + dy) for p in points]


def rotation_matrix(delta_radians: float) -> np.ndarray:
    cos_t = math.cos(delta_radians)
    sin_t = math.sin(delta_radians)
    return np.array([[cos_t, -sin_t], [sin_t, cos_t]], dtype=float)


def rotate_around(pivot: Point, points: Sequence[Point], delta_radians: float) -> List[Point]:
    """Rigidly rotate ``points`` about ``pivot`` by ``delta_radians``.

    Each point is transformed once by the same rotation matrix, so repeated
    calls never accumulate drift from intermediate results.
    """

    if not points:
        return []
    if delta_radians == 0.0:
        return list(points)
    coords = np.array([(p.x, p.y) for p in points], dtype=float)
    origin = np.array([pivot.x, pivot.y], dtype=float)
    rotated = (coords - origin) @ rotation_matrix(delta_radians).T + origin
    return [Point(float(x), float(y)) for x, y in rotated]


def upright_rotation(p1: Point, p2: Point) -> float:
    """Text rotation in degrees for a label along ``p1 -> p2``, kept readable."""

    angle = heading(p1, p2)
    if angle > 90.0:
        angle -= 180.0
    elif angle < -90.0:
        angle += 180.0
    return angle


def angle_label_position(a: Point, b: Point, c: Point, offset: float = 30.0) -> Point:
    """Point ``offset`` away from vertex ``b`` along the bisector of ``a-b-c``.

    Coordinates are rounded to whole pixels. When the two arms are opposite the
    perpendicular of ``b->a`` is used instead.
    """

    n1 = unit_direction(b, a)
    n2 = unit_direction(b, c)
    if n1 is None or n2 is None:
        return Point(round(b.x), round(b.y))
    bx, by = n1[0] + n2[0], n1[1] + n2[1]
    mag = math.hypot(bx, by)
    if mag <= _EPS:
        return Point(round(b.x + n1[1] * offset), round(b.y - n1[0] * offset))
    return Point(round(b.x + bx / mag * offset), round(b.y + by / mag * offset))


def polyline_length(points: Sequence[Point]) -> float:
    return sum(distance(points[i], points[i + 1]) for i in range(len(points) - 1))


__all__ = [
    "angle_at_vertex",
    "angle_label_position",
    "deg_to_rad",
    "distance",
    "heading",
    "interior_angle",
    "midpoint",
    "point_from_angle_distance",
    "polyline_length",
    "rad_to_deg",
    "rotate_around",
    "rotation_matrix",
    "translate",
    "unit_direction",
    "upright_rotation",
]
