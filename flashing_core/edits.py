"""Point, length and angle edits on a single line.

Every editor takes a :class:`~flashing_core.types.Line` and returns an
:class:`EditOutcome` holding a new line; the input is never modified. Invalid
numbers are reported as ``rejected`` together with the value to redisplay,
structural problems as ``not-applicable``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence
from typing import Literal

from .folds import new_position_by_angle_length
from .geometry import (
    angle_at_vertex,
    deg_to_rad,
    distance,
    interior_angle,
    rotate_around,
    translate,
    unit_direction,
)
from .logging_utils import apply_debug_logging
from .types import End, InvalidInputError, Line, Point

logger = logging.getLogger(__name__)

EditStatus = Literal["applied", "rejected", "not-applicable", "nothing-to-rotate"]
Side = Literal["head", "tail"]

_LENGTH_TOLERANCE = 1e-6
_ANGLE_TOLERANCE = 1e-6


@dataclass(frozen=True)
class EditOutcome:
    status: EditStatus
    line: Line
    reason: str = ""
    display_value: Optional[float] = None

    @property
    def applied(self) -> bool:
        return self.status == "applied"


def _not_applicable(line: Line, reason: str) -> EditOutcome:
    logger.info("Edit on line %s not applicable: %s", line.id, reason)
    return EditOutcome("not-applicable", line, reason)


def parse_length(value: object) -> float:
    """Parse a strictly positive, finite length."""

    try:
        length = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"length {value!r} is not a number") from exc
    if not math.isfinite(length) or length <= 0.0:
        raise InvalidInputError(f"length must be positive, got {value!r}")
    return length


def parse_interior_angle(value: object) -> float:
    """Parse an interior angle in degrees within the open range (0, 180)."""

    try:
        angle = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"angle {value!r} is not a number") from exc
    if not math.isfinite(angle) or angle <= 0.0 or angle >= 180.0:
        raise InvalidInputError(f"angle must be within (0, 180), got {value!r}")
    return angle


def segment_lengths(points: Sequence[Point]) -> List[float]:
    return [distance(points[i], points[i + 1]) for i in range(len(points) - 1)]


def vertex_angles(points: Sequence[Point]) -> List[float]:
    """Signed angles at every interior vertex (index ``i`` is vertex ``i + 1``)."""

    return [angle_at_vertex(points[i - 1], points[i], points[i + 1]) for i in range(1, len(points) - 1)]


def rotate_subchain(
    points: Sequence[Point],
    pivot_index: int,
    delta_radians: float,
    side: Side = "tail",
) -> List[Point]:
    """Rotate one side of ``points`` rigidly about ``points[pivot_index]``.

    ``tail`` rotates every point after the pivot, ``head`` every point before
    it. The pivot itself never moves.
    """

    if not 0 <= pivot_index < len(points):
        raise IndexError(f"pivot index {pivot_index} out of range for {len(points)} points")
    pivot = points[pivot_index]
    head = list(points[:pivot_index])
    tail = list(points[pivot_index + 1 :])
    if side == "tail":
        tail = rotate_around(pivot, tail, delta_radians)
    else:
        head = rotate_around(pivot, head, delta_radians)
    return head + [pivot] + tail


def rotate_line_subchain(
    line: Line,
    pivot_index: int,
    delta_radians: float,
    side: Side = "tail",
) -> EditOutcome:
    """Rotate one side of ``line`` about the point at ``pivot_index``.

    Reports ``nothing-to-rotate`` when the chosen side holds no points.
    """

    points = line.points
    if line.locked:
        return _not_applicable(line, "line is locked")
    if not 0 <= pivot_index < len(points):
        return _not_applicable(line, f"pivot {pivot_index} out of range")
    count = len(points) - (pivot_index + 1) if side == "tail" else pivot_index
    if count == 0:
        logger.warning("No points to rotate on the %s side of pivot %d of line %s", side, pivot_index, line.id)
        return EditOutcome("nothing-to-rotate", line, f"no points on the {side} side of the pivot")
    rotated = rotate_subchain(points, pivot_index, delta_radians, side=side)
    return EditOutcome("applied", replace(line, points=tuple(rotated)))


def edit_interior_angle(line: Line, vertex_index: int, requested: object) -> EditOutcome:
    """Set the interior angle at ``vertex_index`` by rotating everything after it.

    ``requested`` is the unsigned interior angle in degrees. The vertex keeps
    turning to the same side, so only the magnitude of the angle changes.
    Segment lengths and every other vertex angle inside the rotated tail stay
    as they were.
    """

    points = line.points
    if line.locked:
        return _not_applicable(line, "line is locked")
    if len(points) < 3:
        return _not_applicable(line, "angle edit needs at least 3 points")
    if vertex_index < 1 or vertex_index > len(points) - 2:
        return _not_applicable(line, f"vertex {vertex_index} is not an interior vertex")

    a, b, c = points[vertex_index - 1], points[vertex_index], points[vertex_index + 1]
    if unit_direction(b, a) is None or unit_direction(b, c) is None:
        return _not_applicable(line, f"vertex {vertex_index} has a zero-length segment")
    current = angle_at_vertex(a, b, c)
    try:
        target = parse_interior_angle(requested)
    except InvalidInputError as exc:
        logger.info("Rejected angle edit on line %s: %s", line.id, exc)
        return EditOutcome("rejected", line, str(exc), display_value=abs(current))

    sign = -1.0 if current < 0.0 else 1.0
    delta = deg_to_rad(sign * target - current)
    outcome = rotate_line_subchain(line, vertex_index, delta, side="tail")
    if not outcome.applied:
        return outcome
    rotated = outcome.line.points

    lengths_before = segment_lengths(points)
    lengths_after = segment_lengths(rotated)
    angles_before = vertex_angles(points)
    angles_after = vertex_angles(rotated)
    lengths_changed = [
        i for i, (x, y) in enumerate(zip(lengths_before, lengths_after)) if abs(x - y) > _LENGTH_TOLERANCE
    ]
    angles_changed = [
        i + 1 for i, (x, y) in enumerate(zip(angles_before, angles_after)) if abs(x - y) > _ANGLE_TOLERANCE
    ]
    logger.info(
        "Angle update on line %s at vertex %d: %.6g -> %.6g (lengths changed=%s, angles changed=%s)",
        line.id,
        vertex_index,
        abs(current),
        interior_angle(rotated[vertex_index - 1], rotated[vertex_index], rotated[vertex_index + 1]),
        lengths_changed,
        angles_changed,
    )
    return outcome


def edit_segment_length(line: Line, segment_index: int, requested: object) -> EditOutcome:
    """Set the length of segment ``segment_index`` keeping its direction.

    The far endpoint slides along the segment and every later point moves by
    the same vector, so downstream lengths and angles are unchanged.
    """

    points = line.points
    if line.locked:
        return _not_applicable(line, "line is locked")
    if len(points) < 2:
        return _not_applicable(line, "length edit needs at least 2 points")
    if not 0 <= segment_index < len(points) - 1:
        return _not_applicable(line, f"segment {segment_index} out of range")

    start, end = points[segment_index], points[segment_index + 1]
    current = distance(start, end)
    try:
        new_length = parse_length(requested)
    except InvalidInputError as exc:
        logger.info("Rejected length edit on line %s: %s", line.id, exc)
        return EditOutcome("rejected", line, str(exc), display_value=current)

    direction = unit_direction(start, end)
    if direction is None:
        return _not_applicable(line, f"segment {segment_index} has zero length")

    new_end = Point(start.x + new_length * direction[0], start.y + new_length * direction[1])
    dx, dy = new_end.x - end.x, new_end.y - end.y
    moved = list(points[: segment_index + 1]) + [new_end] + translate(points[segment_index + 2 :], dx, dy)
    logger.info(
        "Length update on line %s segment %d: %.6g -> %.6g", line.id, segment_index, current, new_length
    )
    return EditOutcome("applied", replace(line, points=tuple(moved)))


def add_segment(line: Line, end: End, length: object, angle: object) -> EditOutcome:
    """Extend ``line`` at ``end`` by a segment of ``length`` turned by ``angle`` degrees."""

    points = line.points
    if line.locked:
        return _not_applicable(line, "line is locked")
    if not points:
        return _not_applicable(line, "line has no points")
    try:
        new_length = parse_length(length)
    except InvalidInputError as exc:
        return EditOutcome("rejected", line, str(exc))
    try:
        turn = float(angle)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return EditOutcome("rejected", line, f"angle {angle!r} is not a number")
    if not math.isfinite(turn):
        return EditOutcome("rejected", line, f"angle {angle!r} is not a number")

    if end == "end":
        base = points[-1]
        neighbour = points[-2] if len(points) > 1 else base
    else:
        base = points[0]
        neighbour = points[1] if len(points) > 1 else base
    new_point = new_position_by_angle_length(neighbour, base, new_length, turn)
    if end == "end":
        extended = points + (new_point,)
    else:
        extended = (new_point,) + points
    return EditOutcome("applied", replace(line, points=extended))


def move_point(line: Line, index: int, point: Point) -> EditOutcome:
    if line.locked:
        return _not_applicable(line, "line is locked")
    if not 0 <= index < len(line.points):
        return _not_applicable(line, f"point {index} out of range")
    moved = line.points[:index] + (Point.coerce(point),) + line.points[index + 1 :]
    return EditOutcome("applied", replace(line, points=moved))


def append_point(line: Line, point: Point) -> EditOutcome:
    if line.locked:
        return _not_applicable(line, "line is locked")
    return EditOutcome("applied", replace(line, points=line.points + (Point.coerce(point),)))


apply_debug_logging(globals(), logger=logger)
