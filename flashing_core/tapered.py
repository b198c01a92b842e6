"""Tapered diagrams: per-segment lengths with turn angles frozen at creation."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .edits import parse_length
from .geometry import distance
from .logging_utils import apply_debug_logging
from .types import InvalidInputError, Line, Point, TaperedDiagram, TaperedSegment

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


def _direction(p1: Point, p2: Point) -> float:
    return math.atan2(p2.y - p1.y, p2.x - p1.x)


def _normalize_turn(angle: float) -> float:
    if angle < 0.0:
        angle += _TWO_PI
    return angle


def turn_angles(points: Sequence[Point]) -> List[float]:
    """Absolute direction of segment 0 followed by each turn, normalized to [0, 2π)."""

    angles: List[float] = []
    for i in range(len(points) - 1):
        if i == 0:
            angles.append(_direction(points[0], points[1]))
            continue
        turn = _direction(points[i], points[i + 1]) - _direction(points[i - 1], points[i])
        angles.append(_normalize_turn(turn))
    return angles


def recalculate_points(segments: Sequence[TaperedSegment]) -> List[Point]:
    """Rebuild every point from the first segment's start using the stored angles."""

    if not segments:
        return []
    points: List[Point] = [segments[0].start_point]
    current = 0.0
    for i, segment in enumerate(segments):
        current = segment.angle if i == 0 else current + segment.angle
        start = points[i]
        points.append(
            Point(
                start.x + math.cos(current) * segment.tapered_length,
                start.y + math.sin(current) * segment.tapered_length,
            )
        )
    return points


def create_tapered_diagram(
    line: Line,
    *,
    now: Optional[datetime] = None,
    diagram_id: Optional[str] = None,
) -> Optional[TaperedDiagram]:
    """Derive a tapered diagram from ``line``; ``None`` below two points.

    The diagram starts with every tapered length equal to the original one and
    keeps only ``line.id`` as a reference to its source.
    """

    points = line.points
    if len(points) < 2:
        logger.info("Cannot create tapered diagram from line %s: fewer than 2 points", line.id)
        return None

    created = now or datetime.now(timezone.utc)
    angles = turn_angles(points)
    segments = tuple(
        TaperedSegment(
            original_length=distance(points[i], points[i + 1]),
            tapered_length=distance(points[i], points[i + 1]),
            angle=angles[i],
            start_point=points[i],
            end_point=points[i + 1],
        )
        for i in range(len(points) - 1)
    )
    identifier = diagram_id or f"tapered_{int(created.timestamp() * 1000)}"
    logger.info("Created tapered diagram %s from line %s with %d segments", identifier, line.id, len(segments))
    return TaperedDiagram(
        id=identifier,
        original_line_id=line.id,
        segments=segments,
        points=tuple(points),
        created_at=created,
        modified_at=created,
    )


def update_segment_length(
    diagram: TaperedDiagram,
    segment_index: int,
    new_length: object,
    *,
    now: Optional[datetime] = None,
) -> TaperedDiagram:
    """Return ``diagram`` with one tapered length changed and all points rebuilt.

    An out-of-range index or an invalid length leaves the diagram unchanged.
    """

    if not 0 <= segment_index < len(diagram.segments):
        logger.info("Tapered diagram %s has no segment %d", diagram.id, segment_index)
        return diagram
    try:
        length = parse_length(new_length)
    except InvalidInputError as exc:
        logger.info("Rejected tapered length for %s segment %d: %s", diagram.id, segment_index, exc)
        return diagram

    segments = list(diagram.segments)
    segments[segment_index] = replace(segments[segment_index], tapered_length=length)
    points = recalculate_points(segments)
    segments = [
        replace(segment, start_point=points[i], end_point=points[i + 1]) for i, segment in enumerate(segments)
    ]
    return replace(
        diagram,
        segments=tuple(segments),
        points=tuple(points),
        modified_at=now or datetime.now(timezone.utc),
    )


apply_debug_logging(globals(), logger=logger)
