"""Per-line measurements for panels and summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import get_editor_config
from .geometry import distance, interior_angle, polyline_length, rad_to_deg
from .tapered import turn_angles
from .types import Line, Point, segments_of


@dataclass(frozen=True)
class SegmentData:
    index: int
    length: float
    angle: float  # degrees: absolute for segment 0, turn from previous otherwise
    start_point: Point
    end_point: Point


@dataclass(frozen=True)
class AngleData:
    index: int  # vertex index
    angle: float  # interior angle in degrees
    vertex: Point
    prev_segment: SegmentData
    next_segment: SegmentData


@dataclass(frozen=True)
class GeometryInfo:
    total_length: float
    segment_count: int
    segments: Tuple[SegmentData, ...]
    angles: Tuple[AngleData, ...]


def segment_data(line: Line) -> List[SegmentData]:
    turns = turn_angles(line.points)
    return [
        SegmentData(
            index=i,
            length=distance(start, end),
            angle=rad_to_deg(turns[i]),
            start_point=start,
            end_point=end,
        )
        for i, (start, end) in enumerate(segments_of(line.points))
    ]


def angle_data(line: Line, segments: Optional[List[SegmentData]] = None) -> List[AngleData]:
    segments = segments if segments is not None else segment_data(line)
    points = line.points
    return [
        AngleData(
            index=i,
            angle=interior_angle(points[i - 1], points[i], points[i + 1]),
            vertex=points[i],
            prev_segment=segments[i - 1],
            next_segment=segments[i],
        )
        for i in range(1, len(points) - 1)
    ]


def geometry_info(line: Line) -> GeometryInfo:
    segments = segment_data(line)
    return GeometryInfo(
        total_length=polyline_length(line.points),
        segment_count=len(segments),
        segments=tuple(segments),
        angles=tuple(angle_data(line, segments)),
    )


def format_length(value: float, decimals: Optional[int] = None) -> str:
    if decimals is None:
        decimals = get_editor_config().length_decimals
    return f"{value:.{decimals}f}"


def format_angle(value: float, decimals: Optional[int] = None) -> str:
    if decimals is None:
        decimals = get_editor_config().angle_decimals
    return f"{value:.{decimals}f}°"
