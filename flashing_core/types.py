"""Immutable geometry values shared by the editors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from typing import Literal

End = Literal["start", "end"]
LabelType = Literal["segment", "angle"]
DrawingType = Literal["original", "tapered", "custom"]

NO_FOLD = "NO_FOLD"


class InvalidInputError(ValueError):
    """Raised when a user supplied number cannot be used for an edit."""


class CatalogError(ValueError):
    """Raised when a fold catalog record is malformed."""


class UnknownTemplateError(KeyError):
    """Raised when a fold template id is not present in the catalog."""


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def __iter__(self):
        yield self.x
        yield self.y

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def coerce(cls, value: object) -> "Point":
        """Build a point from a ``Point``, an ``(x, y)`` pair or an ``{x, y}`` mapping."""

        if isinstance(value, Point):
            return value
        if isinstance(value, Mapping):
            return cls(value["x"], value["y"])
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(value[0], value[1])
        raise TypeError(f"cannot interpret {value!r} as a point")


@dataclass(frozen=True)
class Offset:
    """Pixel displacement of a label from its natural anchor."""

    dx: float = 0.0
    dy: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "dx", float(self.dx))
        object.__setattr__(self, "dy", float(self.dy))


@dataclass(frozen=True)
class FoldSegmentEdit:
    length: float
    angle: float

    def as_record(self) -> Dict[str, float]:
        return {"Length": self.length, "Angle": self.angle}


@dataclass(frozen=True)
class FoldState:
    """Template choice plus per-segment overrides for one line endpoint."""

    selected_template_id: str
    segment_edits: Tuple[FoldSegmentEdit, ...] = ()
    direction: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FoldState":
        edits = record.get("segmentEdits") or {}
        return cls(
            selected_template_id=str(record.get("selectedId", "")),
            segment_edits=edits_from_mapping(edits),
            direction=str(record.get("direction", "")),
        )


def edits_from_mapping(edits: Mapping[Any, Any]) -> Tuple[FoldSegmentEdit, ...]:
    """Convert an ``{index: {Length, Angle}}`` mapping into an ordered tuple.

    Indices must form the contiguous range ``0..N-1``.
    """

    indexed: Dict[int, FoldSegmentEdit] = {}
    for key, value in edits.items():
        index = int(key)
        if isinstance(value, FoldSegmentEdit):
            indexed[index] = value
        else:
            indexed[index] = FoldSegmentEdit(float(value["Length"]), float(value["Angle"]))
    if sorted(indexed) != list(range(len(indexed))):
        raise CatalogError(f"fold segment indices must be contiguous from 0, got {sorted(indexed)}")
    return tuple(indexed[i] for i in range(len(indexed)))


@dataclass(frozen=True)
class FoldTemplateSegment:
    angle: float
    length: float
    is_length_editable: bool = True
    is_angle_editable: bool = True
    min_length: float = 1.0
    max_length: float = 999.0
    sort_order: int = 0
    is_supported: bool = True


@dataclass(frozen=True)
class FoldTemplate:
    id: str
    name: str
    label: str
    segments: Tuple[FoldTemplateSegment, ...]
    sort_order: int = 0
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.label or self.name

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FoldTemplate":
        """Parse a catalog record using the catalog's own key names."""

        try:
            template_id = str(record["Id"])
            raw_segments = record.get("Segments") or []
            segments = [
                FoldTemplateSegment(
                    angle=float(seg["Angle"]),
                    length=float(seg["Length"]),
                    is_length_editable=bool(seg.get("IsLengthEditable", True)),
                    is_angle_editable=bool(seg.get("IsAngleEditable", True)),
                    min_length=float(seg.get("MinLength", 1.0)),
                    max_length=float(seg.get("MaxLength", 999.0)),
                    sort_order=int(seg.get("SortOrder", idx)),
                    is_supported=bool(seg.get("IsSupported", True)),
                )
                for idx, seg in enumerate(raw_segments)
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"malformed fold template record: {exc}") from exc
        segments.sort(key=lambda seg: seg.sort_order)
        return cls(
            id=template_id,
            name=str(record.get("Name", "")),
            label=str(record.get("Label", "")),
            segments=tuple(segments),
            sort_order=int(record.get("SortOrder", 0)),
            is_active=bool(record.get("IsActive", True)),
        )


@dataclass(frozen=True)
class Line:
    id: str
    points: Tuple[Point, ...] = ()
    color: str = "#60a5fa"
    start_fold: Optional[FoldState] = None
    end_fold: Optional[FoldState] = None
    label_positions: Optional[Tuple[Optional[Point], ...]] = None
    angle_label_positions: Optional[Tuple[Optional[Point], ...]] = None
    locked: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(Point.coerce(p) for p in self.points))
        for name in ("label_positions", "angle_label_positions"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(
                    self, name, tuple(None if p is None else Point.coerce(p) for p in value)
                )

    @property
    def segment_count(self) -> int:
        return max(len(self.points) - 1, 0)

    def fold(self, end: End) -> Optional[FoldState]:
        return self.start_fold if end == "start" else self.end_fold

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Line":
        start = record.get("startFold")
        end = record.get("endFold")
        return cls(
            id=str(record["id"]),
            points=tuple(Point.coerce(p) for p in record.get("points", [])),
            color=str(record.get("color", "#60a5fa")),
            start_fold=FoldState.from_record(start) if start else None,
            end_fold=FoldState.from_record(end) if end else None,
            label_positions=_optional_points(record.get("labelPositions")),
            angle_label_positions=_optional_points(record.get("angleLabelPositions")),
            locked=bool(record.get("locked", False)),
        )


def _optional_points(values: Optional[Iterable[Any]]) -> Optional[Tuple[Optional[Point], ...]]:
    if values is None:
        return None
    return tuple(None if value is None else Point.coerce(value) for value in values)


def segments_of(points: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return [(points[i], points[i + 1]) for i in range(len(points) - 1)]


@dataclass(frozen=True)
class TaperedSegment:
    original_length: float
    tapered_length: float
    angle: float  # radians; absolute for segment 0, turn from previous otherwise
    start_point: Point
    end_point: Point


@dataclass(frozen=True)
class TaperedDiagram:
    id: str
    original_line_id: str
    segments: Tuple[TaperedSegment, ...]
    points: Tuple[Point, ...]
    created_at: datetime
    modified_at: datetime
    name: str = "Tapered Diagram"

    def to_line(self, color: str = "#60a5fa") -> Line:
        return Line(id=self.id, points=self.points, color=color)


@dataclass(frozen=True)
class LabelDescriptor:
    id: str
    type: LabelType
    anchor: Point
    rotation: float
    text: str
    font_size: Optional[float] = None
    priority: int = 0
    preferred_offset: Offset = Offset()


@dataclass(frozen=True)
class Drawing:
    id: str
    name: str
    type: DrawingType
    lines: Tuple[Line, ...] = ()
    visible: bool = True
    locked: bool = False
    source_id: Optional[str] = None


__all__ = [
    "End",
    "LabelType",
    "DrawingType",
    "NO_FOLD",
    "InvalidInputError",
    "CatalogError",
    "UnknownTemplateError",
    "Point",
    "Offset",
    "FoldSegmentEdit",
    "FoldState",
    "FoldTemplateSegment",
    "FoldTemplate",
    "Line",
    "TaperedSegment",
    "TaperedDiagram",
    "LabelDescriptor",
    "Drawing",
    "edits_from_mapping",
    "segments_of",
]
