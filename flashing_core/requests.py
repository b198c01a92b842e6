"""Edit requests as a closed set of record types."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

from .edits import EditOutcome, add_segment, edit_interior_angle, edit_segment_length, move_point
from .folds import FoldCatalog, apply_fold
from .types import NO_FOLD, End, Line, Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditSegmentLength:
    segment_index: int
    length: object


@dataclass(frozen=True)
class EditInteriorAngle:
    vertex_index: int
    angle: object


@dataclass(frozen=True)
class AddSegment:
    end: End
    length: object
    angle: object


@dataclass(frozen=True)
class MovePoint:
    index: int
    point: Point


@dataclass(frozen=True)
class ApplyFold:
    end: End
    template_id: Optional[str]
    edits: Optional[Sequence[Mapping[str, object]]] = None
    direction: str = ""


EditRequest = Union[EditSegmentLength, EditInteriorAngle, AddSegment, MovePoint, ApplyFold]


def apply_request(line: Line, request: EditRequest, catalog: Optional[FoldCatalog] = None) -> EditOutcome:
    """Run the editor matching ``request`` on ``line``."""

    if isinstance(request, EditSegmentLength):
        return edit_segment_length(line, request.segment_index, request.length)
    if isinstance(request, EditInteriorAngle):
        return edit_interior_angle(line, request.vertex_index, request.angle)
    if isinstance(request, AddSegment):
        return add_segment(line, request.end, request.length, request.angle)
    if isinstance(request, MovePoint):
        return move_point(line, request.index, request.point)
    if isinstance(request, ApplyFold):
        if catalog is None:
            raise ValueError("applying a fold requires a fold catalog")
        clearing = request.template_id is None or request.template_id == NO_FOLD
        if not clearing and len(line.points) < 2:
            logger.info("Fold at %s of line %s not applicable: fewer than 2 points", request.end, line.id)
            return EditOutcome("not-applicable", line, "fold needs at least 2 points")
        updated = apply_fold(
            line,
            request.end,
            request.template_id,
            catalog,
            request.edits,
            direction=request.direction,
        )
        return EditOutcome("applied", updated)
    raise TypeError(f"unsupported edit request {type(request).__name__}")
