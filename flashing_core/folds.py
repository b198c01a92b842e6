"""Fold sub-chains appended to either end of a line."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .config import get_editor_config
from .geometry import heading, point_from_angle_distance
from .logging_utils import apply_debug_logging
from .types import (
    NO_FOLD,
    CatalogError,
    End,
    FoldSegmentEdit,
    FoldState,
    FoldTemplate,
    FoldTemplateSegment,
    InvalidInputError,
    Line,
    Point,
    UnknownTemplateError,
)

logger = logging.getLogger(__name__)

_ANGLE_LIMIT = 360.0


class FoldCatalog:
    """Read-only, ordered collection of fold templates."""

    def __init__(self, templates: Iterable[FoldTemplate]):
        ordered = sorted(templates, key=lambda tpl: tpl.sort_order)
        self._templates: Dict[str, FoldTemplate] = {}
        for template in ordered:
            if template.id in self._templates:
                raise CatalogError(f"duplicate fold template id {template.id!r}")
            self._templates[template.id] = template

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "FoldCatalog":
        return cls(FoldTemplate.from_record(record) for record in records)

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[FoldTemplate]:
        return iter(self._templates.values())

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def get(self, template_id: str) -> FoldTemplate:
        try:
            return self._templates[template_id]
        except KeyError as exc:
            raise UnknownTemplateError(template_id) from exc

    def active(self) -> List[FoldTemplate]:
        """Templates offered for selection, in catalog order."""

        return [tpl for tpl in self._templates.values() if tpl.is_active]


def load_fold_catalog(path: Union[str, Path]) -> FoldCatalog:
    """Load a catalog from a JSON file holding a list of template records."""

    text = Path(path).read_text(encoding="utf-8")
    try:
        records = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(records, list):
        raise CatalogError(f"{path}: expected a list of fold templates")
    catalog = FoldCatalog.from_records(records)
    logger.info("Loaded %d fold templates from %s", len(catalog), path)
    return catalog


@dataclass(frozen=True)
class FoldChain:
    """Result of synthesizing a fold: ``points[0]`` is the anchor."""

    end: End
    points: Tuple[Point, ...]
    applicable: bool = True

    @property
    def segment_count(self) -> int:
        return max(len(self.points) - 1, 0)


def new_position_by_angle_length(first: Point, second: Point, length: float, angle: float) -> Point:
    """Point reached from ``second`` after turning by ``angle`` off ``first -> second``.

    ``angle`` is the fold angle in degrees between the incoming segment and the
    new one: ``180`` continues straight ahead and ``0`` folds fully back onto
    the incoming segment. The heading used is ``180 + h - angle`` where ``h``
    is the heading of ``first -> second``.
    """

    direction = 180.0 + heading(first, second) - angle
    direction = math.fmod(direction, 360.0)
    if direction < 0.0:
        direction += 360.0
    return point_from_angle_distance(second, direction, length)


def _anchor_pair(line: Line, end: End) -> Optional[Tuple[Point, Point]]:
    """Return ``(incoming, anchor)`` for ``end``, or ``None`` below two points."""

    points = line.points
    if len(points) < 2:
        return None
    if end == "start":
        return points[1], points[0]
    return points[-2], points[-1]


def synthesize_fold(line: Line, end: End, edits: Sequence[FoldSegmentEdit]) -> FoldChain:
    """Build the fold chain at ``end`` of ``line`` from ordered ``edits``.

    Segment 0 continues from the line's own end segment; every later segment
    continues from the previous two fold points.
    """

    pair = _anchor_pair(line, end)
    if pair is None:
        logger.info("Fold at %s of line %s not applicable: fewer than 2 points", end, line.id)
        return FoldChain(end=end, points=(), applicable=False)

    incoming, anchor = pair
    chain: List[Point] = [anchor]
    previous = incoming
    for edit in edits:
        current = chain[-1]
        chain.append(new_position_by_angle_length(previous, current, edit.length, edit.angle))
        previous = current
    return FoldChain(end=end, points=tuple(chain))


def fold_points(line: Line, end: End) -> FoldChain:
    """Recompute the displayed chain at ``end`` from the stored fold state.

    Without a stored fold the chain collapses to the anchor point alone.
    """

    state = line.fold(end)
    if state is None:
        pair = _anchor_pair(line, end)
        if pair is None:
            if line.points:
                return FoldChain(end=end, points=(line.points[0],))
            return FoldChain(end=end, points=(), applicable=False)
        return FoldChain(end=end, points=(pair[1],))
    return synthesize_fold(line, end, state.segment_edits)


def default_edits(template: FoldTemplate) -> Tuple[FoldSegmentEdit, ...]:
    return tuple(FoldSegmentEdit(seg.length, seg.angle) for seg in template.segments)


def add_fold_segment(edits: Sequence[FoldSegmentEdit]) -> Tuple[FoldSegmentEdit, ...]:
    """Append a default segment to ``edits``."""

    config = get_editor_config()
    return tuple(edits) + (FoldSegmentEdit(config.default_fold_length, config.default_fold_angle),)


def _segment_rules(template: FoldTemplate, index: int) -> FoldTemplateSegment:
    if index < len(template.segments):
        return template.segments[index]
    config = get_editor_config()
    return FoldTemplateSegment(angle=config.default_fold_angle, length=config.default_fold_length)


def parse_fold_length(value: object, rules: FoldTemplateSegment) -> float:
    try:
        length = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"fold length {value!r} is not a number") from exc
    if not math.isfinite(length) or length <= 0.0:
        raise InvalidInputError(f"fold length must be positive, got {value!r}")
    if length < rules.min_length or length > rules.max_length:
        raise InvalidInputError(
            f"fold length {length:g} outside [{rules.min_length:g}, {rules.max_length:g}]"
        )
    return length


def parse_fold_angle(value: object) -> float:
    try:
        angle = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"fold angle {value!r} is not a number") from exc
    if not math.isfinite(angle) or abs(angle) > _ANGLE_LIMIT:
        raise InvalidInputError(f"fold angle must be within ±{_ANGLE_LIMIT:g}, got {value!r}")
    return angle


def sanitize_fold_edits(
    template: FoldTemplate,
    proposed: Sequence[Mapping[str, object]],
    previous: Sequence[FoldSegmentEdit],
) -> Tuple[Tuple[FoldSegmentEdit, ...], List[str]]:
    """Validate ``proposed`` ``{Length, Angle}`` entries field by field.

    An invalid field reverts to its value in ``previous`` (or the template
    default when there is none). Fields the template marks as not editable
    always take the template value. Returns the accepted edits and a note per
    reverted field.
    """

    accepted: List[FoldSegmentEdit] = []
    reverted: List[str] = []
    for index, entry in enumerate(proposed):
        rules = _segment_rules(template, index)
        fallback = previous[index] if index < len(previous) else FoldSegmentEdit(rules.length, rules.angle)

        if not rules.is_length_editable:
            length = rules.length
        else:
            try:
                length = parse_fold_length(entry.get("Length", fallback.length), rules)
            except InvalidInputError as exc:
                reverted.append(f"segment {index} length: {exc}")
                length = fallback.length

        if not rules.is_angle_editable:
            angle = rules.angle
        else:
            try:
                angle = parse_fold_angle(entry.get("Angle", fallback.angle))
            except InvalidInputError as exc:
                reverted.append(f"segment {index} angle: {exc}")
                angle = fallback.angle

        accepted.append(FoldSegmentEdit(length, angle))

    for note in reverted:
        logger.info("Fold template %s: reverted %s", template.id, note)
    return tuple(accepted), reverted


def apply_fold(
    line: Line,
    end: End,
    template_id: Optional[str],
    catalog: FoldCatalog,
    edits: Optional[Sequence[Mapping[str, object]]] = None,
    *,
    direction: str = "",
) -> Line:
    """Return ``line`` with the fold at ``end`` replaced, or cleared for ``NO_FOLD``.

    ``edits`` defaults to the template's own segments when omitted.
    """

    field_name = "start_fold" if end == "start" else "end_fold"
    if template_id is None or template_id == NO_FOLD:
        if line.fold(end) is not None:
            logger.info("Removed %s fold from line %s", end, line.id)
        return replace(line, **{field_name: None})

    template = catalog.get(template_id)
    current = line.fold(end)
    if current is not None and current.selected_template_id == template_id:
        previous = current.segment_edits
    else:
        previous = default_edits(template)

    if edits is None:
        accepted = previous
    else:
        accepted, _ = sanitize_fold_edits(template, edits, previous)

    state = FoldState(selected_template_id=template_id, segment_edits=accepted, direction=direction)
    logger.info(
        "Applied fold %s at %s of line %s with %d segment(s)",
        template_id,
        end,
        line.id,
        len(accepted),
    )
    return replace(line, **{field_name: state})


apply_debug_logging(globals(), logger=logger)
