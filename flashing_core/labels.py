"""Deterministic placement of segment and angle labels.

Labels are treated as rotated rectangles. Pinned labels (offsets the user
dragged before) are placed verbatim; every other label tries a fixed list of
candidate offsets and keeps the first one that does not overlap anything
already placed. The result only depends on the descriptors, the pinned
offsets and the text measurer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import numpy as np
from PIL import ImageFont

from .analysis import format_angle, format_length
from .config import EditorConfig, get_editor_config
from .geometry import angle_label_position, distance, interior_angle, midpoint, upright_rotation
from .logging_utils import apply_debug_logging
from .types import LabelDescriptor, Line, Offset, Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextExtent:
    width: float
    height: float


class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: float, font_family: str) -> TextExtent:
        ...


class HeuristicTextMeasurer:
    """Character-count estimate used when the host cannot measure text."""

    def measure(self, text: str, font_size: float, font_family: str) -> TextExtent:
        return TextExtent(width=len(text) * font_size * 0.6, height=font_size * 1.2)


class PillowTextMeasurer:
    """Measure text with a TrueType font through Pillow.

    ``font_paths`` maps a family name to a font file; unknown families use
    Pillow's bundled default font.
    """

    def __init__(self, font_paths: Optional[Mapping[str, str]] = None):
        self._font_paths = dict(font_paths or {})
        self._fonts: Dict[Tuple[str, float], Any] = {}

    def _font(self, font_family: str, font_size: float):
        key = (font_family, font_size)
        font = self._fonts.get(key)
        if font is None:
            path = self._font_paths.get(font_family)
            if path is None:
                font = ImageFont.load_default(size=font_size)
            else:
                font = ImageFont.truetype(path, int(round(font_size)))
            self._fonts[key] = font
        return font

    def measure(self, text: str, font_size: float, font_family: str) -> TextExtent:
        font = self._font(font_family, font_size)
        left, _, right, _ = font.getbbox(text)
        width = float(right - left)
        if width <= 0.0:
            width = len(text) * font_size * 0.6
        return TextExtent(width=width, height=font_size * 1.2)


def default_font_size(descriptor: LabelDescriptor, config: Optional[EditorConfig] = None) -> float:
    if descriptor.font_size is not None:
        return descriptor.font_size
    config = config or get_editor_config()
    return config.segment_font_size if descriptor.type == "segment" else config.angle_font_size


def rotated_rect(
    anchor: Point,
    width: float,
    height: float,
    rotation_deg: float,
    offset: Offset = Offset(),
) -> np.ndarray:
    """Corners (4x2) of a ``width`` x ``height`` box centred on ``anchor + offset``.

    The offset is applied in label-local space before the rotation.
    """

    hw = width / 2.0
    hh = height / 2.0
    local = np.array(
        [
            (-hw + offset.dx, -hh + offset.dy),
            (hw + offset.dx, -hh + offset.dy),
            (hw + offset.dx, hh + offset.dy),
            (-hw + offset.dx, hh + offset.dy),
        ],
        dtype=float,
    )
    rad = math.radians(rotation_deg)
    cos_t, sin_t = math.cos(rad), math.sin(rad)
    rotation = np.array([[cos_t, -sin_t], [sin_t, cos_t]], dtype=float)
    return local @ rotation.T + np.array([anchor.x, anchor.y], dtype=float)


def _aabb_overlap(a: np.ndarray, b: np.ndarray) -> bool:
    a_min, a_max = a.min(axis=0), a.max(axis=0)
    b_min, b_max = b.min(axis=0), b.max(axis=0)
    return not (
        a_max[0] < b_min[0] or b_max[0] < a_min[0] or a_max[1] < b_min[1] or b_max[1] < a_min[1]
    )


def polygons_intersect(a: np.ndarray, b: np.ndarray) -> bool:
    """Separating-axis test for two convex polygons given as (N, 2) arrays.

    Touching edges count as an intersection.
    """

    for polygon in (a, b):
        edges = np.roll(polygon, -1, axis=0) - polygon
        axes = np.stack([-edges[:, 1], edges[:, 0]], axis=1)
        norms = np.linalg.norm(axes, axis=1)
        norms[norms == 0.0] = 1.0
        axes = axes / norms[:, None]
        proj_a = a @ axes.T
        proj_b = b @ axes.T
        separated = (proj_a.max(axis=0) < proj_b.min(axis=0)) | (proj_b.max(axis=0) < proj_a.min(axis=0))
        if separated.any():
            return False
    return True


def candidate_offsets(descriptor: LabelDescriptor, config: Optional[EditorConfig] = None) -> List[Offset]:
    """Preferred offset, then perpendicular shifts, then shifts along the rotation."""

    config = config or get_editor_config()
    preferred = descriptor.preferred_offset
    rad = math.radians(descriptor.rotation)
    # Axes are world-space while rotated_rect rotates offsets again; existing
    # layouts depend on this order of candidates, keep it.
    perp = (-math.sin(rad), math.cos(rad))
    along = (math.cos(rad), math.sin(rad))
    magnitudes: List[float] = []
    for step in range(1, config.label_step_count + 1):
        magnitudes.extend((step * config.label_step, -step * config.label_step))

    candidates = [preferred]
    for axis in (perp, along):
        candidates.extend(
            Offset(preferred.dx + axis[0] * m, preferred.dy + axis[1] * m) for m in magnitudes
        )
    return candidates


def _placement_order(descriptors: Sequence[LabelDescriptor]) -> List[LabelDescriptor]:
    return sorted(descriptors, key=lambda d: (-d.priority, d.id))


def resolve_collisions(
    descriptors: Sequence[LabelDescriptor],
    existing_offsets: Mapping[str, Offset],
    measurer: Optional[TextMeasurer] = None,
    *,
    config: Optional[EditorConfig] = None,
) -> Dict[str, Offset]:
    """Return an offset per label id such that label rectangles do not overlap.

    Labels with an entry in ``existing_offsets`` are pinned and placed first;
    within each group higher ``priority`` goes first and ties are broken by
    ascending id. When no candidate clears every obstacle the preferred offset
    is used even though it overlaps.
    """

    config = config or get_editor_config()
    measurer = measurer or HeuristicTextMeasurer()
    pinned = [d for d in descriptors if d.id in existing_offsets]
    floating = [d for d in descriptors if d.id not in existing_offsets]

    obstacles: List[np.ndarray] = []
    results: Dict[str, Offset] = {}

    def size_of(descriptor: LabelDescriptor) -> Tuple[float, float]:
        extent = measurer.measure(descriptor.text, default_font_size(descriptor, config), config.font_family)
        return extent.width + config.label_padding_x, extent.height + config.label_padding_y

    for descriptor in _placement_order(pinned):
        width, height = size_of(descriptor)
        offset = existing_offsets[descriptor.id]
        obstacles.append(rotated_rect(descriptor.anchor, width, height, descriptor.rotation, offset))
        results[descriptor.id] = offset

    for descriptor in _placement_order(floating):
        width, height = size_of(descriptor)
        chosen: Optional[Offset] = None
        chosen_rect: Optional[np.ndarray] = None
        for candidate in candidate_offsets(descriptor, config):
            rect = rotated_rect(descriptor.anchor, width, height, descriptor.rotation, candidate)
            hit = any(_aabb_overlap(rect, other) and polygons_intersect(rect, other) for other in obstacles)
            if not hit:
                chosen, chosen_rect = candidate, rect
                break
        if chosen is None or chosen_rect is None:
            chosen = descriptor.preferred_offset
            chosen_rect = rotated_rect(descriptor.anchor, width, height, descriptor.rotation, chosen)
            logger.debug("No free placement for label %s; keeping preferred offset", descriptor.id)
        obstacles.append(chosen_rect)
        results[descriptor.id] = chosen

    return results


def segment_label_key(line_id: str, segment_index: int) -> str:
    return f"{line_id}:segment:{segment_index}"


def angle_label_key(line_id: str, vertex_index: int) -> str:
    return f"{line_id}:angle:{vertex_index}"


def build_label_descriptors(
    line: Line,
    preferred_offsets: Optional[Mapping[str, Offset]] = None,
    *,
    config: Optional[EditorConfig] = None,
) -> List[LabelDescriptor]:
    """Descriptors for every segment length and interior angle of ``line``."""

    config = config or get_editor_config()
    preferred_offsets = preferred_offsets or {}
    points = line.points
    descriptors: List[LabelDescriptor] = []
    shift_x, shift_y = config.segment_label_offset

    for i in range(len(points) - 1):
        p1, p2 = points[i], points[i + 1]
        mid = midpoint(p1, p2)
        key = segment_label_key(line.id, i)
        descriptors.append(
            LabelDescriptor(
                id=key,
                type="segment",
                anchor=Point(mid.x + shift_x, mid.y + shift_y),
                rotation=upright_rotation(p1, p2),
                text=f"{format_length(distance(p1, p2), config.length_decimals)} {config.length_unit}",
                font_size=config.segment_font_size,
                priority=config.segment_priority,
                preferred_offset=preferred_offsets.get(key, Offset()),
            )
        )

    for i in range(1, len(points) - 1):
        a, b, c = points[i - 1], points[i], points[i + 1]
        key = angle_label_key(line.id, i)
        descriptors.append(
            LabelDescriptor(
                id=key,
                type="angle",
                anchor=angle_label_position(a, b, c, config.angle_label_distance),
                rotation=0.0,
                text=format_angle(interior_angle(a, b, c), config.angle_decimals),
                font_size=config.angle_font_size,
                priority=config.angle_priority,
                preferred_offset=preferred_offsets.get(key, Offset()),
            )
        )
    return descriptors


def pinned_offsets(line: Line, descriptors: Sequence[LabelDescriptor]) -> Dict[str, Offset]:
    """Offsets implied by the line's pinned label positions."""

    by_id = {d.id: d for d in descriptors}
    offsets: Dict[str, Offset] = {}
    for index, position in enumerate(line.label_positions or ()):
        descriptor = by_id.get(segment_label_key(line.id, index))
        if position is not None and descriptor is not None:
            offsets[descriptor.id] = _local_offset(descriptor, position)
    for index, position in enumerate(line.angle_label_positions or ()):
        descriptor = by_id.get(angle_label_key(line.id, index + 1))
        if position is not None and descriptor is not None:
            offsets[descriptor.id] = _local_offset(descriptor, position)
    return offsets


def _local_offset(descriptor: LabelDescriptor, position: Point) -> Offset:
    # Offsets live in label-local space, so undo the label rotation.
    dx = position.x - descriptor.anchor.x
    dy = position.y - descriptor.anchor.y
    rad = math.radians(descriptor.rotation)
    cos_t, sin_t = math.cos(rad), math.sin(rad)
    return Offset(dx * cos_t + dy * sin_t, -dx * sin_t + dy * cos_t)


def layout_line_labels(
    line: Line,
    existing_offsets: Optional[Mapping[str, Offset]] = None,
    measurer: Optional[TextMeasurer] = None,
    *,
    config: Optional[EditorConfig] = None,
) -> Dict[str, Offset]:
    """Build descriptors for ``line`` and resolve their offsets in one pass.

    Pins come from ``existing_offsets`` (dragged offsets keyed by label id) and
    from the line's ``label_positions`` / ``angle_label_positions``; the latter
    win when both pin the same label.
    """

    config = config or get_editor_config()
    existing = dict(existing_offsets or {})
    descriptors = build_label_descriptors(line, existing, config=config)
    existing.update(pinned_offsets(line, descriptors))
    relevant = {key: value for key, value in existing.items() if key in {d.id for d in descriptors}}
    return resolve_collisions(descriptors, relevant, measurer, config=config)


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"rotated_rect", "polygons_intersect", "candidate_offsets", "default_font_size", "segment_label_key", "angle_label_key"},
)
