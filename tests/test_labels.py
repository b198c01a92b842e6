import math

import numpy as np

from flashing_core.labels import (
    HeuristicTextMeasurer,
    PillowTextMeasurer,
    TextExtent,
    build_label_descriptors,
    candidate_offsets,
    layout_line_labels,
    polygons_intersect,
    resolve_collisions,
    rotated_rect,
)
from flashing_core.types import LabelDescriptor, Line, Offset, Point


def _label(label_id, *, anchor=(0, 0), text='100.0 px', rotation=0.0, priority=0, font_size=None):
    return LabelDescriptor(
        id=label_id,
        type='segment',
        anchor=Point(*anchor),
        rotation=rotation,
        text=text,
        font_size=font_size,
        priority=priority,
    )


class FixedMeasurer:
    def __init__(self, width, height):
        self.calls = []
        self.width = width
        self.height = height

    def measure(self, text, font_size, font_family):
        self.calls.append((text, font_size, font_family))
        return TextExtent(self.width, self.height)


def _square(x0, y0, size=1.0):
    return np.array([(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)], dtype=float)


def test_heuristic_measurer():
    extent = HeuristicTextMeasurer().measure('abcd', 10, 'Arial')
    assert math.isclose(extent.width, 24.0)
    assert math.isclose(extent.height, 12.0)


def test_pillow_measurer_returns_positive_extent():
    extent = PillowTextMeasurer().measure('120.0 px', 12, 'Arial')
    assert extent.width > 0
    assert math.isclose(extent.height, 14.4)


def test_rotated_rect_applies_offset_before_rotation():
    rect = rotated_rect(Point(10, 10), 4, 2, 90.0, Offset(5, 0))
    centre = rect.mean(axis=0)
    assert np.allclose(centre, [10, 15])
    xs, ys = rect[:, 0], rect[:, 1]
    assert math.isclose(xs.max() - xs.min(), 2.0, abs_tol=1e-9)
    assert math.isclose(ys.max() - ys.min(), 4.0, abs_tol=1e-9)


def test_polygons_intersect():
    assert polygons_intersect(_square(0, 0), _square(0.5, 0.5))
    assert polygons_intersect(_square(0, 0), _square(1, 0))
    assert not polygons_intersect(_square(0, 0), _square(1.5, 0))


def test_polygons_intersect_rotated_boxes_with_overlapping_aabbs():
    diamond = rotated_rect(Point(0, 0), 2, 2, 45.0)
    corner = _square(0.9, 0.9)
    assert not polygons_intersect(diamond, corner)


def test_candidate_order():
    candidates = candidate_offsets(_label('a'))
    assert len(candidates) == 17
    assert candidates[0] == Offset()
    assert [(round(c.dx, 9), round(c.dy, 9)) for c in candidates[1:3]] == [(0, 12), (0, -12)]
    assert [(round(c.dx, 9), round(c.dy, 9)) for c in candidates[9:11]] == [(12, 0), (-12, 0)]


def test_overlapping_labels_are_separated():
    offsets = resolve_collisions([_label('b'), _label('a')], {})
    assert offsets['a'] == Offset()
    assert math.isclose(offsets['b'].dx, 0.0, abs_tol=1e-9)
    assert math.isclose(offsets['b'].dy, 24.0)


def test_priority_goes_first():
    offsets = resolve_collisions([_label('a'), _label('z', priority=10)], {})
    assert offsets['z'] == Offset()
    assert offsets['a'] != Offset()


def test_pinned_labels_are_kept_and_avoided():
    pinned = {'b': Offset(0, 0)}
    offsets = resolve_collisions([_label('a', priority=10), _label('b')], pinned)
    assert offsets['b'] == Offset(0, 0)
    assert math.isclose(offsets['a'].dy, 24.0)


def test_resolution_is_idempotent():
    labels = [_label(f'l{i}', anchor=(i * 7, i * 3), rotation=15.0 * i) for i in range(6)]
    first = resolve_collisions(labels, {})
    second = resolve_collisions(labels, {})
    assert first == second


def test_exhausted_candidates_fall_back_to_preferred():
    blocker = _label('blocker', text='X' * 10, font_size=200)
    small = _label('small', text='1', font_size=10)
    offsets = resolve_collisions([blocker, small], {'blocker': Offset()})
    assert offsets['small'] == Offset()


def test_measurer_receives_font_and_padding_applies():
    measurer = FixedMeasurer(0, 0)
    # boxes are padding only: 12 x 6
    offsets = resolve_collisions(
        [_label('a', font_size=9), _label('b', anchor=(13, 0), font_size=9)], {}, measurer
    )
    assert offsets == {'a': Offset(), 'b': Offset()}
    assert measurer.calls[0] == ('100.0 px', 9, 'Arial')


def test_build_label_descriptors_for_line():
    line = Line(id='L1', points=((0, 0), (100, 0), (100, 100)))
    descriptors = {d.id: d for d in build_label_descriptors(line)}

    seg0 = descriptors['L1:segment:0']
    assert seg0.anchor == Point(56, -22)
    assert seg0.text == '100.0 px'
    assert seg0.rotation == 0.0
    assert seg0.priority == 0

    seg1 = descriptors['L1:segment:1']
    assert math.isclose(seg1.rotation, 90.0)

    angle = descriptors['L1:angle:1']
    assert angle.type == 'angle'
    assert angle.text == '90.0°'
    assert angle.priority == 10
    assert angle.anchor == Point(79, 21)
    assert len(descriptors) == 3


def test_layout_line_labels_uses_stored_label_positions():
    line = Line(
        id='L1',
        points=((0, 0), (100, 0)),
        label_positions=((56, -2),),
    )
    offsets = layout_line_labels(line)
    assert offsets['L1:segment:0'] == Offset(0, 20)


def test_layout_line_labels_covers_every_label():
    line = Line(id='L2', points=((0, 0), (40, 0), (40, 30), (0, 30)))
    offsets = layout_line_labels(line)
    assert set(offsets) == {
        'L2:segment:0',
        'L2:segment:1',
        'L2:segment:2',
        'L2:angle:1',
        'L2:angle:2',
    }
    assert layout_line_labels(line) == offsets


def test_pillow_fonts_are_cached_per_measurer():
    first, second = PillowTextMeasurer(), PillowTextMeasurer()
    first.measure('1.0 px', 12, 'Arial')
    first.measure('22.5 px', 12, 'Arial')
    assert list(first._fonts) == [('Arial', 12)]
    assert second._fonts == {}
