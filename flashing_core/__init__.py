from .types import (
    NO_FOLD,
    CatalogError,
    Drawing,
    FoldSegmentEdit,
    FoldState,
    FoldTemplate,
    FoldTemplateSegment,
    InvalidInputError,
    LabelDescriptor,
    Line,
    Offset,
    Point,
    TaperedDiagram,
    TaperedSegment,
    UnknownTemplateError,
)
from .config import EditorConfig, get_editor_config, reset_editor_config, set_editor_config
from .geometry import (
    angle_at_vertex,
    angle_label_position,
    distance,
    interior_angle,
    rotate_around,
    upright_rotation,
)
from .folds import (
    FoldCatalog,
    FoldChain,
    add_fold_segment,
    apply_fold,
    fold_points,
    load_fold_catalog,
    new_position_by_angle_length,
    sanitize_fold_edits,
    synthesize_fold,
)
from .edits import (
    EditOutcome,
    add_segment,
    append_point,
    edit_interior_angle,
    edit_segment_length,
    move_point,
    rotate_line_subchain,
    rotate_subchain,
)
from .tapered import create_tapered_diagram, turn_angles, update_segment_length
from .analysis import AngleData, GeometryInfo, SegmentData, format_angle, format_length, geometry_info
from .labels import (
    HeuristicTextMeasurer,
    PillowTextMeasurer,
    TextExtent,
    build_label_descriptors,
    layout_line_labels,
    resolve_collisions,
)
from .history import HistoryManager
from .drawings import DrawingRegistry
from .requests import (
    AddSegment,
    ApplyFold,
    EditInteriorAngle,
    EditRequest,
    EditSegmentLength,
    MovePoint,
    apply_request,
)

__all__ = [
    'NO_FOLD',
    'CatalogError',
    'Drawing',
    'FoldSegmentEdit',
    'FoldState',
    'FoldTemplate',
    'FoldTemplateSegment',
    'InvalidInputError',
    'LabelDescriptor',
    'Line',
    'Offset',
    'Point',
    'TaperedDiagram',
    'TaperedSegment',
    'UnknownTemplateError',
    'EditorConfig',
    'get_editor_config',
    'set_editor_config',
    'reset_editor_config',
    'angle_at_vertex',
    'angle_label_position',
    'distance',
    'interior_angle',
    'rotate_around',
    'upright_rotation',
    'FoldCatalog',
    'FoldChain',
    'add_fold_segment',
    'apply_fold',
    'fold_points',
    'load_fold_catalog',
    'new_position_by_angle_length',
    'sanitize_fold_edits',
    'synthesize_fold',
    'EditOutcome',
    'add_segment',
    'append_point',
    'edit_interior_angle',
    'edit_segment_length',
    'move_point',
    'rotate_line_subchain',
    'rotate_subchain',
    'create_tapered_diagram',
    'turn_angles',
    'update_segment_length',
    'AngleData',
    'GeometryInfo',
    'SegmentData',
    'format_angle',
    'format_length',
    'geometry_info',
    'HeuristicTextMeasurer',
    'PillowTextMeasurer',
    'TextExtent',
    'build_label_descriptors',
    'layout_line_labels',
    'resolve_collisions',
    'HistoryManager',
    'DrawingRegistry',
    'AddSegment',
    'ApplyFold',
    'EditInteriorAngle',
    'EditRequest',
    'EditSegmentLength',
    'MovePoint',
    'apply_request',
]
