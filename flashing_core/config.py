"""Configuration helpers for the editing and layout engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Tuple


@dataclass
class EditorConfig:
    """Tunable constants shared by the editors and the label resolver."""

    history_depth: int = 30
    label_padding_x: float = 12.0
    label_padding_y: float = 6.0
    label_step: float = 12.0
    label_step_count: int = 4
    segment_font_size: float = 12.0
    angle_font_size: float = 13.0
    font_family: str = "Arial"
    segment_label_offset: Tuple[float, float] = (6.0, -22.0)
    angle_label_distance: float = 30.0
    segment_priority: int = 0
    angle_priority: int = 10
    length_decimals: int = 1
    angle_decimals: int = 1
    length_unit: str = "px"
    default_fold_length: float = 50.0
    default_fold_angle: float = 0.0


_EDITOR_CONFIG = EditorConfig()


def get_editor_config() -> EditorConfig:
    return copy.deepcopy(_EDITOR_CONFIG)


def set_editor_config(config: EditorConfig) -> None:
    global _EDITOR_CONFIG
    _EDITOR_CONFIG = copy.deepcopy(config)


def reset_editor_config() -> None:
    set_editor_config(EditorConfig())
