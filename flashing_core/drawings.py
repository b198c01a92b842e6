"""Registry of drawings (original, tapered, custom) with per-drawing history."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .history import DEFAULT_DRAWING_ID, HistoryManager, snapshot
from .types import Drawing, DrawingType, Line

logger = logging.getLogger(__name__)

LineSnapshot = Tuple[Line, ...]


def _default_drawing() -> Drawing:
    return Drawing(id=DEFAULT_DRAWING_ID, name="Original", type="original")


class DrawingRegistry:
    """Holds every drawing plus the render order and the active drawing.

    Line changes go through :meth:`update_lines` so they are recorded in the
    injected :class:`HistoryManager`. The default ``original`` drawing always
    exists and cannot be removed.
    """

    def __init__(self, history: Optional[HistoryManager[LineSnapshot]] = None):
        self.history: HistoryManager[LineSnapshot] = history or HistoryManager()
        self._drawings: Dict[str, Drawing] = {}
        self.order: List[str] = []
        self.active_id: str = DEFAULT_DRAWING_ID
        self._install(_default_drawing())

    def _install(self, drawing: Drawing) -> None:
        self._drawings[drawing.id] = drawing
        if drawing.id not in self.order:
            self.order.append(drawing.id)
        self.history.forget(drawing.id)
        self.history.commit(snapshot(drawing.lines), drawing.id)

    def __contains__(self, drawing_id: object) -> bool:
        return drawing_id in self._drawings

    def __getitem__(self, drawing_id: str) -> Drawing:
        return self._drawings[drawing_id]

    @property
    def active(self) -> Drawing:
        return self._drawings[self.active_id]

    def drawings(self) -> List[Drawing]:
        """Drawings in render order (first is the bottom layer)."""

        return [self._drawings[drawing_id] for drawing_id in self.order]

    def add_drawing(self, drawing: Drawing) -> None:
        self._install(drawing)
        logger.info("Added drawing %s (%s)", drawing.id, drawing.type)

    def remove_drawing(self, drawing_id: str) -> bool:
        if drawing_id == DEFAULT_DRAWING_ID or drawing_id not in self._drawings:
            return False
        del self._drawings[drawing_id]
        self.order.remove(drawing_id)
        self.history.forget(drawing_id)
        if self.active_id == drawing_id:
            self.active_id = DEFAULT_DRAWING_ID
        logger.info("Removed drawing %s", drawing_id)
        return True

    def set_active(self, drawing_id: str) -> bool:
        if drawing_id not in self._drawings:
            return False
        self.active_id = drawing_id
        return True

    def update_lines(self, drawing_id: str, lines: Iterable[Line]) -> bool:
        drawing = self._drawings.get(drawing_id)
        if drawing is None:
            return False
        frozen = snapshot(lines)
        self._drawings[drawing_id] = replace(drawing, lines=frozen)
        self.history.commit(frozen, drawing_id)
        return True

    def update_drawing(self, drawing_id: str, **changes: object) -> bool:
        """Change drawing attributes; ``lines`` is routed through :meth:`update_lines`."""

        if drawing_id not in self._drawings:
            return False
        if "id" in changes:
            raise ValueError("a drawing id cannot be changed")
        lines = changes.pop("lines", None)
        if lines is not None:
            self.update_lines(drawing_id, lines)  # type: ignore[arg-type]
        if changes:
            self._drawings[drawing_id] = replace(self._drawings[drawing_id], **changes)
        return True

    def sync_drawings(self, source_id: str, target_id: str) -> bool:
        """Copy the source's lines onto the target and record the provenance."""

        source = self._drawings.get(source_id)
        if source is None or target_id not in self._drawings:
            return False
        self.update_lines(target_id, source.lines)
        self._drawings[target_id] = replace(self._drawings[target_id], source_id=source_id)
        logger.info("Synced drawing %s from %s (%d lines)", target_id, source_id, len(source.lines))
        return True

    def undo(self, drawing_id: Optional[str] = None) -> bool:
        drawing_id = drawing_id or self.active_id
        if drawing_id not in self._drawings:
            return False
        lines = self.history.undo(drawing_id)
        if lines is None:
            return False
        self._drawings[drawing_id] = replace(self._drawings[drawing_id], lines=lines)
        return True

    def redo(self, drawing_id: Optional[str] = None) -> bool:
        drawing_id = drawing_id or self.active_id
        if drawing_id not in self._drawings:
            return False
        lines = self.history.redo(drawing_id)
        if lines is None:
            return False
        self._drawings[drawing_id] = replace(self._drawings[drawing_id], lines=lines)
        return True

    def drawing_by_type(self, drawing_type: DrawingType) -> Optional[Drawing]:
        for drawing_id in self.order:
            drawing = self._drawings[drawing_id]
            if drawing.type == drawing_type:
                return drawing
        return None

    def clear_all(self) -> None:
        self._drawings.clear()
        self.order.clear()
        self.history.clear()
        self.active_id = DEFAULT_DRAWING_ID
        self._install(_default_drawing())
