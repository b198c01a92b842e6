"""Linear undo/redo over immutable geometry snapshots, one timeline per drawing."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Generic, List, Optional, TypeVar

from .config import get_editor_config

logger = logging.getLogger(__name__)

S = TypeVar("S")

DEFAULT_DRAWING_ID = "original"


@dataclass
class Timeline(Generic[S]):
    """Present state with bounded past and unbounded future stacks."""

    depth: int
    present: Optional[S] = None
    past: Deque[S] = field(default_factory=deque)
    future: List[S] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.past = deque(self.past, maxlen=self.depth)

    def commit(self, state: S) -> None:
        if self.present is not None:
            self.past.append(self.present)
        self.present = state
        self.future.clear()

    def undo(self) -> Optional[S]:
        if not self.past:
            return None
        previous = self.past.pop()
        if self.present is not None:
            self.future.insert(0, self.present)
        self.present = previous
        return previous

    def redo(self) -> Optional[S]:
        if not self.future:
            return None
        following = self.future.pop(0)
        if self.present is not None:
            self.past.append(self.present)
        self.present = following
        return following


class HistoryManager(Generic[S]):
    """Undo/redo stacks keyed by drawing id.

    ``commit`` records the state produced by an edit; the state it replaces
    moves onto the past stack (oldest snapshots are dropped beyond ``depth``)
    and any redo history is discarded. Snapshots must be immutable values.
    """

    def __init__(self, depth: Optional[int] = None):
        self.depth = depth if depth is not None else get_editor_config().history_depth
        if self.depth < 1:
            raise ValueError("history depth must be at least 1")
        self._timelines: Dict[str, Timeline[S]] = {}

    def _timeline(self, drawing_id: str) -> Timeline[S]:
        timeline = self._timelines.get(drawing_id)
        if timeline is None:
            timeline = Timeline(depth=self.depth)
            self._timelines[drawing_id] = timeline
        return timeline

    def commit(self, state: S, drawing_id: str = DEFAULT_DRAWING_ID) -> None:
        timeline = self._timeline(drawing_id)
        timeline.commit(state)
        logger.debug("History %s: committed snapshot (past=%d)", drawing_id, len(timeline.past))

    def undo(self, drawing_id: str = DEFAULT_DRAWING_ID) -> Optional[S]:
        """Step back and return the restored snapshot, or ``None`` when there is none."""

        state = self._timeline(drawing_id).undo()
        if state is None:
            logger.debug("History %s: nothing to undo", drawing_id)
        return state

    def redo(self, drawing_id: str = DEFAULT_DRAWING_ID) -> Optional[S]:
        state = self._timeline(drawing_id).redo()
        if state is None:
            logger.debug("History %s: nothing to redo", drawing_id)
        return state

    def present(self, drawing_id: str = DEFAULT_DRAWING_ID) -> Optional[S]:
        return self._timeline(drawing_id).present

    def can_undo(self, drawing_id: str = DEFAULT_DRAWING_ID) -> bool:
        return bool(self._timeline(drawing_id).past)

    def can_redo(self, drawing_id: str = DEFAULT_DRAWING_ID) -> bool:
        return bool(self._timeline(drawing_id).future)

    def past_depth(self, drawing_id: str = DEFAULT_DRAWING_ID) -> int:
        return len(self._timeline(drawing_id).past)

    def forget(self, drawing_id: str) -> None:
        self._timelines.pop(drawing_id, None)

    def clear(self) -> None:
        self._timelines.clear()

    def drawing_ids(self) -> List[str]:
        return list(self._timelines)


def snapshot(lines: Any) -> tuple:
    """Freeze a sequence of lines into a tuple suitable for the history stacks."""

    return tuple(lines)
