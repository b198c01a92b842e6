import pytest

from flashing_core.history import HistoryManager, snapshot
from flashing_core.types import Line


def _state(tag: str):
    return snapshot([Line(id=tag, points=((0, 0), (1, 0)))])


def test_undo_redo_round_trip():
    history = HistoryManager()
    s1, s2 = _state('s1'), _state('s2')
    history.commit(s1)
    history.commit(s2)

    assert history.undo() == s1
    assert history.present() == s1
    assert history.redo() == s2
    assert history.present() == s2


def test_commit_after_undo_clears_redo():
    history = HistoryManager()
    history.commit(_state('a'))
    history.commit(_state('b'))
    history.undo()
    history.commit(_state('c'))

    assert not history.can_redo()
    assert history.redo() is None
    assert history.undo() == _state('a')


def test_nothing_to_undo_or_redo():
    history = HistoryManager()
    assert history.undo() is None
    assert history.redo() is None
    history.commit(_state('only'))
    assert not history.can_undo()
    assert history.undo() is None
    assert history.present() == _state('only')


def test_depth_cap_drops_oldest():
    history = HistoryManager(depth=3)
    for i in range(6):
        history.commit(_state(f's{i}'))

    assert history.past_depth() == 3
    assert [history.undo() for _ in range(3)] == [_state('s4'), _state('s3'), _state('s2')]
    assert history.undo() is None


def test_default_depth_is_thirty():
    history = HistoryManager()
    for i in range(40):
        history.commit(_state(f's{i}'))
    assert history.past_depth() == 30


def test_timelines_are_per_drawing():
    history = HistoryManager()
    history.commit(_state('a1'), 'a')
    history.commit(_state('a2'), 'a')
    history.commit(_state('b1'), 'b')

    assert history.undo('b') is None
    assert history.undo('a') == _state('a1')
    assert sorted(history.drawing_ids()) == ['a', 'b']

    history.forget('a')
    assert not history.can_redo('a')
    history.clear()
    assert history.drawing_ids() == []


def test_invalid_depth():
    with pytest.raises(ValueError):
        HistoryManager(depth=0)
