import pytest

from logq.cli.core.timestamps import EPSILON_NS
from logq.cli.stream.window import TimeWindow, WindowTracker

S = 1_000_000_000


def test_window_requires_start_before_end() -> None:
    with pytest.raises(ValueError):
        TimeWindow(5, 5)
    with pytest.raises(ValueError):
        TimeWindow(6, 5)


def test_window_is_half_open() -> None:
    window = TimeWindow(10, 20)
    assert window.contains(10)
    assert window.contains(19)
    assert not window.contains(20)
    assert not window.contains(9)


def test_starting_at_backs_off_one_epsilon() -> None:
    tracker = WindowTracker.starting_at(100 * S)
    assert tracker.bound == 100 * S - EPSILON_NS
    assert tracker.next(102 * S) == TimeWindow(100 * S - EPSILON_NS, 102 * S)


def test_advance_moves_strictly_past_last_event() -> None:
    """Window 1 = [0, 2) returns t=1; window 2 = [1+e, 4); an empty window 2
    leaves window 3 at [1+e, 6)."""
    tracker = WindowTracker(0)
    assert tracker.next(2 * S) == TimeWindow(0, 2 * S)

    tracker.advance(1 * S)
    assert tracker.next(4 * S) == TimeWindow(1 * S + EPSILON_NS, 4 * S)

    tracker.advance(None)
    assert tracker.next(6 * S) == TimeWindow(1 * S + EPSILON_NS, 6 * S)


def test_empty_windows_keep_the_original_start() -> None:
    tracker = WindowTracker(0)
    tracker.next(2 * S)
    tracker.advance(None)
    assert tracker.next(4 * S).start == 0
    assert tracker.bound == 0


def test_event_one_epsilon_after_the_last_is_still_covered() -> None:
    tracker = WindowTracker(0)
    tracker.next(2 * S)
    tracker.advance(S)

    window = tracker.next(4 * S)
    assert not window.contains(S)
    assert window.contains(S + EPSILON_NS)


def test_advance_never_moves_backwards() -> None:
    tracker = WindowTracker(10 * S)
    tracker.advance(3 * S)
    assert tracker.bound == 10 * S


def test_consecutive_windows_are_contiguous() -> None:
    tracker = WindowTracker(0)
    latest = [S, None, 5 * S, None, 9 * S]
    windows = []
    for i, seen in enumerate(latest, start=1):
        windows.append(tracker.next(2 * S * i))
        tracker.advance(seen)

    for prev, cur, seen in zip(windows, windows[1:], latest):
        expected_start = prev.start if seen is None else seen + EPSILON_NS
        assert cur.start == expected_start
        assert cur.start < prev.end <= cur.end


def test_clock_stepping_backwards_does_not_shrink_the_window() -> None:
    tracker = WindowTracker(0)
    assert tracker.next(10 * S).end == 10 * S
    assert tracker.next(7 * S).end == 10 * S


def test_events_from_the_future_keep_windows_non_empty() -> None:
    tracker = WindowTracker(0)
    tracker.next(2 * S)
    tracker.advance(5 * S)

    window = tracker.next(3 * S)
    assert window == TimeWindow(5 * S + EPSILON_NS, 5 * S + 2 * EPSILON_NS)


def test_epsilon_must_be_positive() -> None:
    with pytest.raises(ValueError):
        WindowTracker(0, epsilon=0)
