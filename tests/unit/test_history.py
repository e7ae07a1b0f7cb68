from __future__ import annotations

import pytest

from realtime_pose.A_pose.types import Landmark
from realtime_pose.C_analysis.history import BoundedHistory, MetricsTracker


def test_history_is_bounded_fifo() -> None:
    history = BoundedHistory(3)
    for value in (0.1, 0.2, 0.3, 0.4):
        history.append(value)
    assert history.snapshot() == [0.2, 0.3, 0.4]
    assert len(history) == 3
    assert history.total_inserted == 4


def test_session_maximum_survives_eviction() -> None:
    history = BoundedHistory(2)
    assert history.append(0.9, context="deep")
    assert not history.append(0.1)
    assert not history.append(0.2)

    assert 0.9 not in history.snapshot()
    assert history.maximum == pytest.approx(0.9)
    assert history.max_index == 0
    assert history.max_context == "deep"


def test_first_insert_sets_maximum_even_when_zero() -> None:
    history = BoundedHistory(5)
    assert history.maximum == 0.0
    assert history.append(0.0)
    assert history.max_index == 0


def test_clear_forgets_maximum() -> None:
    history = BoundedHistory(5)
    history.append(0.5)
    history.clear()
    assert history.maximum == 0.0
    assert history.max_index is None
    assert len(history) == 0


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedHistory(0)


def test_tracker_bar_path_uses_first_position_as_reference() -> None:
    tracker = MetricsTracker(10)
    tracker.update_bar_path(Landmark(0.5, 0.30, 0.0, 0.9), 0)
    tracker.update_bar_path(Landmark(0.5, 0.45, 0.0, 0.9), 100)
    update = tracker.update_bar_path(Landmark(0.5, 0.35, 0.0, 0.9), 200)

    assert update.starting_position.y == pytest.approx(0.30)
    assert update.vertical_deviation == pytest.approx(0.05)
    assert update.max_deviation == pytest.approx(0.15)
    assert [point.timestamp_ms for point in update.history] == [0, 100, 200]

    tracker.reset_bar_path()
    assert tracker.bar_path_metrics().starting_position is None
    assert tracker.max_bar_path_deviation == 0.0


def test_tracker_lateral_shift_remembers_depth_of_maximum() -> None:
    tracker = MetricsTracker(10)
    tracker.update_lateral_shift(0.01, 20.0)
    tracker.update_lateral_shift(0.04, 85.0)
    tracker.update_lateral_shift(0.02, 40.0)

    metrics = tracker.lateral_shift_metrics()
    assert metrics.shift_history == [0.01, 0.04, 0.02]
    assert metrics.max_lateral_shift == pytest.approx(0.04)
    assert metrics.max_shift_depth == pytest.approx(85.0)
