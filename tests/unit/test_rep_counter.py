"""Pruebas de la máquina de estados de repeticiones."""

from __future__ import annotations

from realtime_pose.C_analysis.rep_counter import RepCounter, RepCountingMetrics
from realtime_pose.core.types import RepPhase


def _metrics(pct: float, *, lateral: float = 0.0, bar: float = 0.0) -> RepCountingMetrics:
    return RepCountingMetrics(
        depth_percentage=pct,
        has_achieved_depth=pct >= 90.0,
        lateral_shift=lateral,
        bar_path_deviation=bar,
    )


def _run(counter: RepCounter, depths, **kwargs):
    state = None
    for step, pct in enumerate(depths):
        state = counter.update(_metrics(pct, **kwargs), step * 100.0)
    return state


def test_full_cycle_counts_one_valid_rep() -> None:
    counter = RepCounter()
    phases = []
    for step, pct in enumerate([0, 30, 95, 60, 10]):
        phases.append(counter.update(_metrics(pct), step * 100.0).phase)

    assert phases == [
        RepPhase.STANDING,
        RepPhase.DESCENDING,
        RepPhase.BOTTOM,
        RepPhase.ASCENDING,
        RepPhase.STANDING,
    ]
    state = counter.state()
    assert state.rep_count == 1
    assert len(state.completed_reps) == 1
    rep = state.completed_reps[0]
    assert rep.is_valid
    assert rep.max_depth == 95
    assert rep.start_time_ms == 100.0
    assert rep.end_time_ms == 400.0


def test_completion_flag_is_set_only_on_closing_frame() -> None:
    counter = RepCounter()
    last = _run(counter, [0, 30, 95, 60, 10])
    assert last.rep_completed
    assert not counter.update(_metrics(0), 500.0).rep_completed


def test_shallow_rep_is_recorded_but_not_counted() -> None:
    counter = RepCounter()
    state = _run(counter, [0, 30, 85, 60, 10])
    assert state.rep_count == 0
    assert len(state.completed_reps) == 1
    assert not state.completed_reps[0].is_valid


def test_excess_lateral_shift_invalidates_rep() -> None:
    counter = RepCounter()
    state = _run(counter, [0, 30, 95, 60, 10], lateral=0.2)
    assert state.rep_count == 0
    assert not state.completed_reps[0].is_valid


def test_bottom_is_held_until_ascending_threshold() -> None:
    counter = RepCounter()
    state = _run(counter, [0, 30, 95, 75])
    assert state.phase is RepPhase.BOTTOM
    assert state.current_rep.phase is RepPhase.BOTTOM


def test_reset_clears_counter() -> None:
    counter = RepCounter()
    _run(counter, [0, 30, 95, 60, 10])
    counter.reset()
    assert counter.rep_count == 0
    assert counter.phase is RepPhase.STANDING
    assert counter.state().completed_reps == []
