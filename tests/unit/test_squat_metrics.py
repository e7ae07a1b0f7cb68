"""Pruebas del pipeline de métricas de sentadilla por fotograma."""

from __future__ import annotations

import pytest

from realtime_pose.A_pose.types import Landmark
from realtime_pose.A_pose import constants as idx
from realtime_pose.C_analysis.squat_metrics import SquatMetricsPipeline
from realtime_pose.config.models import DepthConfig, SquatAnalysisConfig
from realtime_pose.core.types import RepPhase


def test_missing_frame_short_circuits() -> None:
    metrics = SquatMetricsPipeline().process(None, 0)
    assert not metrics.has_valid_pose
    assert metrics.depth.depth_percentage is None
    assert metrics.joint_angles.average_knee is None
    assert metrics.key_landmark_visibility == {"hips": 0.0, "knees": 0.0, "ankles": 0.0, "shoulders": 0.0}


def test_unreliable_required_landmarks_short_circuit(squat_frame) -> None:
    frame = squat_frame()
    frame[idx.LEFT_ANKLE] = Landmark(0.45, 0.9, 0.0, 0.3)

    metrics = SquatMetricsPipeline().process(frame, 0)

    assert not metrics.has_valid_pose
    assert metrics.balance.lateral_deviation is None
    assert metrics.key_landmark_visibility["ankles"] == pytest.approx(0.6)
    assert metrics.rep_counting.phase is RepPhase.STANDING


def test_standing_frame_has_straight_knees_and_zero_depth(squat_frame) -> None:
    metrics = SquatMetricsPipeline().process(squat_frame(), 0)

    assert metrics.joint_angles.left_knee == pytest.approx(180.0)
    assert metrics.depth.depth_percentage == pytest.approx(0.0)
    assert not metrics.depth.has_achieved_depth
    # Rodillas extendidas: la pose no cuenta como válida para el análisis.
    assert not metrics.has_valid_pose


def test_bottom_frame_reaches_depth_with_valid_pose(squat_frame) -> None:
    metrics = SquatMetricsPipeline().process(squat_frame(0.7, knee_z=-0.2), 0)

    assert metrics.joint_angles.average_knee == pytest.approx(45.0)
    assert metrics.depth.depth_percentage == pytest.approx(100.0)
    assert metrics.depth.has_achieved_depth
    assert metrics.has_valid_pose
    assert metrics.balance.is_balanced


def test_calibration_averages_standing_frames(squat_frame) -> None:
    pipeline = SquatMetricsPipeline(SquatAnalysisConfig(depth=DepthConfig(calibration_frames=2)))
    pipeline.process(squat_frame(0.4), 0)
    assert not pipeline.is_calibrated
    pipeline.process(squat_frame(0.4), 100)
    assert pipeline.is_calibrated
    assert pipeline.standing_baseline == pytest.approx((0.4, 0.7))

    # Una vez calibrado, nuevos fotogramas de pie no mueven la referencia.
    pipeline.process(squat_frame(0.45), 200)
    assert pipeline.standing_baseline == pytest.approx((0.4, 0.7))

    metrics = pipeline.process(squat_frame(0.55), 300)
    assert metrics.depth.depth_percentage == pytest.approx(50.0)


def test_lateral_shift_is_tracked(squat_frame) -> None:
    metrics = SquatMetricsPipeline().process(squat_frame(hip_shift_x=0.02), 0)
    assert metrics.balance.lateral_deviation == pytest.approx(0.02)
    assert not metrics.balance.is_balanced
    assert metrics.balance.max_lateral_shift == pytest.approx(0.02)


def test_bar_path_follows_shoulder_midpoint(squat_frame) -> None:
    pipeline = SquatMetricsPipeline()
    first = pipeline.process(squat_frame(), 0)
    assert first.bar_position.is_valid
    assert first.bar_path.vertical_deviation == pytest.approx(0.0)

    second = pipeline.process(squat_frame(shoulder_y=0.4), 100)
    assert second.bar_path.vertical_deviation == pytest.approx(0.1)
    assert second.bar_path.max_deviation == pytest.approx(0.1)
    assert len(second.bar_path.history) == 2


def test_full_rep_is_counted_and_resets_bar_path(squat_frame) -> None:
    pipeline = SquatMetricsPipeline()
    frames = [
        squat_frame(0.5),
        squat_frame(0.6),
        squat_frame(0.7, knee_z=-0.2, shoulder_y=0.45),
        squat_frame(0.62),
        squat_frame(0.5),
    ]
    results = [pipeline.process(frame, step * 100.0) for step, frame in enumerate(frames)]

    assert [r.rep_counting.phase for r in results] == [
        RepPhase.STANDING,
        RepPhase.DESCENDING,
        RepPhase.BOTTOM,
        RepPhase.ASCENDING,
        RepPhase.STANDING,
    ]
    last = results[-1]
    assert last.rep_counting.rep_completed
    assert last.rep_counting.rep_count == 1
    assert last.bar_path.max_deviation == pytest.approx(0.15)
    assert pipeline.tracker.max_bar_path_deviation == 0.0
    assert last.to_row()["rep_count"] == 1


def test_reset_clears_calibration_and_reps(squat_frame) -> None:
    pipeline = SquatMetricsPipeline(SquatAnalysisConfig(depth=DepthConfig(calibration_frames=1)))
    pipeline.process(squat_frame(0.4), 0)
    assert pipeline.is_calibrated
    pipeline.reset()
    assert not pipeline.is_calibrated
    assert pipeline.rep_counter.rep_count == 0
