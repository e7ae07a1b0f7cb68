"""Pruebas del validador de landmarks y de la confianza ponderada de la pose."""

from __future__ import annotations

import pytest

from realtime_pose.A_pose import constants as idx
from realtime_pose.A_pose.confidence import group_visibility, key_landmark_visibility, pose_confidence
from realtime_pose.A_pose.types import Landmark
from realtime_pose.A_pose.validation import LandmarkValidator
from realtime_pose.core.types import ExerciseType


def _frame(visibility: float = 0.9, count: int = 33):
    return [Landmark(0.5, 0.5, 0.0, visibility) for _ in range(count)]


def test_empty_frame_is_invalid_with_zero_stats() -> None:
    result = LandmarkValidator().validate_visibility([])
    assert not result.is_valid
    assert result.total_count == 0
    assert result.average_visibility == 0.0
    assert result.visibility_percentage == 0.0


def test_visibility_counts_missing_and_weak_landmarks() -> None:
    frame = _frame(0.8, 4)
    frame[1] = None
    frame[2] = Landmark(0.5, 0.5, 0.0, 0.2)

    result = LandmarkValidator().validate_visibility(frame, threshold=0.5)

    assert not result.is_valid
    assert result.invalid_indices == [1, 2]
    assert result.visible_count == 2
    assert result.visibility_percentage == pytest.approx(50.0)
    assert result.average_visibility == pytest.approx((0.8 + 0.2 + 0.8) / 4)
    assert result.min_visibility == pytest.approx(0.2)


def test_completeness_deduplicates_and_flags_missing() -> None:
    frame = _frame(0.9, 10)
    frame[3] = Landmark(0.5, 0.5, 0.0, 0.0)
    result = LandmarkValidator().validate_completeness(frame, [1, 1, 3, 20])

    assert result.required_count == 3
    assert result.missing_indices == [3, 20]
    assert result.completeness_percentage == pytest.approx(100.0 / 3)


def test_empty_requirement_list_is_complete() -> None:
    result = LandmarkValidator().validate_completeness(_frame(), [])
    assert result.is_complete
    assert result.completeness_percentage == 100.0


def test_quality_without_history_or_symmetry() -> None:
    quality = LandmarkValidator().assess_quality(_frame(0.8))
    assert quality.average_confidence == pytest.approx(0.8)
    assert quality.overall_score == pytest.approx(0.8 * 0.5 + 0.25 + 0.25)
    assert quality.meets_quality_threshold


def test_quality_penalises_low_confidence_and_movement() -> None:
    validator = LandmarkValidator()
    previous = _frame(0.3)
    moved = [Landmark(lm.x + 0.05, lm.y, lm.z, lm.visibility) for lm in previous]

    quality = validator.assess_quality(moved, previous=previous)

    assert quality.stability_score == 0.0
    assert quality.overall_score == pytest.approx((0.3 * 0.5 + 0.25) * 0.75)
    assert not quality.meets_quality_threshold


def test_squat_pose_validation_requires_key_landmarks() -> None:
    validator = LandmarkValidator()
    assert validator.validate_pose(_frame(0.9), ExerciseType.SQUAT).is_valid

    frame = _frame(0.9)
    frame[idx.LEFT_KNEE] = Landmark(0.5, 0.5, 0.0, 0.7)
    result = validator.validate_pose(frame, "squat")
    assert not result.exercise_specific_valid
    assert not result.is_valid
    assert any("squat" in message for message in result.messages)


def test_unknown_exercise_falls_back_to_generic() -> None:
    result = LandmarkValidator().validate_pose(_frame(0.6), "cartwheel")
    assert result.is_valid
    assert result.exercise_specific_valid


def test_pose_confidence_is_weighted_and_ignores_noise() -> None:
    frame = _frame(0.0)
    frame[idx.LEFT_HIP] = Landmark(0.5, 0.5, 0.0, 1.0)
    frame[idx.RIGHT_HIP] = Landmark(0.5, 0.5, 0.0, 1.0)
    frame[idx.LEFT_ANKLE] = Landmark(0.5, 0.5, 0.0, 0.5)
    frame[idx.RIGHT_KNEE] = Landmark(0.5, 0.5, 0.0, 0.05)

    expected = (0.25 * 1.0 + 0.25 * 1.0 + 0.1 * 0.5) / (0.25 + 0.25 + 0.1)
    assert pose_confidence(frame) == pytest.approx(expected)
    assert pose_confidence(_frame(0.05)) == 0.0
    assert pose_confidence([]) == 0.0


def test_group_visibility_averages_pairs() -> None:
    frame = _frame(0.9)
    frame[idx.LEFT_KNEE] = Landmark(0.5, 0.5, 0.0, 0.5)
    assert group_visibility(frame, idx.KNEE_CENTER) == pytest.approx(0.7)
    groups = key_landmark_visibility(frame)
    assert set(groups) == {"hips", "knees", "ankles", "shoulders"}
    assert groups["hips"] == pytest.approx(0.9)
