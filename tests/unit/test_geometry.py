from __future__ import annotations

import math

import numpy as np
import pytest

from realtime_pose.A_pose.geometry import (
    all_reliable,
    angle_abc_deg,
    angle_degrees,
    distance_2d,
    distance_3d,
    extract_joint_angles,
    horizontal_deviation,
    knee_angle,
    lateral_imbalance,
    midpoint,
)
from realtime_pose.A_pose.types import Landmark, as_landmark, landmark_at, landmarks_from_proto


def _lm(x: float, y: float, z: float = 0.0, visibility: float = 0.9) -> Landmark:
    return Landmark(x, y, z, visibility)


def test_right_angle_is_ninety_degrees_and_symmetric() -> None:
    a, b, c = _lm(1.0, 0.0), _lm(0.0, 0.0), _lm(0.0, 1.0)
    assert angle_degrees(a, b, c) == pytest.approx(90.0)
    assert angle_degrees(c, b, a) == pytest.approx(angle_degrees(a, b, c))


def test_angle_stays_in_range_for_straight_and_folded_limbs() -> None:
    vertex = _lm(0.0, 0.0)
    straight = angle_degrees(_lm(-1.0, 0.0), vertex, _lm(1.0, 0.0))
    folded = angle_degrees(_lm(1.0, 0.0), vertex, _lm(2.0, 0.0))
    assert straight == pytest.approx(180.0)
    assert folded == pytest.approx(0.0)


def test_zero_length_ray_yields_zero() -> None:
    vertex = _lm(0.3, 0.3)
    assert angle_degrees(_lm(0.3, 0.3), vertex, _lm(0.5, 0.5)) == 0.0


def test_angle_uses_depth_axis() -> None:
    angle = angle_degrees(_lm(0.0, 0.0, 1.0), _lm(0.0, 0.0, 0.0), _lm(1.0, 0.0, 0.0))
    assert angle == pytest.approx(90.0)


def test_low_visibility_gives_no_result_instead_of_number() -> None:
    weak = _lm(1.0, 0.0, visibility=0.2)
    vertex, other = _lm(0.0, 0.0), _lm(0.0, 1.0)

    assert angle_degrees(weak, vertex, other, min_visibility=0.5) is None
    assert angle_degrees(other, weak, vertex, min_visibility=0.5) is None
    assert distance_2d(weak, vertex, min_visibility=0.5) is None
    assert angle_degrees(None, vertex, other) is None


def test_distances() -> None:
    p = _lm(0.2, 0.4, 0.1)
    assert distance_2d(p, p) == 0.0
    assert distance_2d(_lm(0.0, 0.0), _lm(3.0, 4.0)) == pytest.approx(5.0)
    assert distance_3d(_lm(0.0, 0.0, 0.0), _lm(1.0, 2.0, 2.0)) == pytest.approx(3.0)


def test_midpoint_takes_minimum_visibility() -> None:
    mid = midpoint(_lm(0.0, 0.0, visibility=0.9), _lm(1.0, 1.0, 1.0, visibility=0.3))
    assert (mid.x, mid.y, mid.z) == pytest.approx((0.5, 0.5, 0.5))
    assert mid.visibility == pytest.approx(0.3)
    assert midpoint(None, _lm(0.0, 0.0)) is None


def test_empty_set_is_reliable() -> None:
    assert all_reliable([])
    assert not all_reliable([_lm(0.0, 0.0), None])


def test_horizontal_deviation_and_lateral_imbalance() -> None:
    assert horizontal_deviation(_lm(0.6, 0.0), 0.5) == pytest.approx(0.1)
    assert horizontal_deviation(_lm(0.6, 0.0, visibility=0.1), 0.5) is None
    assert lateral_imbalance(_lm(0.4, 0.50), _lm(0.6, 0.55)) == pytest.approx(0.05)
    assert lateral_imbalance(_lm(0.4, 0.50), _lm(0.6, 0.55), axis="x") == pytest.approx(0.2)
    with pytest.raises(ValueError):
        lateral_imbalance(_lm(0.4, 0.5), _lm(0.6, 0.5), axis="z")


def test_joint_angles_from_frame(squat_frame) -> None:
    standing = squat_frame()
    assert knee_angle(standing, "left") == pytest.approx(180.0)
    angles = extract_joint_angles(standing)
    assert set(angles) >= {"left_knee", "right_knee", "left_hip", "right_hip"}
    with pytest.raises(ValueError):
        knee_angle(standing, "middle")


def test_short_frame_reports_no_angle() -> None:
    assert knee_angle([_lm(0.0, 0.0)] * 5, "left") is None
    assert landmark_at([_lm(0.0, 0.0)], 3) is None


def test_landmark_normalisation_defaults_missing_visibility_to_zero() -> None:
    converted = landmarks_from_proto([{"x": 0.1, "y": 0.2}, [0.3, 0.4, 0.5, 0.6], None])
    assert converted[0] == Landmark(0.1, 0.2, 0.0, 0.0)
    assert converted[1].visibility == pytest.approx(0.6)
    assert converted[2] is None
    assert as_landmark(converted[0]) is converted[0]
    assert converted[0]["y"] == pytest.approx(0.2)
    assert converted[0].get("w") is None


def test_vectorised_angle_marks_degenerate_rows_as_nan() -> None:
    ax = np.array([1.0, 0.0])
    ay = np.array([0.0, 0.0])
    zeros = np.zeros(2)
    cx = np.array([0.0, 1.0])
    cy = np.array([1.0, 0.0])
    result = angle_abc_deg(ax, ay, zeros, zeros, cx, cy)
    assert result[0] == pytest.approx(90.0)
    assert math.isnan(result[1])


def test_landmark_requires_numeric_x_and_y() -> None:
    class Proto:
        x = 0.4
        y = 0.5
        z = None
        visibility = 0.8

    assert as_landmark(Proto()) == Landmark(0.4, 0.5, 0.0, 0.8)
    assert as_landmark([0.1, 0.2]) == as_landmark({"x": 0.1, "y": 0.2, "z": None})
    with pytest.raises(ValueError):
        as_landmark({"x": None, "y": 0.2})
    with pytest.raises(ValueError):
        as_landmark({"y": 0.2})
    with pytest.raises(ValueError):
        as_landmark({"x": "0.1", "y": 0.2})
