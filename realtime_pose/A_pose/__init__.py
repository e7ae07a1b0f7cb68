"""Landmarks, primitivas geométricas y validación de pose."""

from .confidence import apply_noise_floor, group_visibility, key_landmark_visibility, pose_confidence
from .geometry import (
    all_reliable,
    angle_abc_deg,
    angle_degrees,
    ankle_angle,
    distance_2d,
    distance_3d,
    extract_joint_angles,
    hip_angle,
    hip_midpoint,
    horizontal_deviation,
    is_reliable,
    knee_angle,
    lateral_imbalance,
    midpoint,
    shoulder_midpoint,
)
from .types import Landmark, LandmarkFrame, as_landmark, landmark_at, landmarks_from_proto
from .validation import LandmarkValidator, PoseValidationResult

__all__ = [
    "Landmark",
    "LandmarkFrame",
    "LandmarkValidator",
    "PoseValidationResult",
    "all_reliable",
    "angle_abc_deg",
    "angle_degrees",
    "ankle_angle",
    "apply_noise_floor",
    "as_landmark",
    "distance_2d",
    "distance_3d",
    "extract_joint_angles",
    "group_visibility",
    "hip_angle",
    "hip_midpoint",
    "horizontal_deviation",
    "is_reliable",
    "key_landmark_visibility",
    "knee_angle",
    "landmark_at",
    "landmarks_from_proto",
    "lateral_imbalance",
    "midpoint",
    "pose_confidence",
    "shoulder_midpoint",
]
