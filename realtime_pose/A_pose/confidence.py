"""Confianza global de la pose y visibilidad media por grupos de landmarks."""

from __future__ import annotations

from typing import Dict, Mapping, Sequence, Tuple

from realtime_pose.config.settings import NOISE_FLOOR_THRESHOLD

from .constants import KEY_LANDMARK_WEIGHTS, LANDMARK_GROUPS
from .types import LandmarkFrame, landmark_at


def apply_noise_floor(value: float, noise_floor: float = NOISE_FLOOR_THRESHOLD) -> float:
    """Trata como 0 las visibilidades espurias por debajo del suelo de ruido."""

    return 0.0 if value < noise_floor else float(value)


def pose_confidence(
    landmarks: LandmarkFrame,
    weights: Mapping[int, float] = KEY_LANDMARK_WEIGHTS,
    noise_floor: float = NOISE_FLOOR_THRESHOLD,
) -> float:
    """Media ponderada de la visibilidad de los landmarks clave.

    Solo cuentan los landmarks por encima del suelo de ruido, y la media se
    normaliza por la suma de sus pesos; si ninguno lo supera se devuelve 0.
    """

    total_weight = 0.0
    weighted = 0.0
    for index, weight in weights.items():
        lm = landmark_at(landmarks, index)
        if lm is None:
            continue
        visibility = apply_noise_floor(lm.visibility, noise_floor)
        if visibility > 0:
            total_weight += weight
            weighted += visibility * weight
    return weighted / total_weight if total_weight > 0 else 0.0


def group_visibility(
    landmarks: LandmarkFrame, indices: Sequence[int], noise_floor: float = NOISE_FLOOR_THRESHOLD
) -> float:
    """Visibilidad media de un grupo, 0 si cae bajo el suelo de ruido."""

    present = [lm for lm in (landmark_at(landmarks, idx) for idx in indices) if lm is not None]
    if not present:
        return 0.0
    average = sum(float(lm.visibility) for lm in present) / len(present)
    return apply_noise_floor(average, noise_floor)


def key_landmark_visibility(
    landmarks: LandmarkFrame,
    groups: Mapping[str, Tuple[int, int]] = LANDMARK_GROUPS,
    noise_floor: float = NOISE_FLOOR_THRESHOLD,
) -> Dict[str, float]:
    """Visibilidad por grupo (``hips``, ``knees``, ``ankles``, ``shoulders``)."""

    return {name: group_visibility(landmarks, indices, noise_floor) for name, indices in groups.items()}


__all__ = ["apply_noise_floor", "group_visibility", "key_landmark_visibility", "pose_confidence"]
