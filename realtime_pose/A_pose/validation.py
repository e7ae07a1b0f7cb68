"""Validación de visibilidad, completitud y calidad de un fotograma de landmarks."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from realtime_pose.core.types import ExerciseType, as_exercise

from .constants import (
    HEAVY_SYMMETRY_INDICES,
    LANDMARK_COUNT,
    LEFT_ANKLE,
    LEFT_ELBOW,
    LEFT_HIP,
    LEFT_KNEE,
    LEFT_SHOULDER,
    LEFT_WRIST,
    RIGHT_ANKLE,
    RIGHT_ELBOW,
    RIGHT_HIP,
    RIGHT_KNEE,
    RIGHT_SHOULDER,
    RIGHT_WRIST,
    SYMMETRY_PAIRS,
)
from .types import LandmarkFrame

logger = logging.getLogger(__name__)

# Desplazamiento entre fotogramas (2 % del espacio normalizado) que anula la estabilidad.
MAX_FRAME_MOVEMENT = 0.02
# Por debajo de esta visibilidad se penaliza linealmente la puntuación global.
LOW_CONFIDENCE_PENALTY_THRESHOLD = 0.4


@dataclass(frozen=True)
class VisibilityResult:
    is_valid: bool
    visible_count: int
    total_count: int
    invalid_indices: List[int]
    average_visibility: float
    min_visibility: float
    visibility_percentage: float


@dataclass(frozen=True)
class CompletenessResult:
    is_complete: bool
    present_count: int
    required_count: int
    missing_indices: List[int]
    completeness_percentage: float


@dataclass(frozen=True)
class QualityMetrics:
    overall_score: float
    average_confidence: float
    symmetry_score: float
    stability_score: float
    meets_quality_threshold: bool


@dataclass(frozen=True)
class PoseValidationResult:
    is_valid: bool
    visibility: VisibilityResult
    completeness: CompletenessResult
    quality: QualityMetrics
    exercise_specific_valid: bool
    messages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExerciseRequirements:
    """Requisitos mínimos de visibilidad por ejercicio."""

    min_visibility: float
    min_confidence: float
    required_landmarks: Optional[Tuple[int, ...]]
    check_symmetry: bool
    # Landmarks que deben superar estrictamente 0.7 para el chequeo específico.
    key_landmarks: Tuple[int, ...] = ()


_LOWER_BODY = (LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP, LEFT_KNEE, RIGHT_KNEE, LEFT_ANKLE, RIGHT_ANKLE)
_UPPER_BODY = (LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_ELBOW, RIGHT_ELBOW, LEFT_WRIST, RIGHT_WRIST)

EXERCISE_REQUIREMENTS: Dict[ExerciseType, ExerciseRequirements] = {
    ExerciseType.SQUAT: ExerciseRequirements(
        0.7, 0.7, _LOWER_BODY, True, key_landmarks=(LEFT_HIP, RIGHT_HIP, LEFT_KNEE, RIGHT_KNEE)
    ),
    ExerciseType.BENCH_PRESS: ExerciseRequirements(0.7, 0.7, _UPPER_BODY, True, key_landmarks=_UPPER_BODY),
    ExerciseType.DEADLIFT: ExerciseRequirements(
        0.7,
        0.7,
        _LOWER_BODY,
        True,
        key_landmarks=(LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP, LEFT_KNEE, RIGHT_KNEE),
    ),
    ExerciseType.GENERIC: ExerciseRequirements(0.5, 0.5, None, False),
}
EXERCISE_SPECIFIC_MIN_VISIBILITY = 0.7


class LandmarkValidator:
    """Comprueba si un fotograma de landmarks es utilizable para un ejercicio."""

    def validate_visibility(self, landmarks: LandmarkFrame, threshold: float = 0.5) -> VisibilityResult:
        total = len(landmarks)
        if total == 0:
            return VisibilityResult(False, 0, 0, [], 0.0, 0.0, 0.0)

        invalid: List[int] = []
        visibilities: List[float] = []
        for idx, lm in enumerate(landmarks):
            if lm is None:
                invalid.append(idx)
                continue
            visibilities.append(float(lm.visibility))
            if lm.visibility < threshold:
                invalid.append(idx)

        visible = total - len(invalid)
        return VisibilityResult(
            is_valid=not invalid,
            visible_count=visible,
            total_count=total,
            invalid_indices=invalid,
            average_visibility=float(np.sum(visibilities)) / total if visibilities else 0.0,
            min_visibility=float(np.min(visibilities)) if visibilities else 0.0,
            visibility_percentage=visible / total * 100.0,
        )

    def validate_completeness(
        self, landmarks: LandmarkFrame, required_indices: Optional[Sequence[int]] = None
    ) -> CompletenessResult:
        """Un landmark requerido falta si está fuera de rango, es ``None`` o tiene visibilidad 0."""

        indices = range(LANDMARK_COUNT) if required_indices is None else required_indices
        unique = list(dict.fromkeys(indices))
        if not unique:
            return CompletenessResult(True, 0, 0, [], 100.0)

        missing = [
            idx
            for idx in unique
            if idx >= len(landmarks) or landmarks[idx] is None or landmarks[idx].visibility == 0
        ]
        present = len(unique) - len(missing)
        return CompletenessResult(
            is_complete=not missing,
            present_count=present,
            required_count=len(unique),
            missing_indices=missing,
            completeness_percentage=present / len(unique) * 100.0,
        )

    def assess_quality(
        self,
        landmarks: LandmarkFrame,
        *,
        min_confidence: float = 0.5,
        check_symmetry: bool = False,
        previous: Optional[LandmarkFrame] = None,
    ) -> QualityMetrics:
        """Puntuación 0-1: confianza media 50 %, simetría 25 %, estabilidad 25 %."""

        present = [lm for lm in landmarks if lm is not None]
        if not present:
            return QualityMetrics(0.0, 0.0, 1.0, 1.0, False)

        average_confidence = float(np.mean([lm.visibility for lm in present]))
        symmetry = self._symmetry_score(landmarks) if check_symmetry else 1.0
        stability = self._stability_score(landmarks, previous) if previous is not None else 1.0

        overall = average_confidence * 0.5 + symmetry * 0.25 + stability * 0.25
        overall *= self._low_confidence_penalty(present)
        return QualityMetrics(
            overall_score=overall,
            average_confidence=average_confidence,
            symmetry_score=symmetry,
            stability_score=stability,
            meets_quality_threshold=average_confidence >= min_confidence and overall >= min_confidence,
        )

    def validate_pose(
        self, landmarks: LandmarkFrame, exercise: Union[str, ExerciseType, None] = ExerciseType.GENERIC
    ) -> PoseValidationResult:
        exercise = as_exercise(exercise)
        requirements = EXERCISE_REQUIREMENTS[exercise]
        messages: List[str] = []

        visibility = self.validate_visibility(landmarks, requirements.min_visibility)
        if not visibility.is_valid:
            messages.append(
                f"{visibility.total_count - visibility.visible_count} landmarks below visibility threshold"
            )

        completeness = self.validate_completeness(landmarks, requirements.required_landmarks)
        if not completeness.is_complete:
            messages.append(f"Missing {len(completeness.missing_indices)} required landmarks")

        quality = self.assess_quality(
            landmarks, min_confidence=requirements.min_confidence, check_symmetry=requirements.check_symmetry
        )
        if not quality.meets_quality_threshold:
            messages.append("Pose quality below threshold")

        specific = all(
            idx < len(landmarks)
            and landmarks[idx] is not None
            and landmarks[idx].visibility > EXERCISE_SPECIFIC_MIN_VISIBILITY
            for idx in requirements.key_landmarks
        )
        if not specific:
            messages.append(f"Does not meet {exercise.value} exercise requirements")

        is_valid = visibility.is_valid and completeness.is_complete and quality.meets_quality_threshold and specific
        logger.debug("Pose validation for %s: valid=%s messages=%s", exercise.value, is_valid, messages)
        return PoseValidationResult(is_valid, visibility, completeness, quality, specific, messages)

    # ------------------------------------------------------------------
    @staticmethod
    def _symmetry_score(landmarks: LandmarkFrame) -> float:
        total = 0.0
        weights = 0.0
        for left_idx, right_idx in SYMMETRY_PAIRS:
            if right_idx >= len(landmarks):
                continue
            left, right = landmarks[left_idx], landmarks[right_idx]
            if left is None or right is None:
                continue
            weight = 2.0 if left_idx in HEAVY_SYMMETRY_INDICES else 1.0
            total += (1.0 - abs(left.visibility - right.visibility)) * weight
            weights += weight
        return total / weights if weights else 1.0

    @staticmethod
    def _stability_score(current: LandmarkFrame, previous: LandmarkFrame) -> float:
        scores = []
        for curr, prev in zip(current, previous):
            if curr is None or prev is None:
                continue
            moved = math.sqrt((curr.x - prev.x) ** 2 + (curr.y - prev.y) ** 2 + (curr.z - prev.z) ** 2)
            scores.append(max(0.0, 1.0 - moved / MAX_FRAME_MOVEMENT))
        return float(np.mean(scores)) if scores else 1.0

    @staticmethod
    def _low_confidence_penalty(present) -> float:
        penalties = [
            lm.visibility / LOW_CONFIDENCE_PENALTY_THRESHOLD if lm.visibility < LOW_CONFIDENCE_PENALTY_THRESHOLD else 1.0
            for lm in present
        ]
        return float(np.mean(penalties)) if penalties else 1.0


__all__ = [
    "CompletenessResult",
    "EXERCISE_REQUIREMENTS",
    "ExerciseRequirements",
    "LandmarkValidator",
    "PoseValidationResult",
    "QualityMetrics",
    "VisibilityResult",
]
