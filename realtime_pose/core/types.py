"""Enumeraciones compartidas por el núcleo en tiempo real.

Los valores son cadenas para que viajen sin conversión a los CSV de métricas
y a los callbacks."""

from __future__ import annotations

from enum import Enum
from typing import Union


class ExerciseType(str, Enum):
    """Ejercicios con requisitos de pose propios; ``GENERIC`` cubre el resto."""

    GENERIC = "generic"
    SQUAT = "squat"
    BENCH_PRESS = "bench_press"
    DEADLIFT = "deadlift"


class DetectionState(str, Enum):
    """Estado de detección expuesto al consumidor del analizador."""

    INVALID = "invalid"
    DETECTING = "detecting"
    VALID = "valid"


class PerformanceGrade(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class RepPhase(str, Enum):
    STANDING = "standing"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


_EXERCISE_SYNONYMS = {
    "bench": ExerciseType.BENCH_PRESS,
    "benchpress": ExerciseType.BENCH_PRESS,
}


def _slug(label: str) -> str:
    """``" Bench-Press "`` -> ``"bench_press"``."""

    words = label.strip().lower().replace("-", " ").replace("_", " ").split()
    return "_".join(words)


def as_exercise(value: Union[str, ExerciseType, None]) -> ExerciseType:
    """Resolver etiquetas libres, sinónimos incluidos; lo desconocido es ``GENERIC``."""

    if isinstance(value, ExerciseType):
        return value
    slug = _slug(str(value)) if value else ""
    if slug in _EXERCISE_SYNONYMS:
        return _EXERCISE_SYNONYMS[slug]
    for member in ExerciseType:
        if member.value == slug:
            return member
    return ExerciseType.GENERIC


__all__ = [
    "DetectionState",
    "ExerciseType",
    "PerformanceGrade",
    "RepPhase",
    "as_exercise",
]
