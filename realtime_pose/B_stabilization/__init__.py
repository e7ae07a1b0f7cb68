"""Estabilizadores con histéresis para la validez de pose y la visibilidad."""

from .hysteresis import (
    HysteresisStabilizer,
    ScalarStrategy,
    StabilizationResult,
    StabilizationStrategy,
    TransitionState,
)
from .validity import PoseValidityStabilizer, StateInfo, project_state
from .visibility import StabilizedVisibility, VisibilityStabilizer

__all__ = [
    "HysteresisStabilizer",
    "PoseValidityStabilizer",
    "ScalarStrategy",
    "StabilizationResult",
    "StabilizationStrategy",
    "StabilizedVisibility",
    "StateInfo",
    "TransitionState",
    "VisibilityStabilizer",
    "project_state",
]
