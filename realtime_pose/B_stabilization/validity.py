"""Estabilizador de validez de pose con proyección a tres estados.

La entrada al estado válido es siempre inmediata (el *debounce* de entrada se
fuerza a 0) para premiar al usuario en cuanto la pose es buena; la salida se
retrasa ``exit_debounce_ms`` y mientras tanto el estado es ``DETECTING``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from realtime_pose.config.models import StabilizerConfig
from realtime_pose.core.types import DetectionState

from .hysteresis import HysteresisStabilizer, ScalarStrategy, StabilizationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateInfo:
    """Información detallada del estado actual."""

    state: DetectionState
    confidence: float
    time_in_state_ms: float
    is_transitioning: bool


def project_state(result: StabilizationResult) -> DetectionState:
    """Proyecta ``on``/``off`` más la bandera de transición a ``DetectionState``."""

    if result.is_transitioning:
        return DetectionState.DETECTING
    if result.is_on:
        return DetectionState.VALID
    return DetectionState.INVALID


class PoseValidityStabilizer:
    """Convierte la confianza de pose en ``invalid`` / ``detecting`` / ``valid``."""

    def __init__(self, config: Optional[StabilizerConfig] = None) -> None:
        config = config or StabilizerConfig()
        for message in config.warnings():
            logger.warning("PoseValidityStabilizer configuration warning: %s", message)
        self.config = replace(config, enter_debounce_ms=0)
        self._stabilizer: HysteresisStabilizer[float, float] = HysteresisStabilizer(self.config, ScalarStrategy())
        self._state = DetectionState.INVALID
        self._last_confidence = 0.0
        self._state_start_ms: Optional[float] = None
        self._last_timestamp_ms: Optional[float] = None

    @property
    def state(self) -> DetectionState:
        return self._state

    def update(self, confidence: float, timestamp_ms: float) -> DetectionState:
        """Incorporar la confianza del fotograma y devolver el estado resultante."""

        result = self._stabilizer.update(float(confidence), timestamp_ms)
        if not result.accepted:
            return self._state

        self._last_confidence = float(confidence)
        self._last_timestamp_ms = timestamp_ms
        if self._state_start_ms is None:
            self._state_start_ms = timestamp_ms

        new_state = project_state(result)
        if new_state != self._state:
            logger.debug("Pose validity %s -> %s at %.1f ms", self._state.value, new_state.value, timestamp_ms)
            self._state = new_state
            self._state_start_ms = timestamp_ms
        return self._state

    def get_state_info(self) -> StateInfo:
        if self._state_start_ms is None or self._last_timestamp_ms is None:
            time_in_state = 0.0
        else:
            time_in_state = float(self._last_timestamp_ms - self._state_start_ms)
        return StateInfo(
            state=self._state,
            confidence=self._last_confidence,
            time_in_state_ms=time_in_state,
            is_transitioning=self._state is DetectionState.DETECTING,
        )

    def reset(self) -> None:
        self._stabilizer.reset()
        self._state = DetectionState.INVALID
        self._last_confidence = 0.0
        self._state_start_ms = None
        self._last_timestamp_ms = None


__all__ = ["PoseValidityStabilizer", "StateInfo", "project_state"]
