"""Fachada del análisis de sentadilla en tiempo real.

Encadena, para cada fotograma entregado por el proveedor de pose, el limitador
de frames, el pipeline de métricas, el estabilizador de visibilidad por grupos
y el estabilizador de validez. No existe instancia global: cada sesión crea su
propio analizador con una configuración explícita.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Sequence

import numpy as np

from realtime_pose.A_pose.confidence import pose_confidence
from realtime_pose.A_pose.types import Landmark, landmarks_from_proto
from realtime_pose.B_stabilization.validity import PoseValidityStabilizer, StateInfo
from realtime_pose.B_stabilization.visibility import StabilizedVisibility, VisibilityStabilizer
from realtime_pose.config.models import Config
from realtime_pose.config.settings import CONFIDENCE_HISTORY_SIZE
from realtime_pose.core.types import DetectionState
from realtime_pose.D_performance.monitor import PerformanceMonitor
from realtime_pose.D_performance.throttle import FrameThrottle

from .squat_metrics import SquatMetrics, SquatMetricsPipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SquatPoseAnalysis:
    """Resultado combinado: estado estable, métricas y coste del fotograma."""

    landmarks: Optional[List[Optional[Landmark]]]
    timestamp_ms: float
    confidence: float
    processing_time_ms: float
    is_valid: bool
    detection_state: DetectionState
    metrics: SquatMetrics
    stabilized_visibility: Dict[str, StabilizedVisibility] = field(default_factory=dict)
    throttled: bool = False


class SquatPoseAnalyzer:
    """Analizador por sesión; todos sus componentes se construyen aquí."""

    def __init__(self, config: Optional[Config] = None, *, monitor: Optional[PerformanceMonitor] = None) -> None:
        self.config = config or Config()
        self.throttle = FrameThrottle(self.config.throttle)
        self.pipeline = SquatMetricsPipeline(self.config.squat)
        self.validity = PoseValidityStabilizer(self.config.stabilizer)
        self.visibility = VisibilityStabilizer(self.config.visibility)
        self.monitor = monitor
        self._confidence_history: Deque[float] = deque(maxlen=CONFIDENCE_HISTORY_SIZE)

    @property
    def detection_state(self) -> DetectionState:
        return self.validity.state

    @property
    def confidence_history(self) -> List[float]:
        return list(self._confidence_history)

    def average_confidence(self) -> float:
        return float(np.mean(self._confidence_history)) if self._confidence_history else 0.0

    def state_info(self) -> StateInfo:
        return self.validity.get_state_info()

    def analyze(self, landmarks: Optional[Sequence[Any]], timestamp_ms: float) -> SquatPoseAnalysis:
        """Procesar un fotograma; ``landmarks=None`` indica que no hubo detección."""

        if not self.throttle.should_process(timestamp_ms):
            return SquatPoseAnalysis(
                landmarks=None,
                timestamp_ms=timestamp_ms,
                confidence=0.0,
                processing_time_ms=0.0,
                is_valid=False,
                detection_state=self.validity.state,
                metrics=self.pipeline.empty_metrics(),
                throttled=True,
            )

        start = time.perf_counter()
        if self.monitor is not None:
            self.monitor.record_frame(timestamp_ms)

        if landmarks is None:
            state = self.validity.update(0.0, timestamp_ms)
            stabilized = self.visibility.update(self.visibility.zeros(), timestamp_ms)
            return SquatPoseAnalysis(
                landmarks=None,
                timestamp_ms=timestamp_ms,
                confidence=0.0,
                processing_time_ms=(time.perf_counter() - start) * 1000.0,
                is_valid=state is DetectionState.VALID,
                detection_state=state,
                metrics=self.pipeline.empty_metrics(),
                stabilized_visibility=stabilized,
            )

        frame = landmarks_from_proto(landmarks)
        confidence = pose_confidence(frame, noise_floor=self.config.squat.visibility.noise_floor)
        metrics = self.pipeline.process(frame, timestamp_ms)
        stabilized = self.visibility.update(metrics.key_landmark_visibility, timestamp_ms)

        combined = confidence if metrics.has_valid_pose else 0.0
        state = self.validity.update(combined, timestamp_ms)
        self._confidence_history.append(confidence)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug(
            "Frame %.1f ms: confidence=%.3f state=%s (%.2f ms)", timestamp_ms, confidence, state.value, elapsed_ms
        )
        return SquatPoseAnalysis(
            landmarks=frame,
            timestamp_ms=timestamp_ms,
            confidence=confidence,
            processing_time_ms=elapsed_ms,
            is_valid=state is DetectionState.VALID,
            detection_state=state,
            metrics=metrics,
            stabilized_visibility=stabilized,
        )

    def cleanup(self) -> None:
        """Reiniciar todos los componentes de la sesión."""

        self.throttle.reset()
        self.pipeline.reset()
        self.validity.reset()
        self.visibility.reset()
        self._confidence_history.clear()
        if self.monitor is not None:
            self.monitor.reset()


__all__ = ["SquatPoseAnalysis", "SquatPoseAnalyzer"]
