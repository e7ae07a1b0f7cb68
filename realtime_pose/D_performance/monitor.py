"""Monitor de rendimiento alimentado por las marcas temporales de cada fotograma."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

import numpy as np

from realtime_pose.config.constants import PERFORMANCE_HISTORY_SIZE
from realtime_pose.config.settings import (
    FRAME_DROP_FACTOR,
    GOVERNOR_TARGET_FPS,
    GRADE_EXCELLENT_MAX_MEMORY,
    GRADE_EXCELLENT_MIN_FPS,
    GRADE_FAIR_MAX_MEMORY,
    GRADE_FAIR_MIN_FPS,
    GRADE_GOOD_MAX_MEMORY,
    GRADE_GOOD_MIN_FPS,
)
from realtime_pose.core.reporting import ErrorReporter, LoggingErrorReporter
from realtime_pose.core.types import PerformanceGrade

logger = logging.getLogger(__name__)

MemoryProvider = Callable[[], float]


@dataclass(frozen=True)
class PerformanceSample:
    fps: float
    avg_fps: float
    memory_usage_percent: float
    frame_drops: int = 0
    timestamp_ms: float = 0.0


# (grado, fps mínimo, memoria máxima) en orden de exigencia.
_GRADE_THRESHOLDS = (
    (PerformanceGrade.EXCELLENT, GRADE_EXCELLENT_MIN_FPS, GRADE_EXCELLENT_MAX_MEMORY),
    (PerformanceGrade.GOOD, GRADE_GOOD_MIN_FPS, GRADE_GOOD_MAX_MEMORY),
    (PerformanceGrade.FAIR, GRADE_FAIR_MIN_FPS, GRADE_FAIR_MAX_MEMORY),
)


def grade_performance(fps: float, memory_usage_percent: float) -> PerformanceGrade:
    """Calificación cualitativa a partir del FPS actual y el uso de memoria."""

    for grade, min_fps, max_memory in _GRADE_THRESHOLDS:
        if fps >= min_fps and memory_usage_percent <= max_memory:
            return grade
    return PerformanceGrade.POOR


class PerformanceMonitor:
    """Deriva FPS instantáneo y medio, caídas de frames y memoria.

    No hay temporizadores propios: el llamador invoca :meth:`record_frame` con
    la marca temporal de cada fotograma. El uso de memoria lo aporta un
    proveedor inyectable; sin proveedor se informa 0 %.
    """

    def __init__(
        self,
        target_fps: float = GOVERNOR_TARGET_FPS,
        *,
        history_size: int = PERFORMANCE_HISTORY_SIZE,
        memory_provider: Optional[MemoryProvider] = None,
        error_reporter: Optional[ErrorReporter] = None,
    ) -> None:
        if not target_fps > 0:
            raise ValueError("target_fps must be greater than 0")
        self.target_fps = float(target_fps)
        self._fps_history: Deque[float] = deque(maxlen=max(1, int(history_size)))
        self._memory_provider = memory_provider
        self._error_reporter = error_reporter or LoggingErrorReporter()
        self._last_frame_ms: Optional[float] = None
        self._last_memory = 0.0
        self.frame_count = 0
        self.frame_drops = 0

    def record_frame(self, timestamp_ms: float) -> Optional[float]:
        """Registrar un fotograma y devolver su FPS instantáneo (``None`` en el primero)."""

        previous = self._last_frame_ms
        if previous is not None and timestamp_ms <= previous:
            return None
        self._last_frame_ms = timestamp_ms
        if previous is None:
            return None

        fps = 1000.0 / (timestamp_ms - previous)
        self._fps_history.append(fps)
        self.frame_count += 1
        if fps < self.target_fps * FRAME_DROP_FACTOR:
            self.frame_drops += 1
        return fps

    @property
    def current_fps(self) -> float:
        return self._fps_history[-1] if self._fps_history else 0.0

    @property
    def average_fps(self) -> float:
        return float(np.mean(self._fps_history)) if self._fps_history else 0.0

    def memory_usage_percent(self) -> float:
        """Uso de memoria según el proveedor; si falla se conserva la última lectura."""

        if self._memory_provider is None:
            return 0.0
        try:
            self._last_memory = float(self._memory_provider())
        except Exception as exc:
            self._error_reporter.report_error(
                f"Memory provider failed: {exc}", severity="low", context={"component": "PerformanceMonitor"}, exc=exc
            )
        return self._last_memory

    def current_sample(self, timestamp_ms: Optional[float] = None) -> PerformanceSample:
        return PerformanceSample(
            fps=self.current_fps,
            avg_fps=self.average_fps,
            memory_usage_percent=self.memory_usage_percent(),
            frame_drops=self.frame_drops,
            timestamp_ms=float(timestamp_ms if timestamp_ms is not None else self._last_frame_ms or 0.0),
        )

    def grade(self) -> PerformanceGrade:
        return grade_performance(self.current_fps, self.memory_usage_percent())

    def reset(self) -> None:
        self._fps_history.clear()
        self._last_frame_ms = None
        self.frame_count = 0
        self.frame_drops = 0


__all__ = ["MemoryProvider", "PerformanceMonitor", "PerformanceSample", "grade_performance"]
