"""Gobernador de calidad: baja un peldaño ante rendimiento pobre sostenido.

Cada muestra se clasifica como "pobre" si el FPS actual o el medio quedan por
debajo del mínimo, o si la memoria supera el máximo. Un contador de muestras
pobres consecutivas se reinicia con cualquier muestra buena; al alcanzar el
umbral, y si ha pasado el periodo de enfriamiento desde la última bajada, se
desciende un nivel. Las subidas nunca son automáticas.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Deque, List, Optional

import numpy as np
import pandas as pd

from realtime_pose.config.models import GovernorConfig
from realtime_pose.config.settings import PROCESSING_TIME_WINDOW
from realtime_pose.core.errors import ConfigurationError, UnknownQualityLevelError
from realtime_pose.core.events import CallbackHandle, CallbackRegistry
from realtime_pose.core.reporting import ErrorReporter, LoggingErrorReporter
from realtime_pose.core.types import PerformanceGrade

from .monitor import PerformanceMonitor, PerformanceSample, grade_performance
from .quality import QUALITY_LADDER, CameraConfig, QualityLevel, get_quality_level, next_lower

logger = logging.getLogger(__name__)

MANUAL_REASON = "Manual quality adjustment"

HISTORY_COLUMNS = [f.name for f in fields(PerformanceSample)]


@dataclass(frozen=True)
class OptimizationResult:
    applied: bool
    previous_level: QualityLevel
    new_level: QualityLevel
    reason: str
    trigger_sample: Optional[PerformanceSample]
    timestamp_ms: float


@dataclass(frozen=True)
class StreamPerformanceMetrics:
    fps: float
    avg_fps: float
    memory_usage_percent: float
    frame_drops: int
    processing_time_ms: float
    quality_level: QualityLevel
    grade: PerformanceGrade

    @property
    def resolution(self):
        return self.quality_level.resolution


class QualityGovernor:
    """Dueño del nivel de calidad actual y del historial de rendimiento."""

    def __init__(
        self,
        settings: Optional[GovernorConfig] = None,
        monitor: Optional[PerformanceMonitor] = None,
        error_reporter: Optional[ErrorReporter] = None,
    ) -> None:
        self.settings = settings or GovernorConfig()
        self._error_reporter = error_reporter or LoggingErrorReporter()
        self.monitor = monitor or PerformanceMonitor(self.settings.target_fps, error_reporter=self._error_reporter)
        self._level = get_quality_level(self.settings.initial_level)
        self._history: Deque[PerformanceSample] = deque(maxlen=self.settings.history_size)
        self._consecutive_poor = 0
        self._last_optimization_ms: Optional[float] = None
        self._last_check_ms: Optional[float] = None
        self._optimization_callbacks: CallbackRegistry[OptimizationResult] = CallbackRegistry(
            "optimization", self._error_reporter
        )
        self._performance_callbacks: CallbackRegistry[StreamPerformanceMetrics] = CallbackRegistry(
            "performance", self._error_reporter
        )

    # --- Estado ----------------------------------------------------------------
    @property
    def current_quality_level(self) -> QualityLevel:
        return self._level

    @property
    def consecutive_poor_samples(self) -> int:
        return self._consecutive_poor

    @property
    def last_optimization_ms(self) -> Optional[float]:
        return self._last_optimization_ms

    def available_quality_levels(self) -> List[QualityLevel]:
        return list(QUALITY_LADDER)

    def performance_history(self) -> List[PerformanceSample]:
        return list(self._history)

    def history_frame(self) -> pd.DataFrame:
        """Historial de muestras como ``DataFrame`` (una fila por muestra)."""

        return pd.DataFrame([asdict(sample) for sample in self._history], columns=HISTORY_COLUMNS)

    # --- Suscripciones -----------------------------------------------------------
    def on_optimization(self, callback: Callable[[OptimizationResult], None]) -> CallbackHandle:
        return self._optimization_callbacks.subscribe(callback)

    def on_performance_update(self, callback: Callable[[StreamPerformanceMetrics], None]) -> CallbackHandle:
        return self._performance_callbacks.subscribe(callback)

    def unsubscribe(self, handle: CallbackHandle) -> bool:
        return self._optimization_callbacks.unsubscribe(handle) or self._performance_callbacks.unsubscribe(handle)

    # --- Decisión ----------------------------------------------------------------
    def is_poor(self, sample: PerformanceSample) -> bool:
        min_fps = self.settings.min_fps
        return (
            sample.fps < min_fps
            or sample.avg_fps < min_fps
            or sample.memory_usage_percent > self.settings.max_memory_percent
        )

    def check_performance(self, sample: PerformanceSample, now_ms: float) -> Optional[OptimizationResult]:
        """Incorporar una muestra y bajar de nivel si procede."""

        self._history.append(sample)
        self._last_check_ms = now_ms
        if self.is_poor(sample):
            self._consecutive_poor += 1
        else:
            self._consecutive_poor = 0

        result = None
        if self._should_optimize(now_ms):
            result = self._downgrade(sample, now_ms)

        self._performance_callbacks.notify(self.current_metrics())
        return result

    def tick(self, now_ms: float) -> Optional[OptimizationResult]:
        """Muestrear el monitor si ha transcurrido el intervalo de comprobación."""

        if self._last_check_ms is not None and now_ms - self._last_check_ms < self.settings.check_interval_ms:
            return None
        return self.check_performance(self.monitor.current_sample(now_ms), now_ms)

    def current_metrics(self) -> StreamPerformanceMetrics:
        if self._history:
            latest = self._history[-1]
        else:
            latest = self.monitor.current_sample()
        return StreamPerformanceMetrics(
            fps=latest.fps,
            avg_fps=latest.avg_fps,
            memory_usage_percent=latest.memory_usage_percent,
            frame_drops=latest.frame_drops,
            processing_time_ms=self.processing_time_ms(),
            quality_level=self._level,
            grade=grade_performance(latest.fps, latest.memory_usage_percent),
        )

    def processing_time_ms(self) -> float:
        """Estimación ``1000 / fps`` medio de las últimas muestras."""

        if len(self._history) < 2:
            return 0.0
        recent = list(self._history)[-PROCESSING_TIME_WINDOW:]
        avg_fps = float(np.mean([sample.fps for sample in recent]))
        return 1000.0 / avg_fps if avg_fps > 0 else 0.0

    # --- Control manual ----------------------------------------------------------
    def set_quality_level(self, level: str, now_ms: Optional[float] = None) -> bool:
        """Mover el nivel en cualquier dirección; ``False`` si el nivel no existe."""

        try:
            new_level = get_quality_level(level)
        except UnknownQualityLevelError:
            logger.warning("Unknown quality level %r", level)
            return False
        previous = self._level
        self._level = new_level
        logger.info("Quality level set manually: %s -> %s", previous.level, new_level.level)
        self._optimization_callbacks.notify(
            OptimizationResult(
                applied=True,
                previous_level=previous,
                new_level=new_level,
                reason=MANUAL_REASON,
                trigger_sample=self._history[-1] if self._history else None,
                timestamp_ms=float(now_ms if now_ms is not None else time.time() * 1000.0),
            )
        )
        return True

    def optimal_camera_config(self, base: Optional[CameraConfig] = None) -> CameraConfig:
        level = self._level
        return replace(base or CameraConfig(), width=level.width, height=level.height, frame_rate=level.frame_rate)

    def update_settings(self, **changes: Any) -> GovernorConfig:
        known = {f.name for f in fields(GovernorConfig)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigurationError("governor", [f"unknown setting {name!r}" for name in unknown])
        settings = replace(self.settings, **changes)
        if settings.history_size != self.settings.history_size:
            self._history = deque(self._history, maxlen=settings.history_size)
        self.settings = settings
        return settings

    def reset(self) -> None:
        """Vaciar historial y contadores; el nivel de calidad actual se conserva."""

        self._history.clear()
        self._consecutive_poor = 0
        self._last_optimization_ms = None
        self._last_check_ms = None
        self.monitor.reset()

    # ------------------------------------------------------------------
    def _should_optimize(self, now_ms: float) -> bool:
        if not self.settings.enable_auto_optimization:
            return False
        if self._consecutive_poor < self.settings.optimization_threshold:
            return False
        return self._last_optimization_ms is None or now_ms - self._last_optimization_ms >= self.settings.cooldown_ms

    def _downgrade(self, sample: PerformanceSample, now_ms: float) -> Optional[OptimizationResult]:
        new_level = next_lower(self._level.level)
        if new_level is None:
            logger.debug("Already at the lowest quality level (%s)", self._level.level)
            return None
        previous = self._level
        self._level = new_level
        self._last_optimization_ms = now_ms
        self._consecutive_poor = 0
        reason = self._reason(sample)
        logger.info("Quality downgraded %s -> %s: %s", previous.level, new_level.level, reason)
        result = OptimizationResult(
            applied=True,
            previous_level=previous,
            new_level=new_level,
            reason=reason,
            trigger_sample=sample,
            timestamp_ms=now_ms,
        )
        self._optimization_callbacks.notify(result)
        return result

    def _reason(self, sample: PerformanceSample) -> str:
        settings = self.settings
        reasons = []
        if sample.fps < settings.min_fps:
            reasons.append(f"Low FPS: {sample.fps:.1f} (target: {settings.target_fps:g})")
        if sample.avg_fps < settings.min_fps:
            reasons.append(f"Low average FPS: {sample.avg_fps:.1f} (target: {settings.target_fps:g})")
        if sample.memory_usage_percent > settings.max_memory_percent:
            reasons.append(
                f"High memory usage: {sample.memory_usage_percent:g}% (max: {settings.max_memory_percent:g}%)"
            )
        return ", ".join(reasons) if reasons else "Performance optimization"


__all__ = ["OptimizationResult", "QualityGovernor", "StreamPerformanceMetrics"]
