"""Máquina de estados de repeticiones de sentadilla sobre el porcentaje de profundidad.

Fases: ``standing`` → ``descending`` → ``bottom`` → ``ascending`` → ``standing``.
Al cerrar una repetición se valida su calidad (profundidad, desplazamiento
lateral y desviación de la barra); todas quedan registradas pero solo las
válidas incrementan el contador.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from realtime_pose.config.models import SquatAnalysisConfig
from realtime_pose.core.types import RepPhase

logger = logging.getLogger(__name__)


@dataclass
class RepData:
    phase: RepPhase
    start_time_ms: float
    max_depth: float
    max_lateral_shift: float
    bar_path_deviation: float
    is_valid: bool = True
    end_time_ms: Optional[float] = None


@dataclass(frozen=True)
class RepCountingMetrics:
    depth_percentage: float
    has_achieved_depth: bool
    lateral_shift: float
    bar_path_deviation: float


@dataclass(frozen=True)
class RepCountingState:
    current_rep: Optional[RepData]
    rep_count: int
    phase: RepPhase
    completed_reps: List[RepData]
    rep_completed: bool = False


class RepCounter:
    """Cuenta repeticiones válidas a partir de las métricas de cada fotograma."""

    def __init__(self, config: Optional[SquatAnalysisConfig] = None) -> None:
        self.config = config or SquatAnalysisConfig()
        self._phase = RepPhase.STANDING
        self._current: Optional[RepData] = None
        self._completed: List[RepData] = []
        self._count = 0

    @property
    def phase(self) -> RepPhase:
        return self._phase

    @property
    def rep_count(self) -> int:
        return self._count

    def update(self, metrics: RepCountingMetrics, timestamp_ms: float) -> RepCountingState:
        depth = self.config.depth
        pct = metrics.depth_percentage
        completed = False

        if self._phase is RepPhase.STANDING:
            if pct > depth.start_rep_threshold:
                self._phase = RepPhase.DESCENDING
                self._current = RepData(
                    phase=RepPhase.DESCENDING,
                    start_time_ms=timestamp_ms,
                    max_depth=pct,
                    max_lateral_shift=metrics.lateral_shift,
                    bar_path_deviation=metrics.bar_path_deviation,
                )
        elif self._phase is RepPhase.DESCENDING:
            self._track_extremes(metrics)
            if metrics.has_achieved_depth or pct > depth.bottom_phase_threshold:
                self._enter(RepPhase.BOTTOM)
        elif self._phase is RepPhase.BOTTOM:
            self._track_extremes(metrics)
            if pct < depth.ascending_threshold:
                self._enter(RepPhase.ASCENDING)
        elif self._phase is RepPhase.ASCENDING:
            if pct < depth.complete_rep_threshold:
                self._phase = RepPhase.STANDING
                completed = self._complete(timestamp_ms)

        return self._snapshot(completed)

    def state(self) -> RepCountingState:
        return self._snapshot(False)

    def validate_rep(self, rep: RepData) -> bool:
        """Profundidad mínima alcanzada y forma dentro de los límites configurados."""

        validation = self.config.validation
        return (
            rep.max_depth >= self.config.depth.depth_threshold * 100
            and rep.max_lateral_shift < validation.max_lateral_shift
            and rep.bar_path_deviation < validation.max_bar_path_deviation
        )

    def reset(self) -> None:
        self._phase = RepPhase.STANDING
        self._current = None
        self._completed = []
        self._count = 0

    # ------------------------------------------------------------------
    def _enter(self, phase: RepPhase) -> None:
        self._phase = phase
        if self._current is not None:
            self._current.phase = phase

    def _track_extremes(self, metrics: RepCountingMetrics) -> None:
        rep = self._current
        if rep is None:
            return
        rep.max_depth = max(rep.max_depth, metrics.depth_percentage)
        rep.max_lateral_shift = max(rep.max_lateral_shift, metrics.lateral_shift)
        rep.bar_path_deviation = max(rep.bar_path_deviation, metrics.bar_path_deviation)

    def _complete(self, timestamp_ms: float) -> bool:
        rep = self._current
        if rep is None:
            return False
        rep.is_valid = self.validate_rep(rep)
        rep.end_time_ms = timestamp_ms
        self._completed.append(rep)
        if rep.is_valid:
            self._count += 1
        logger.info(
            "Rep finished: valid=%s depth=%.1f%% lateral=%.3f bar=%.3f (count=%d)",
            rep.is_valid,
            rep.max_depth,
            rep.max_lateral_shift,
            rep.bar_path_deviation,
            self._count,
        )
        self._current = None
        return True

    def _snapshot(self, completed: bool) -> RepCountingState:
        return RepCountingState(
            current_rep=replace(self._current) if self._current is not None else None,
            rep_count=self._count,
            phase=self._phase,
            completed_reps=[replace(rep) for rep in self._completed],
            rep_completed=completed,
        )


__all__ = ["RepCounter", "RepCountingMetrics", "RepCountingState", "RepData"]
