"""Historiales acotados de desplazamiento lateral y trayectoria de la barra.

Cada historial es una cola FIFO de capacidad fija más un máximo de sesión. El
máximo es el mayor valor observado desde el último ``reset`` y se conserva
aunque la muestra que lo produjo ya haya salido de la ventana.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Generic, List, Optional, TypeVar

from realtime_pose.A_pose.types import Landmark
from realtime_pose.config.settings import METRICS_HISTORY_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedHistory(Generic[T]):
    """Cola de capacidad fija con seguimiento del máximo de sesión."""

    def __init__(self, capacity: int = METRICS_HISTORY_SIZE, key: Optional[Callable[[T], float]] = None) -> None:
        if int(capacity) < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = int(capacity)
        self._key = key or float
        self._items: Deque[T] = deque(maxlen=self.capacity)
        self._inserted = 0
        self._max_value: Optional[float] = None
        self._max_index: Optional[int] = None
        self._max_context: Any = None

    def append(self, item: T, context: Any = None) -> bool:
        """Añadir ``item``; devuelve ``True`` si fija un nuevo máximo."""

        value = float(self._key(item))
        self._items.append(item)
        index = self._inserted
        self._inserted += 1
        if self._max_value is None or value > self._max_value:
            self._max_value = value
            self._max_index = index
            self._max_context = context
            return True
        return False

    @property
    def maximum(self) -> float:
        return self._max_value if self._max_value is not None else 0.0

    @property
    def max_index(self) -> Optional[int]:
        """Índice de inserción (desde el último ``reset``) del máximo."""
        return self._max_index

    @property
    def max_context(self) -> Any:
        return self._max_context

    @property
    def total_inserted(self) -> int:
        return self._inserted

    def snapshot(self) -> List[T]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._inserted = 0
        self._max_value = None
        self._max_index = None
        self._max_context = None

    def __len__(self) -> int:
        return len(self._items)


@dataclass(frozen=True)
class BarPathPoint:
    position: Landmark
    timestamp_ms: float
    deviation: float


@dataclass(frozen=True)
class BarPathUpdate:
    current_position: Optional[Landmark]
    history: List[BarPathPoint]
    vertical_deviation: Optional[float]
    max_deviation: float
    starting_position: Optional[Landmark]


@dataclass(frozen=True)
class LateralShiftMetrics:
    shift_history: List[float]
    max_lateral_shift: float
    max_shift_depth: Optional[float]


class MetricsTracker:
    """Dueño de los historiales de desplazamiento lateral y trayectoria de barra."""

    def __init__(self, max_history_size: int = METRICS_HISTORY_SIZE) -> None:
        self._lateral: BoundedHistory[float] = BoundedHistory(max_history_size)
        self._bar_path: BoundedHistory[BarPathPoint] = BoundedHistory(
            max_history_size, key=lambda point: point.deviation
        )
        self._starting_position: Optional[Landmark] = None

    def update_lateral_shift(self, deviation: float, depth_context: Optional[float] = None) -> None:
        if self._lateral.append(float(deviation), context=depth_context):
            logger.debug("New max lateral shift %.4f at depth %s", deviation, depth_context)

    def update_bar_path(self, point: Landmark, timestamp_ms: float) -> BarPathUpdate:
        """Registrar la posición de la barra; la primera llamada fija la referencia."""

        if self._starting_position is None:
            self._starting_position = point
        deviation = abs(point.y - self._starting_position.y)
        self._bar_path.append(BarPathPoint(position=point, timestamp_ms=timestamp_ms, deviation=deviation))
        return BarPathUpdate(
            current_position=point,
            history=self._bar_path.snapshot(),
            vertical_deviation=deviation,
            max_deviation=self._bar_path.maximum,
            starting_position=self._starting_position,
        )

    def lateral_shift_metrics(self) -> LateralShiftMetrics:
        return LateralShiftMetrics(
            shift_history=self._lateral.snapshot(),
            max_lateral_shift=self._lateral.maximum,
            max_shift_depth=self._lateral.max_context,
        )

    def bar_path_metrics(self) -> BarPathUpdate:
        """Estado del historial de barra sin añadir muestra (posición actual ``None``)."""

        return BarPathUpdate(
            current_position=None,
            history=self._bar_path.snapshot(),
            vertical_deviation=None,
            max_deviation=self._bar_path.maximum,
            starting_position=self._starting_position,
        )

    @property
    def max_lateral_shift(self) -> float:
        return self._lateral.maximum

    @property
    def max_bar_path_deviation(self) -> float:
        return self._bar_path.maximum

    def reset_lateral_shift(self) -> None:
        self._lateral.clear()

    def reset_bar_path(self) -> None:
        self._bar_path.clear()
        self._starting_position = None

    def reset(self) -> None:
        self.reset_lateral_shift()
        self.reset_bar_path()


__all__ = ["BarPathPoint", "BarPathUpdate", "BoundedHistory", "LateralShiftMetrics", "MetricsTracker"]
