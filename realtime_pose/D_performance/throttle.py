"""Limitador de frames: descarta las peticiones que llegan antes del intervalo mínimo."""

from __future__ import annotations

import logging
from typing import Optional

from realtime_pose.config.models import ThrottleConfig

logger = logging.getLogger(__name__)


class FrameThrottle:
    """Acepta como mucho un fotograma cada ``1000 / target_fps`` milisegundos."""

    def __init__(self, config: Optional[ThrottleConfig] = None) -> None:
        self.config = config or ThrottleConfig()
        self._last_accepted_ms: Optional[float] = None
        self.accepted = 0
        self.rejected = 0

    @property
    def min_interval_ms(self) -> float:
        return self.config.min_interval_ms

    @property
    def last_accepted_ms(self) -> Optional[float]:
        return self._last_accepted_ms

    def should_process(self, timestamp_ms: float) -> bool:
        """``True`` si el fotograma puede procesarse; el primero siempre se acepta."""

        if self._last_accepted_ms is not None and timestamp_ms - self._last_accepted_ms < self.min_interval_ms:
            self.rejected += 1
            return False
        self._last_accepted_ms = timestamp_ms
        self.accepted += 1
        return True

    def reset(self) -> None:
        self._last_accepted_ms = None
        self.accepted = 0
        self.rejected = 0


__all__ = ["FrameThrottle"]
