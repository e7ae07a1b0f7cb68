"""Estabilización independiente de la visibilidad de cada grupo de landmarks."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping, Optional

from realtime_pose.A_pose.constants import LANDMARK_GROUPS
from realtime_pose.config.models import StabilizerConfig, default_visibility_stabilizer_config

from .hysteresis import HysteresisStabilizer, ScalarStrategy


@dataclass(frozen=True)
class StabilizedVisibility:
    raw_value: float
    stabilized_value: float
    is_visible: bool
    is_transitioning: bool


class VisibilityStabilizer:
    """Un estabilizador con histéresis por grupo (caderas, rodillas, tobillos, hombros)."""

    def __init__(
        self, config: Optional[StabilizerConfig] = None, groups: Iterable[str] = tuple(LANDMARK_GROUPS)
    ) -> None:
        config = replace(config or default_visibility_stabilizer_config(), enter_debounce_ms=0)
        self.config = config
        strategy = ScalarStrategy()
        self._stabilizers: Dict[str, HysteresisStabilizer[float, float]] = {
            group: HysteresisStabilizer(config, strategy) for group in groups
        }

    @property
    def groups(self) -> tuple:
        return tuple(self._stabilizers)

    def update(self, raw_visibility: Mapping[str, float], timestamp_ms: float) -> Dict[str, StabilizedVisibility]:
        """Actualizar los grupos presentes en ``raw_visibility``; los desconocidos se ignoran."""

        stabilized: Dict[str, StabilizedVisibility] = {}
        for group, raw_value in raw_visibility.items():
            stabilizer = self._stabilizers.get(group)
            if stabilizer is None:
                continue
            result = stabilizer.update(float(raw_value), timestamp_ms)
            stabilized[group] = StabilizedVisibility(
                raw_value=float(raw_value),
                stabilized_value=float(result.output),
                is_visible=result.is_on,
                is_transitioning=result.is_transitioning,
            )
        return stabilized

    def zeros(self) -> Dict[str, float]:
        return {group: 0.0 for group in self._stabilizers}

    def is_group_visible(self, group: str) -> Optional[bool]:
        stabilizer = self._stabilizers.get(group)
        return None if stabilizer is None else stabilizer.is_on

    def reset(self) -> None:
        for stabilizer in self._stabilizers.values():
            stabilizer.reset()


__all__ = ["StabilizedVisibility", "VisibilityStabilizer"]
