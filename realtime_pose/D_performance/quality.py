"""Escalera de calidades de captura, de mayor a menor exigencia."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from realtime_pose.config.constants import QUALITY_LEVEL_ORDER
from realtime_pose.core.errors import UnknownQualityLevelError


@dataclass(frozen=True)
class QualityLevel:
    level: str
    label: str
    width: int
    height: int
    frame_rate: int
    performance_impact: str
    min_device_grade: str

    @property
    def resolution(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class CameraConfig:
    """Restricciones que la fuente de captura aplicará en su próxima configuración."""

    width: int = 960
    height: int = 540
    frame_rate: int = 30
    facing_mode: str = "user"
    codec: Optional[str] = None
    device_id: Optional[str] = None


QUALITY_LADDER: Tuple[QualityLevel, ...] = (
    QualityLevel("ultra", "Ultra Quality", 1920, 1080, 60, "very_high", "flagship"),
    QualityLevel("high", "High Quality", 1280, 720, 30, "high", "high"),
    QualityLevel("medium", "Medium Quality", 960, 540, 30, "medium", "mid"),
    QualityLevel("low", "Low Quality", 640, 360, 30, "low", "basic"),
    QualityLevel("minimal", "Minimal Quality", 480, 270, 24, "very_low", "basic"),
)

_BY_NAME: Dict[str, QualityLevel] = {q.level: q for q in QUALITY_LADDER}


def get_quality_level(level: str) -> QualityLevel:
    try:
        return _BY_NAME[level]
    except KeyError:
        raise UnknownQualityLevelError(level) from None


def ladder_index(level: str) -> int:
    return QUALITY_LEVEL_ORDER.index(get_quality_level(level).level)


def next_lower(level: str) -> Optional[QualityLevel]:
    """Nivel inmediatamente inferior, o ``None`` si ya es el suelo de la escalera."""

    idx = ladder_index(level)
    return QUALITY_LADDER[idx + 1] if idx + 1 < len(QUALITY_LADDER) else None


__all__ = ["CameraConfig", "QUALITY_LADDER", "QualityLevel", "get_quality_level", "ladder_index", "next_lower"]
