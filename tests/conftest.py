# tests/conftest.py
"""Utilidades de configuración comunes para la batería de pruebas."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Repo root = parent de 'tests'
ROOT = Path(__file__).resolve().parents[1]

# Asegura que ``realtime_pose`` es importable sin instalar el paquete
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from realtime_pose.A_pose import constants as idx  # noqa: E402
from realtime_pose.A_pose.types import Landmark  # noqa: E402


def build_squat_frame(
    hip_y: float = 0.5,
    *,
    knee_y: float = 0.7,
    knee_z: float = 0.0,
    shoulder_y: float = 0.3,
    visibility: float = 0.9,
    hip_shift_x: float = 0.0,
) -> List[Optional[Landmark]]:
    """Fotograma frontal de 33 landmarks con piernas paralelas.

    ``knee_z`` adelanta las rodillas para cerrar el ángulo de rodilla sin
    alterar las coordenadas ``x`` que usa el equilibrio lateral.
    """

    frame: List[Optional[Landmark]] = [Landmark(0.5, 0.5, 0.0, visibility) for _ in range(33)]
    for side, x in (("LEFT", 0.45), ("RIGHT", 0.55)):
        frame[getattr(idx, f"{side}_SHOULDER")] = Landmark(x, shoulder_y, 0.0, visibility)
        frame[getattr(idx, f"{side}_HIP")] = Landmark(x + hip_shift_x, hip_y, 0.0, visibility)
        frame[getattr(idx, f"{side}_KNEE")] = Landmark(x, knee_y, knee_z, visibility)
        frame[getattr(idx, f"{side}_ANKLE")] = Landmark(x, 0.9, 0.0, visibility)
        frame[getattr(idx, f"{side}_FOOT_INDEX")] = Landmark(x + 0.02, 0.92, 0.0, visibility)
    return frame


@pytest.fixture
def squat_frame() -> Callable[..., List[Optional[Landmark]]]:
    return build_squat_frame
