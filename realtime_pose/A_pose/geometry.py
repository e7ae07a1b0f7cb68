"""Primitivas geométricas sobre landmarks: ángulos, distancias, puntos medios y fiabilidad.

Ninguna función lanza excepciones ante datos ruidosos: un landmark ausente o con
visibilidad insuficiente produce ``None`` ("sin resultado"), que el llamador debe
distinguir de un valor calculado igual a cero."""

from __future__ import annotations

import math
from typing import Dict, Iterable, Optional

import numpy as np

from realtime_pose.config.settings import DEFAULT_LANDMARK_MIN_VISIBILITY

from .constants import HIP_CENTER, JOINT_INDEX_MAP, SHOULDER_CENTER
from .types import Landmark, LandmarkFrame, landmark_at


def is_reliable(landmark: Optional[Landmark], threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY) -> bool:
    """``True`` si el landmark existe y su visibilidad alcanza ``threshold``."""

    return landmark is not None and float(landmark.visibility) >= threshold


def all_reliable(
    landmarks: Iterable[Optional[Landmark]], threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY
) -> bool:
    """Fiabilidad de un conjunto; un conjunto vacío es fiable por vacuidad."""

    return all(is_reliable(lm, threshold) for lm in landmarks)


def angle_degrees(
    a: Optional[Landmark],
    vertex: Optional[Landmark],
    c: Optional[Landmark],
    min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY,
) -> Optional[float]:
    """Ángulo en ``vertex`` formado por los rayos hacia ``a`` y ``c``, en grados.

    Se usa el producto escalar normalizado de los vectores 3-D y el coseno se
    recorta a ``[-1, 1]`` antes de ``acos``. Un rayo de longitud cero devuelve
    ``0.0``; cualquier punto ausente o por debajo de ``min_visibility`` devuelve
    ``None``.
    """

    if not all_reliable((a, vertex, c), min_visibility):
        return None

    v1 = (a.x - vertex.x, a.y - vertex.y, a.z - vertex.z)
    v2 = (c.x - vertex.x, c.y - vertex.y, c.z - vertex.z)
    mag1 = math.sqrt(v1[0] ** 2 + v1[1] ** 2 + v1[2] ** 2)
    mag2 = math.sqrt(v2[0] ** 2 + v2[1] ** 2 + v2[2] ** 2)
    if mag1 == 0 or mag2 == 0:
        return 0.0
    dot_product = v1[0] * v2[0] + v1[1] * v2[1] + v1[2] * v2[2]
    cosine = max(min(dot_product / (mag1 * mag2), 1.0), -1.0)
    return math.degrees(math.acos(cosine))


def distance_2d(
    a: Optional[Landmark], b: Optional[Landmark], min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY
) -> Optional[float]:
    """Distancia euclídea en el plano de imagen (ignora ``z``)."""

    if not all_reliable((a, b), min_visibility):
        return None
    return math.hypot(a.x - b.x, a.y - b.y)


def distance_3d(
    a: Optional[Landmark], b: Optional[Landmark], min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY
) -> Optional[float]:
    """Distancia euclídea en 3-D."""

    if not all_reliable((a, b), min_visibility):
        return None
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2)


def midpoint(a: Optional[Landmark], b: Optional[Landmark]) -> Optional[Landmark]:
    """Punto medio con la visibilidad mínima de ambos extremos.

    Se toma el mínimo y no la media: un único landmark mal seguido degrada la
    confianza del punto derivado.
    """

    if a is None or b is None:
        return None
    return Landmark(
        x=(a.x + b.x) / 2,
        y=(a.y + b.y) / 2,
        z=(a.z + b.z) / 2,
        visibility=min(float(a.visibility), float(b.visibility)),
    )


def horizontal_deviation(
    point: Optional[Landmark], reference_x: float, min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY
) -> Optional[float]:
    """Desviación respecto a una vertical de referencia (positivo = derecha)."""

    if not is_reliable(point, min_visibility):
        return None
    return point.x - reference_x


def lateral_imbalance(
    left: Optional[Landmark],
    right: Optional[Landmark],
    axis: str = "y",
    min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY,
) -> Optional[float]:
    """Diferencia derecha menos izquierda a lo largo de ``axis`` (``"x"`` o ``"y"``)."""

    if axis not in ("x", "y"):
        raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
    if not all_reliable((left, right), min_visibility):
        return None
    return right[axis] - left[axis]


def _side_prefix(side: str) -> str:
    normalized = side.strip().lower()
    if normalized not in ("left", "right"):
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")
    return normalized


def joint_angle(frame: LandmarkFrame, joint: str, min_visibility: float = DEFAULT_LANDMARK_MIN_VISIBILITY) -> Optional[float]:
    a_idx, b_idx, c_idx = JOINT_INDEX_MAP[joint]
    return angle_degrees(
        landmark_at(frame, a_idx), landmark_at(frame, b_idx), landmark_at(frame, c_idx), min_visibility
    )


def knee_angle(frame: LandmarkFrame, side: str) -> Optional[float]:
    """Ángulo cadera → rodilla → tobillo."""
    return joint_angle(frame, f"{_side_prefix(side)}_knee")


def hip_angle(frame: LandmarkFrame, side: str) -> Optional[float]:
    """Ángulo hombro → cadera → rodilla."""
    return joint_angle(frame, f"{_side_prefix(side)}_hip")


def ankle_angle(frame: LandmarkFrame, side: str) -> Optional[float]:
    """Ángulo rodilla → tobillo → punta del pie."""
    return joint_angle(frame, f"{_side_prefix(side)}_ankle")


def shoulder_midpoint(frame: LandmarkFrame) -> Optional[Landmark]:
    return midpoint(landmark_at(frame, SHOULDER_CENTER[0]), landmark_at(frame, SHOULDER_CENTER[1]))


def hip_midpoint(frame: LandmarkFrame) -> Optional[Landmark]:
    return midpoint(landmark_at(frame, HIP_CENTER[0]), landmark_at(frame, HIP_CENTER[1]))


def extract_joint_angles(frame: LandmarkFrame) -> Dict[str, Optional[float]]:
    """Devuelve un diccionario con los ángulos de todas las articulaciones conocidas."""

    return {name: joint_angle(frame, name) for name in JOINT_INDEX_MAP}


def angle_abc_deg(
    ax: np.ndarray,
    ay: np.ndarray,
    bx: np.ndarray,
    by: np.ndarray,
    cx: np.ndarray,
    cy: np.ndarray,
) -> np.ndarray:
    """Calcula en vector el ángulo ABC en grados para cada fila de datos.

    Pensado para análisis offline de secuencias grabadas; las filas con un rayo
    de longitud cero producen ``NaN``.
    """

    v1x, v1y = ax - bx, ay - by
    v2x, v2y = cx - bx, cy - by
    dot = v1x * v2x + v1y * v2y
    denom = np.hypot(v1x, v1y) * np.hypot(v2x, v2y)
    with np.errstate(invalid="ignore", divide="ignore"):
        cos = np.where(denom > 0, dot / denom, np.nan)
    cos = np.clip(cos, -1.0, 1.0)
    return np.degrees(np.arccos(cos))


__all__ = [
    "all_reliable",
    "angle_abc_deg",
    "angle_degrees",
    "ankle_angle",
    "distance_2d",
    "distance_3d",
    "extract_joint_angles",
    "hip_angle",
    "hip_midpoint",
    "horizontal_deviation",
    "is_reliable",
    "joint_angle",
    "knee_angle",
    "lateral_imbalance",
    "midpoint",
    "shoulder_midpoint",
]
