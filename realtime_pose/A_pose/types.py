"""Tipos ligeros que describen landmarks y fotogramas de pose."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Optional, Sequence

from realtime_pose.config.constants import MISSING_VISIBILITY

_LANDMARK_KEYS = ("x", "y", "z", "visibility")
_UNSET = object()


def _coordinate(value: Any, name: str, default: Any = _UNSET) -> float:
    """Convierte un campo a ``float``; ``x`` e ``y`` no admiten valores ausentes."""

    if value is None:
        if default is _UNSET:
            raise ValueError(f"landmark {name} is required")
        return default
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"landmark {name} must be a number, got {type(value).__name__}")
    return float(value)


@dataclass(frozen=True)
class Landmark(Mapping[str, float]):
    """Representación compatible con ``Mapping`` de un landmark de pose."""

    x: float
    y: float
    z: float = 0.0
    visibility: float = MISSING_VISIBILITY

    def __getitem__(self, key: str) -> float:  # type: ignore[override]
        if key == "x":
            return float(self.x)
        if key == "y":
            return float(self.y)
        if key == "z":
            return float(self.z)
        if key == "visibility":
            return float(self.visibility)
        raise KeyError(key)

    def __iter__(self):  # type: ignore[override]
        yield from ("x", "y", "z", "visibility")

    def __len__(self) -> int:  # type: ignore[override]
        return 4

    def get(self, key: str, default: Optional[float] = None) -> Optional[float]:
        """Obtiene un atributo del landmark devolviendo ``default`` si no existe."""

        try:
            return self[key]
        except KeyError:
            return default

    def to_dict(self) -> dict[str, float]:
        """Exporta el landmark a un diccionario simple de floats."""

        return {"x": float(self.x), "y": float(self.y), "z": float(self.z), "visibility": float(self.visibility)}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Landmark":
        """Crea un ``Landmark`` desde cualquier ``Mapping``.

        ``x`` e ``y`` son obligatorios y lanzan ``ValueError`` si faltan, son
        ``None`` o no son numéricos. ``z`` ausente o ``None`` vale 0 y
        ``visibility`` ausente o ``None`` vale :data:`MISSING_VISIBILITY`.
        """

        return cls(
            x=_coordinate(data.get("x"), "x"),
            y=_coordinate(data.get("y"), "y"),
            z=_coordinate(data.get("z"), "z", 0.0),
            visibility=_coordinate(data.get("visibility"), "visibility", MISSING_VISIBILITY),
        )


LandmarkFrame = Sequence[Optional[Landmark]]


def as_landmark(value: Any) -> Optional[Landmark]:
    """Normaliza un landmark de cualquier proveedor (objeto, ``Mapping`` o lista).

    Todas las formas pasan por :meth:`Landmark.from_mapping`, así que comparten
    las mismas reglas para campos ausentes o no numéricos.
    """

    if value is None or isinstance(value, Landmark):
        return value
    if isinstance(value, Mapping):
        return Landmark.from_mapping(value)
    if isinstance(value, (list, tuple)):
        return Landmark.from_mapping(dict(zip(_LANDMARK_KEYS, value)))
    return Landmark.from_mapping({key: getattr(value, key, None) for key in _LANDMARK_KEYS})


def landmarks_from_proto(landmarks: Iterable[object]) -> List[Optional[Landmark]]:
    """Convierte landmarks de Mediapipe (o dicts equivalentes) en :class:`Landmark`."""

    return [as_landmark(lm) for lm in landmarks]


def landmark_at(frame: LandmarkFrame, index: int) -> Optional[Landmark]:
    """Devuelve el landmark ``index`` o ``None`` si el fotograma es más corto."""

    if 0 <= index < len(frame):
        return frame[index]
    return None


__all__ = ["Landmark", "LandmarkFrame", "as_landmark", "landmark_at", "landmarks_from_proto"]
