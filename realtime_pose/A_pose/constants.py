"""Índices de landmarks, grupos corporales y pesos usados por el núcleo."""

from __future__ import annotations

from typing import Dict, Tuple

from realtime_pose.config.constants import LANDMARK_COUNT

# Atajos de índice que replican el orden de landmarks de Mediapipe.
NOSE = 0
LEFT_EYE_INNER = 1
LEFT_EYE = 2
LEFT_EYE_OUTER = 3
RIGHT_EYE_INNER = 4
RIGHT_EYE = 5
RIGHT_EYE_OUTER = 6
LEFT_EAR = 7
RIGHT_EAR = 8
MOUTH_LEFT = 9
MOUTH_RIGHT = 10
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_ELBOW = 13
RIGHT_ELBOW = 14
LEFT_WRIST = 15
RIGHT_WRIST = 16
LEFT_PINKY = 17
RIGHT_PINKY = 18
LEFT_INDEX = 19
RIGHT_INDEX = 20
LEFT_THUMB = 21
RIGHT_THUMB = 22
LEFT_HIP = 23
RIGHT_HIP = 24
LEFT_KNEE = 25
RIGHT_KNEE = 26
LEFT_ANKLE = 27
RIGHT_ANKLE = 28
LEFT_HEEL = 29
RIGHT_HEEL = 30
LEFT_FOOT_INDEX = 31
RIGHT_FOOT_INDEX = 32

HIP_CENTER = (LEFT_HIP, RIGHT_HIP)
KNEE_CENTER = (LEFT_KNEE, RIGHT_KNEE)
ANKLE_CENTER = (LEFT_ANKLE, RIGHT_ANKLE)
SHOULDER_CENTER = (LEFT_SHOULDER, RIGHT_SHOULDER)

# Grupos cuya visibilidad se estabiliza por separado.
LANDMARK_GROUPS: Dict[str, Tuple[int, int]] = {
    "hips": HIP_CENTER,
    "knees": KNEE_CENTER,
    "ankles": ANKLE_CENTER,
    "shoulders": SHOULDER_CENTER,
}

# Pesos de la confianza global de la sentadilla. Se normalizan por la suma de
# los pesos que superan el suelo de ruido.
KEY_LANDMARK_WEIGHTS: Dict[int, float] = {
    LEFT_HIP: 0.25,
    RIGHT_HIP: 0.25,
    LEFT_KNEE: 0.2,
    RIGHT_KNEE: 0.2,
    LEFT_ANKLE: 0.1,
    RIGHT_ANKLE: 0.1,
}

JOINT_INDEX_MAP: Dict[str, Tuple[int, int, int]] = {
    "left_knee": (LEFT_HIP, LEFT_KNEE, LEFT_ANKLE),
    "right_knee": (RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE),
    "left_hip": (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE),
    "right_hip": (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE),
    "left_ankle": (LEFT_KNEE, LEFT_ANKLE, LEFT_FOOT_INDEX),
    "right_ankle": (RIGHT_KNEE, RIGHT_ANKLE, RIGHT_FOOT_INDEX),
    "left_elbow": (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
    "right_elbow": (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST),
}

# Pares izquierda/derecha para la puntuación de simetría.
SYMMETRY_PAIRS: Tuple[Tuple[int, int], ...] = (
    (LEFT_EYE_INNER, RIGHT_EYE_INNER),
    (LEFT_EYE, RIGHT_EYE),
    (LEFT_EYE_OUTER, RIGHT_EYE_OUTER),
    (LEFT_EAR, RIGHT_EAR),
    (MOUTH_LEFT, MOUTH_RIGHT),
    (LEFT_SHOULDER, RIGHT_SHOULDER),
    (LEFT_ELBOW, RIGHT_ELBOW),
    (LEFT_WRIST, RIGHT_WRIST),
    (LEFT_PINKY, RIGHT_PINKY),
    (LEFT_INDEX, RIGHT_INDEX),
    (LEFT_THUMB, RIGHT_THUMB),
    (LEFT_HIP, RIGHT_HIP),
    (LEFT_KNEE, RIGHT_KNEE),
    (LEFT_ANKLE, RIGHT_ANKLE),
    (LEFT_HEEL, RIGHT_HEEL),
    (LEFT_FOOT_INDEX, RIGHT_FOOT_INDEX),
)
# Los pares de tronco y pierna pesan el doble en la simetría.
HEAVY_SYMMETRY_INDICES = frozenset(
    {LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP, LEFT_KNEE, RIGHT_KNEE}
)

__all__ = [
    "ANKLE_CENTER",
    "HEAVY_SYMMETRY_INDICES",
    "HIP_CENTER",
    "JOINT_INDEX_MAP",
    "KEY_LANDMARK_WEIGHTS",
    "KNEE_CENTER",
    "LANDMARK_COUNT",
    "LANDMARK_GROUPS",
    "LEFT_ANKLE",
    "LEFT_FOOT_INDEX",
    "LEFT_HIP",
    "LEFT_KNEE",
    "LEFT_SHOULDER",
    "RIGHT_ANKLE",
    "RIGHT_FOOT_INDEX",
    "RIGHT_HIP",
    "RIGHT_KNEE",
    "RIGHT_SHOULDER",
    "SHOULDER_CENTER",
    "SYMMETRY_PAIRS",
]
