"""Pipeline de métricas de sentadilla por fotograma.

Solo selecciona qué landmarks alimentan cada primitiva geométrica y cada
historial; la aritmética vive en :mod:`realtime_pose.A_pose.geometry` y en
:mod:`realtime_pose.C_analysis.history`. Si los landmarks mínimos (caderas,
rodillas y tobillos) no son fiables, el resultado se corta en seco con
``has_valid_pose=False`` y los campos numéricos a ``None``: "no calculado" no
es lo mismo que "calculado como cero".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from realtime_pose.A_pose.confidence import key_landmark_visibility
from realtime_pose.A_pose.constants import (
    ANKLE_CENTER,
    HIP_CENTER,
    KNEE_CENTER,
    LANDMARK_COUNT,
    LANDMARK_GROUPS,
    LEFT_HIP,
    LEFT_SHOULDER,
    RIGHT_HIP,
    RIGHT_SHOULDER,
)
from realtime_pose.A_pose.geometry import (
    all_reliable,
    ankle_angle,
    hip_angle,
    hip_midpoint,
    is_reliable,
    knee_angle,
    midpoint,
    shoulder_midpoint,
)
from realtime_pose.A_pose.types import Landmark, LandmarkFrame, landmark_at
from realtime_pose.config.models import SquatAnalysisConfig
from realtime_pose.config.settings import SQUAT_DEFAULT_STANDING_HIP_Y, SQUAT_DEFAULT_STANDING_KNEE_Y

from .history import BarPathPoint, BarPathUpdate, MetricsTracker
from .rep_counter import RepCounter, RepCountingMetrics, RepCountingState

logger = logging.getLogger(__name__)

# Tolerancia de coma flotante al comparar la profundidad con el umbral.
DEPTH_EPSILON = 0.01

REQUIRED_LANDMARKS = HIP_CENTER + KNEE_CENTER + ANKLE_CENTER


@dataclass(frozen=True)
class JointAngles:
    left_knee: Optional[float] = None
    right_knee: Optional[float] = None
    left_hip: Optional[float] = None
    right_hip: Optional[float] = None
    left_ankle: Optional[float] = None
    right_ankle: Optional[float] = None
    average_knee: Optional[float] = None


@dataclass(frozen=True)
class BarPosition:
    shoulder_midpoint: Optional[Landmark] = None
    is_valid: bool = False


@dataclass(frozen=True)
class DepthMetrics:
    hip_knee_ratio: Optional[float]
    has_achieved_depth: bool
    depth_percentage: Optional[float]
    depth_threshold: float


@dataclass(frozen=True)
class BalanceMetrics:
    lateral_deviation: Optional[float]
    is_balanced: bool
    shift_history: List[float] = field(default_factory=list)
    max_lateral_shift: float = 0.0
    max_shift_depth: Optional[float] = None


@dataclass(frozen=True)
class SquatMetrics:
    """Resultado completo de un fotograma."""

    has_valid_pose: bool
    key_landmark_visibility: Dict[str, float]
    joint_angles: JointAngles
    bar_position: BarPosition
    depth: DepthMetrics
    balance: BalanceMetrics
    bar_path: BarPathUpdate
    rep_counting: RepCountingState

    def to_row(self) -> Dict[str, object]:
        """Aplana las métricas principales en un diccionario para tablas."""

        return {
            "has_valid_pose": self.has_valid_pose,
            **{f"visibility_{name}": value for name, value in self.key_landmark_visibility.items()},
            "left_knee_angle": self.joint_angles.left_knee,
            "right_knee_angle": self.joint_angles.right_knee,
            "average_knee_angle": self.joint_angles.average_knee,
            "left_hip_angle": self.joint_angles.left_hip,
            "right_hip_angle": self.joint_angles.right_hip,
            "depth_percentage": self.depth.depth_percentage,
            "has_achieved_depth": self.depth.has_achieved_depth,
            "lateral_deviation": self.balance.lateral_deviation,
            "is_balanced": self.balance.is_balanced,
            "max_lateral_shift": self.balance.max_lateral_shift,
            "bar_deviation": self.bar_path.vertical_deviation,
            "max_bar_deviation": self.bar_path.max_deviation,
            "rep_phase": self.rep_counting.phase.value,
            "rep_count": self.rep_counting.rep_count,
        }


class SquatMetricsPipeline:
    """Calcula ángulos, profundidad, equilibrio, trayectoria de barra y repeticiones."""

    def __init__(self, config: Optional[SquatAnalysisConfig] = None) -> None:
        self.config = config or SquatAnalysisConfig()
        self.tracker = MetricsTracker(self.config.history_size)
        self.rep_counter = RepCounter(self.config)
        self._standing_hip_y: Optional[float] = None
        self._standing_knee_y: Optional[float] = None
        self._calibration_frames = 0

    @property
    def is_calibrated(self) -> bool:
        return self._calibration_frames >= self.config.depth.calibration_frames

    @property
    def standing_baseline(self) -> tuple:
        """``(hip_y, knee_y)`` de pie, con los valores por defecto si aún no hay calibración."""

        hip = self._standing_hip_y if self._standing_hip_y is not None else SQUAT_DEFAULT_STANDING_HIP_Y
        knee = self._standing_knee_y if self._standing_knee_y is not None else SQUAT_DEFAULT_STANDING_KNEE_Y
        return hip, knee

    def process(self, landmarks: Optional[LandmarkFrame], timestamp_ms: float) -> SquatMetrics:
        visibility_cfg = self.config.visibility
        if not landmarks or len(landmarks) < LANDMARK_COUNT:
            return self.empty_metrics()

        group_visibility = key_landmark_visibility(landmarks, LANDMARK_GROUPS, visibility_cfg.noise_floor)
        required = [landmark_at(landmarks, idx) for idx in REQUIRED_LANDMARKS]
        if not all_reliable(required, visibility_cfg.min_landmark_visibility):
            logger.debug("Required squat landmarks not reliable at %.1f ms", timestamp_ms)
            return self.empty_metrics(group_visibility)

        angles = self._joint_angles(landmarks)
        bar_position = self._bar_position(landmarks)
        depth = self._depth(landmarks)
        balance = self._balance(landmarks, depth.depth_percentage)
        bar_path = self._bar_path(bar_position.shoulder_midpoint, timestamp_ms)
        rep_state = self._rep_counting(depth, timestamp_ms)

        min_visibility = visibility_cfg.min_landmark_visibility
        has_good_visibility = all(group_visibility[name] > min_visibility for name in ("hips", "knees", "ankles"))
        has_valid_knee_angle = (
            angles.average_knee is not None
            and angles.average_knee < self.config.validation.max_valid_knee_angle
        )
        return SquatMetrics(
            has_valid_pose=has_good_visibility and has_valid_knee_angle,
            key_landmark_visibility=group_visibility,
            joint_angles=angles,
            bar_position=bar_position,
            depth=depth,
            balance=balance,
            bar_path=bar_path,
            rep_counting=rep_state,
        )

    def reset(self) -> None:
        self.tracker.reset()
        self.rep_counter.reset()
        self._standing_hip_y = None
        self._standing_knee_y = None
        self._calibration_frames = 0

    # ------------------------------------------------------------------
    def _joint_angles(self, landmarks: LandmarkFrame) -> JointAngles:
        left_knee = knee_angle(landmarks, "left")
        right_knee = knee_angle(landmarks, "right")
        average = (left_knee + right_knee) / 2 if left_knee is not None and right_knee is not None else None
        return JointAngles(
            left_knee=left_knee,
            right_knee=right_knee,
            left_hip=hip_angle(landmarks, "left"),
            right_hip=hip_angle(landmarks, "right"),
            left_ankle=ankle_angle(landmarks, "left"),
            right_ankle=ankle_angle(landmarks, "right"),
            average_knee=average,
        )

    def _bar_position(self, landmarks: LandmarkFrame) -> BarPosition:
        center = shoulder_midpoint(landmarks)
        if center is None:
            return BarPosition()
        threshold = self.config.visibility.bar_position_visibility
        shoulders = (landmark_at(landmarks, LEFT_SHOULDER), landmark_at(landmarks, RIGHT_SHOULDER))
        return BarPosition(shoulder_midpoint=center, is_valid=all(lm.visibility > threshold for lm in shoulders))

    def _depth(self, landmarks: LandmarkFrame) -> DepthMetrics:
        depth_cfg = self.config.depth
        hip_mid = hip_midpoint(landmarks)
        knee_mid = midpoint(landmark_at(landmarks, KNEE_CENTER[0]), landmark_at(landmarks, KNEE_CENTER[1]))
        if hip_mid is None or knee_mid is None or knee_mid.y == 0:
            return DepthMetrics(None, False, None, depth_cfg.depth_threshold)

        ratio = hip_mid.y / knee_mid.y
        if not self.is_calibrated and ratio < self.config.balance.standing_position_ratio:
            self._calibrate(hip_mid.y, knee_mid.y)

        standing_hip, standing_knee = self.standing_baseline
        total_range = standing_knee - standing_hip
        percentage = (hip_mid.y - standing_hip) / total_range * 100 if total_range > 0 else 0.0
        percentage = max(0.0, percentage)
        achieved = percentage >= depth_cfg.depth_threshold * 100 - DEPTH_EPSILON
        return DepthMetrics(ratio, achieved, percentage, depth_cfg.depth_threshold)

    def _calibrate(self, hip_y: float, knee_y: float) -> None:
        n = self._calibration_frames
        if self._standing_hip_y is None or self._standing_knee_y is None:
            self._standing_hip_y, self._standing_knee_y = hip_y, knee_y
        else:
            # Media incremental sobre los fotogramas de pie observados.
            self._standing_hip_y = (self._standing_hip_y * n + hip_y) / (n + 1)
            self._standing_knee_y = (self._standing_knee_y * n + knee_y) / (n + 1)
        self._calibration_frames = n + 1
        if self.is_calibrated:
            logger.debug(
                "Standing baseline calibrated: hip_y=%.4f knee_y=%.4f",
                self._standing_hip_y,
                self._standing_knee_y,
            )

    def _balance(self, landmarks: LandmarkFrame, depth_percentage: Optional[float]) -> BalanceMetrics:
        hip_mid = hip_midpoint(landmarks)
        knee_mid = midpoint(landmark_at(landmarks, KNEE_CENTER[0]), landmark_at(landmarks, KNEE_CENTER[1]))
        lateral: Optional[float] = None
        is_balanced = False
        if hip_mid is not None and knee_mid is not None:
            lateral = abs(hip_mid.x - knee_mid.x)
            hip_width = abs(landmark_at(landmarks, LEFT_HIP).x - landmark_at(landmarks, RIGHT_HIP).x)
            is_balanced = lateral < hip_width * self.config.balance.max_lateral_deviation_ratio
            self.tracker.update_lateral_shift(lateral, depth_percentage)

        metrics = self.tracker.lateral_shift_metrics()
        return BalanceMetrics(
            lateral_deviation=lateral,
            is_balanced=is_balanced,
            shift_history=metrics.shift_history,
            max_lateral_shift=metrics.max_lateral_shift,
            max_shift_depth=metrics.max_shift_depth,
        )

    def _bar_path(self, center: Optional[Landmark], timestamp_ms: float) -> BarPathUpdate:
        if center is None or not is_reliable(center, self.config.visibility.reliability_threshold):
            return self.tracker.bar_path_metrics()
        return self.tracker.update_bar_path(center, timestamp_ms)

    def _rep_counting(self, depth: DepthMetrics, timestamp_ms: float) -> RepCountingState:
        state = self.rep_counter.update(
            RepCountingMetrics(
                depth_percentage=depth.depth_percentage or 0.0,
                has_achieved_depth=depth.has_achieved_depth,
                lateral_shift=self.tracker.max_lateral_shift,
                bar_path_deviation=self.tracker.max_bar_path_deviation,
            ),
            timestamp_ms,
        )
        if state.rep_completed:
            # Cada repetición mide la trayectoria desde su propio punto de partida.
            self.tracker.reset_bar_path()
        return state

    def empty_metrics(self, group_visibility: Optional[Dict[str, float]] = None) -> SquatMetrics:
        """Métricas sin calcular; historiales y estado de repeticiones siguen presentes."""

        lateral = self.tracker.lateral_shift_metrics()
        return SquatMetrics(
            has_valid_pose=False,
            key_landmark_visibility=group_visibility or {name: 0.0 for name in LANDMARK_GROUPS},
            joint_angles=JointAngles(),
            bar_position=BarPosition(),
            depth=DepthMetrics(None, False, None, self.config.depth.depth_threshold),
            balance=BalanceMetrics(
                lateral_deviation=None,
                is_balanced=False,
                shift_history=lateral.shift_history,
                max_lateral_shift=lateral.max_lateral_shift,
                max_shift_depth=lateral.max_shift_depth,
            ),
            bar_path=self.tracker.bar_path_metrics(),
            rep_counting=self.rep_counter.state(),
        )


__all__ = [
    "BalanceMetrics",
    "BarPathPoint",
    "BarPosition",
    "DepthMetrics",
    "JointAngles",
    "SquatMetrics",
    "SquatMetricsPipeline",
]
