"""Modelos ``dataclass`` que describen la configuración del núcleo en tiempo real.

Todas las clases son inmutables y se validan al construirse: una configuración
incorrecta falla en el constructor, nunca durante el procesado de un frame."""
from __future__ import annotations

import copy
import hashlib
import json
import logging
from dataclasses import dataclass, field, fields, is_dataclass, replace
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Iterable, List

from realtime_pose.core.errors import ConfigurationError

from .constants import DEFAULT_QUALITY_LEVEL, PERFORMANCE_HISTORY_SIZE, QUALITY_LEVEL_ORDER
from .settings import (
    DEFAULT_LANDMARK_MIN_VISIBILITY,
    GOVERNOR_CHECK_INTERVAL_MS,
    GOVERNOR_COOLDOWN_MS,
    GOVERNOR_ENABLE_AUTO_OPTIMIZATION,
    GOVERNOR_MAX_MEMORY_PERCENT,
    GOVERNOR_MIN_FPS,
    GOVERNOR_OPTIMIZATION_THRESHOLD,
    GOVERNOR_TARGET_FPS,
    MAX_RECOMMENDED_EXIT_DEBOUNCE_MS,
    METRICS_HISTORY_SIZE,
    MIN_RECOMMENDED_THRESHOLD_GAP,
    NOISE_FLOOR_THRESHOLD,
    POSE_ENTER_DEBOUNCE_MS,
    POSE_EXIT_DEBOUNCE_MS,
    POSE_LOWER_THRESHOLD,
    POSE_UPPER_THRESHOLD,
    SQUAT_ASCENDING_THRESHOLD,
    SQUAT_BAR_POSITION_VISIBILITY,
    SQUAT_BOTTOM_PHASE_THRESHOLD,
    SQUAT_CALIBRATION_FRAMES,
    SQUAT_COMPLETE_REP_THRESHOLD,
    SQUAT_DEPTH_THRESHOLD,
    SQUAT_MAX_BAR_PATH_DEVIATION,
    SQUAT_MAX_LATERAL_DEVIATION_RATIO,
    SQUAT_MAX_LATERAL_SHIFT,
    SQUAT_MAX_VALID_KNEE_ANGLE,
    SQUAT_MIN_LANDMARK_VISIBILITY,
    SQUAT_STANDING_POSITION_RATIO,
    SQUAT_START_REP_THRESHOLD,
    THROTTLE_TARGET_FPS,
    VISIBILITY_EXIT_DEBOUNCE_MS,
    VISIBILITY_LOWER_THRESHOLD,
    VISIBILITY_UPPER_THRESHOLD,
)

logger = logging.getLogger(__name__)


def _check_unit_interval(errors: List[str], name: str, value: float) -> None:
    if not (0.0 <= float(value) <= 1.0):
        errors.append(f"{name} must be between 0 and 1")


def _raise_if_errors(component: str, errors: List[str]) -> None:
    if errors:
        raise ConfigurationError(component, errors)


def _require_numbers(component: str, obj: Any, names: Iterable[str], prefix: str = "") -> None:
    """Rechazar valores no numéricos antes de cualquier comparación."""
    errors = [
        f"{prefix}{name} must be a number, got {type(getattr(obj, name)).__name__}"
        for name in names
        if isinstance(getattr(obj, name), bool) or not isinstance(getattr(obj, name), Real)
    ]
    _raise_if_errors(component, errors)


def _require_instance(component: str, obj: Any, name: str, expected: type) -> None:
    value = getattr(obj, name)
    if not isinstance(value, expected):
        _raise_if_errors(component, [f"{name} must be a {expected.__name__}, got {type(value).__name__}"])


@dataclass(frozen=True)
class StabilizerConfig:
    """Umbrales y tiempos de *debounce* de un estabilizador con histéresis."""

    upper_threshold: float = POSE_UPPER_THRESHOLD
    lower_threshold: float = POSE_LOWER_THRESHOLD
    enter_debounce_ms: float = POSE_ENTER_DEBOUNCE_MS
    exit_debounce_ms: float = POSE_EXIT_DEBOUNCE_MS

    def __post_init__(self) -> None:
        _require_numbers(
            "stabilizer", self, ("upper_threshold", "lower_threshold", "enter_debounce_ms", "exit_debounce_ms")
        )
        errors: List[str] = []
        _check_unit_interval(errors, "upper_threshold", self.upper_threshold)
        _check_unit_interval(errors, "lower_threshold", self.lower_threshold)
        if self.upper_threshold <= self.lower_threshold:
            errors.append("upper_threshold must be greater than lower_threshold")
        if self.enter_debounce_ms < 0:
            errors.append("enter_debounce_ms must be non-negative")
        if self.exit_debounce_ms < 0:
            errors.append("exit_debounce_ms must be non-negative")
        _raise_if_errors("stabilizer", errors)

    def warnings(self) -> List[str]:
        """Avisos no bloqueantes sobre combinaciones poco recomendables."""

        found: List[str] = []
        if self.upper_threshold - self.lower_threshold < MIN_RECOMMENDED_THRESHOLD_GAP:
            found.append("Small threshold gap may cause rapid state transitions")
        if self.exit_debounce_ms > MAX_RECOMMENDED_EXIT_DEBOUNCE_MS:
            found.append("Long exit debounce time may feel unresponsive to users")
        return found


def default_visibility_stabilizer_config() -> StabilizerConfig:
    return StabilizerConfig(
        upper_threshold=VISIBILITY_UPPER_THRESHOLD,
        lower_threshold=VISIBILITY_LOWER_THRESHOLD,
        enter_debounce_ms=0,
        exit_debounce_ms=VISIBILITY_EXIT_DEBOUNCE_MS,
    )


@dataclass(frozen=True)
class ThrottleConfig:
    """Ritmo máximo al que se aceptan frames para análisis."""

    target_fps: float = THROTTLE_TARGET_FPS

    def __post_init__(self) -> None:
        _require_numbers("throttle", self, ("target_fps",))
        errors: List[str] = []
        if not self.target_fps > 0:
            errors.append("target_fps must be greater than 0")
        _raise_if_errors("throttle", errors)

    @property
    def min_interval_ms(self) -> float:
        return 1000.0 / float(self.target_fps)


@dataclass(frozen=True)
class GovernorConfig:
    """Umbrales del gobernador que degrada la calidad de captura."""

    target_fps: float = GOVERNOR_TARGET_FPS
    min_fps: float = GOVERNOR_MIN_FPS
    max_memory_percent: float = GOVERNOR_MAX_MEMORY_PERCENT
    check_interval_ms: float = GOVERNOR_CHECK_INTERVAL_MS
    optimization_threshold: int = GOVERNOR_OPTIMIZATION_THRESHOLD
    cooldown_ms: float = GOVERNOR_COOLDOWN_MS
    enable_auto_optimization: bool = GOVERNOR_ENABLE_AUTO_OPTIMIZATION
    history_size: int = PERFORMANCE_HISTORY_SIZE
    initial_level: str = DEFAULT_QUALITY_LEVEL

    def __post_init__(self) -> None:
        _require_numbers(
            "governor",
            self,
            (
                "target_fps",
                "min_fps",
                "max_memory_percent",
                "check_interval_ms",
                "optimization_threshold",
                "cooldown_ms",
                "history_size",
            ),
        )
        if not isinstance(self.enable_auto_optimization, bool):
            _raise_if_errors("governor", ["enable_auto_optimization must be a boolean"])
        errors: List[str] = []
        if not self.target_fps > 0:
            errors.append("target_fps must be greater than 0")
        if self.min_fps < 0:
            errors.append("min_fps must be non-negative")
        if self.min_fps > self.target_fps:
            errors.append("min_fps must not exceed target_fps")
        if not (0.0 < self.max_memory_percent <= 100.0):
            errors.append("max_memory_percent must be in (0, 100]")
        if not self.check_interval_ms > 0:
            errors.append("check_interval_ms must be greater than 0")
        if int(self.optimization_threshold) < 1:
            errors.append("optimization_threshold must be at least 1")
        if self.cooldown_ms < 0:
            errors.append("cooldown_ms must be non-negative")
        if int(self.history_size) < 1:
            errors.append("history_size must be at least 1")
        if self.initial_level not in QUALITY_LEVEL_ORDER:
            errors.append(f"initial_level must be one of {', '.join(QUALITY_LEVEL_ORDER)}")
        _raise_if_errors("governor", errors)


@dataclass(frozen=True)
class DepthConfig:
    """Profundidad exigida y porcentajes que gobiernan las fases de repetición."""

    depth_threshold: float = SQUAT_DEPTH_THRESHOLD
    start_rep_threshold: float = SQUAT_START_REP_THRESHOLD
    bottom_phase_threshold: float = SQUAT_BOTTOM_PHASE_THRESHOLD
    ascending_threshold: float = SQUAT_ASCENDING_THRESHOLD
    complete_rep_threshold: float = SQUAT_COMPLETE_REP_THRESHOLD
    calibration_frames: int = SQUAT_CALIBRATION_FRAMES


@dataclass(frozen=True)
class VisibilityConfig:
    """Visibilidad mínima de los grupos clave y de la barra."""

    min_landmark_visibility: float = SQUAT_MIN_LANDMARK_VISIBILITY
    bar_position_visibility: float = SQUAT_BAR_POSITION_VISIBILITY
    reliability_threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY
    noise_floor: float = NOISE_FLOOR_THRESHOLD


@dataclass(frozen=True)
class BalanceConfig:
    """Parámetros de equilibrio lateral y detección de posición de pie."""

    max_lateral_deviation_ratio: float = SQUAT_MAX_LATERAL_DEVIATION_RATIO
    standing_position_ratio: float = SQUAT_STANDING_POSITION_RATIO


@dataclass(frozen=True)
class ValidationConfig:
    """Umbrales de calidad de cada repetición."""

    max_lateral_shift: float = SQUAT_MAX_LATERAL_SHIFT
    max_bar_path_deviation: float = SQUAT_MAX_BAR_PATH_DEVIATION
    max_valid_knee_angle: float = SQUAT_MAX_VALID_KNEE_ANGLE


@dataclass(frozen=True)
class SquatAnalysisConfig:
    """Configuración completa del análisis de sentadilla."""

    depth: DepthConfig = field(default_factory=DepthConfig)
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    balance: BalanceConfig = field(default_factory=BalanceConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    history_size: int = METRICS_HISTORY_SIZE

    def __post_init__(self) -> None:
        component = "squat analysis"
        for name, expected in (
            ("depth", DepthConfig),
            ("visibility", VisibilityConfig),
            ("balance", BalanceConfig),
            ("validation", ValidationConfig),
        ):
            _require_instance(component, self, name, expected)
            _require_numbers(component, getattr(self, name), [f.name for f in fields(expected)], prefix=f"{name}.")
        _require_numbers(component, self, ("history_size",))
        errors: List[str] = []
        depth = self.depth
        if not (0.0 < depth.depth_threshold <= 2.0):
            errors.append("depth.depth_threshold must be in (0, 2]")
        if not (
            0.0
            <= depth.start_rep_threshold
            < depth.ascending_threshold
            <= depth.bottom_phase_threshold
        ):
            errors.append(
                "depth thresholds must satisfy 0 <= start_rep < ascending <= bottom_phase"
            )
        if not (0.0 <= depth.complete_rep_threshold < depth.ascending_threshold):
            errors.append("depth.complete_rep_threshold must be below depth.ascending_threshold")
        if int(depth.calibration_frames) < 1:
            errors.append("depth.calibration_frames must be at least 1")
        for name in ("min_landmark_visibility", "bar_position_visibility", "reliability_threshold", "noise_floor"):
            _check_unit_interval(errors, f"visibility.{name}", getattr(self.visibility, name))
        if self.balance.max_lateral_deviation_ratio <= 0:
            errors.append("balance.max_lateral_deviation_ratio must be greater than 0")
        if self.balance.standing_position_ratio <= 0:
            errors.append("balance.standing_position_ratio must be greater than 0")
        if self.validation.max_lateral_shift <= 0:
            errors.append("validation.max_lateral_shift must be greater than 0")
        if self.validation.max_bar_path_deviation <= 0:
            errors.append("validation.max_bar_path_deviation must be greater than 0")
        if not (0.0 < self.validation.max_valid_knee_angle <= 180.0):
            errors.append("validation.max_valid_knee_angle must be in (0, 180]")
        if int(self.history_size) < 1:
            errors.append("history_size must be at least 1")
        _raise_if_errors(component, errors)


@dataclass(frozen=True)
class Config:
    """Configuración de alto nivel consumida por el analizador y el gobernador."""

    stabilizer: StabilizerConfig = field(default_factory=StabilizerConfig)
    visibility: StabilizerConfig = field(default_factory=default_visibility_stabilizer_config)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    governor: GovernorConfig = field(default_factory=GovernorConfig)
    squat: SquatAnalysisConfig = field(default_factory=SquatAnalysisConfig)

    def __post_init__(self) -> None:
        _require_instance("config", self, "stabilizer", StabilizerConfig)
        _require_instance("config", self, "visibility", StabilizerConfig)
        _require_instance("config", self, "throttle", ThrottleConfig)
        _require_instance("config", self, "governor", GovernorConfig)
        _require_instance("config", self, "squat", SquatAnalysisConfig)

    def copy(self) -> "Config":
        """Devuelve una copia profunda del objeto de configuración."""
        return copy.deepcopy(self)

    # --- Serialisation helpers -------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Entrega la configuración como diccionario de Python."""
        return _dataclass_to_dict(self)

    # --- Fingerprint -----------------------------------------------------------
    def fingerprint(self) -> str:
        """Calcula un hash SHA1 de los parámetros que afectan al estado estable."""
        payload = {
            "stabilizer": _dataclass_to_dict(self.stabilizer),
            "squat": _dataclass_to_dict(self.squat),
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
        return hashlib.sha1(encoded).hexdigest()


# --- Internal utilities -------------------------------------------------------

def _dataclass_to_dict(obj: Any) -> Any:
    """Convierte recursivamente ``dataclasses`` (y anidados) en diccionarios."""
    if is_dataclass(obj):
        return {f.name: _dataclass_to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_dataclass_to_dict(value) for value in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def merge_dataclass(instance: Any, updates: Dict[str, Any]) -> Any:
    """Devuelve una copia de ``instance`` con ``updates`` aplicados recursivamente.

    Las claves desconocidas se ignoran con un aviso y una sección anidada que no
    llegue como diccionario produce :class:`ConfigurationError`. Como los modelos son
    inmutables se reconstruye cada nivel con :func:`dataclasses.replace`, de modo
    que la validación de ``__post_init__`` vuelve a ejecutarse.
    """
    known = {f.name for f in fields(instance)}
    changes: Dict[str, Any] = {}
    for key, value in (updates or {}).items():
        if key not in known:
            logger.warning("Ignoring unknown configuration key %r for %s", key, type(instance).__name__)
            continue
        current = getattr(instance, key)
        if is_dataclass(current):
            if not isinstance(value, dict):
                raise ConfigurationError(
                    type(instance).__name__, [f"{key} must be a mapping, got {type(value).__name__}"]
                )
            changes[key] = merge_dataclass(current, value)
        else:
            changes[key] = value
    return replace(instance, **changes) if changes else instance


__all__ = [
    "BalanceConfig",
    "Config",
    "DepthConfig",
    "GovernorConfig",
    "SquatAnalysisConfig",
    "StabilizerConfig",
    "ThrottleConfig",
    "ValidationConfig",
    "VisibilityConfig",
    "default_visibility_stabilizer_config",
    "merge_dataclass",
]
