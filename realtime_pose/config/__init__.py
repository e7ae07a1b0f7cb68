"""Reexportaciones para poder escribir ``from realtime_pose import config``."""

from __future__ import annotations

# Dataclasses principales de configuración --------------------------------------
from .models import (
    BalanceConfig,
    Config,
    DepthConfig,
    GovernorConfig,
    SquatAnalysisConfig,
    StabilizerConfig,
    ThrottleConfig,
    ValidationConfig,
    VisibilityConfig,
    default_visibility_stabilizer_config,
    merge_dataclass,
)

# Funciones auxiliares de carga --------------------------------------------------
from .utils import from_yaml, load_default, log_warnings

# Constantes compartidas ---------------------------------------------------------
from .constants import APP_NAME, DEFAULT_QUALITY_LEVEL, LANDMARK_COUNT, PROJECT_ROOT, QUALITY_LEVEL_ORDER

__all__ = [
    # Models
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

    # Utilities
    "from_yaml",
    "load_default",
    "log_warnings",

    # Constants
    "APP_NAME",
    "DEFAULT_QUALITY_LEVEL",
    "LANDMARK_COUNT",
    "PROJECT_ROOT",
    "QUALITY_LEVEL_ORDER",
]
