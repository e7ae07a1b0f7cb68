"""Tipos, excepciones y utilidades transversales del núcleo en tiempo real."""

from .errors import ConfigurationError, RealtimePoseError, UnknownQualityLevelError
from .events import CallbackHandle, CallbackRegistry
from .reporting import ErrorReport, ErrorReporter, LoggingErrorReporter
from .types import DetectionState, ExerciseType, PerformanceGrade, RepPhase, as_exercise

__all__ = [
    "CallbackHandle",
    "CallbackRegistry",
    "ConfigurationError",
    "DetectionState",
    "ErrorReport",
    "ErrorReporter",
    "ExerciseType",
    "LoggingErrorReporter",
    "PerformanceGrade",
    "RealtimePoseError",
    "RepPhase",
    "UnknownQualityLevelError",
    "as_exercise",
]
