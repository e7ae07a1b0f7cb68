"""Limitador de frames, monitor de rendimiento y gobernador de calidad."""

from .governor import OptimizationResult, QualityGovernor, StreamPerformanceMetrics
from .monitor import PerformanceMonitor, PerformanceSample, grade_performance
from .quality import QUALITY_LADDER, CameraConfig, QualityLevel, get_quality_level, next_lower
from .throttle import FrameThrottle

__all__ = [
    "CameraConfig",
    "FrameThrottle",
    "OptimizationResult",
    "PerformanceMonitor",
    "PerformanceSample",
    "QUALITY_LADDER",
    "QualityGovernor",
    "QualityLevel",
    "StreamPerformanceMetrics",
    "get_quality_level",
    "grade_performance",
    "next_lower",
]
