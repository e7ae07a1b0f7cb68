"""Historiales de métricas, contador de repeticiones y análisis de sentadilla."""

from .analyzer import SquatPoseAnalysis, SquatPoseAnalyzer
from .history import BarPathPoint, BarPathUpdate, BoundedHistory, LateralShiftMetrics, MetricsTracker
from .rep_counter import RepCounter, RepCountingMetrics, RepCountingState, RepData
from .squat_metrics import SquatMetrics, SquatMetricsPipeline

__all__ = [
    "BarPathPoint",
    "BarPathUpdate",
    "BoundedHistory",
    "LateralShiftMetrics",
    "MetricsTracker",
    "RepCounter",
    "RepCountingMetrics",
    "RepCountingState",
    "RepData",
    "SquatMetrics",
    "SquatMetricsPipeline",
    "SquatPoseAnalysis",
    "SquatPoseAnalyzer",
]
