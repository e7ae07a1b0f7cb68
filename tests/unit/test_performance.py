"""Pruebas del limitador de frames, el monitor y el gobernador de calidad."""

from __future__ import annotations

import pytest

from realtime_pose.config.models import GovernorConfig, ThrottleConfig
from realtime_pose.core.errors import ConfigurationError, UnknownQualityLevelError
from realtime_pose.core.reporting import LoggingErrorReporter
from realtime_pose.core.types import PerformanceGrade
from realtime_pose.D_performance.governor import QualityGovernor
from realtime_pose.D_performance.monitor import PerformanceMonitor, PerformanceSample, grade_performance
from realtime_pose.D_performance.quality import CameraConfig, get_quality_level, next_lower
from realtime_pose.D_performance.throttle import FrameThrottle

POOR = PerformanceSample(fps=10.0, avg_fps=10.0, memory_usage_percent=40.0)
GOOD = PerformanceSample(fps=30.0, avg_fps=30.0, memory_usage_percent=40.0)


# --- Limitador ---------------------------------------------------------------------
def test_throttle_accepts_first_frame_and_enforces_interval() -> None:
    throttle = FrameThrottle(ThrottleConfig(target_fps=10))
    assert throttle.min_interval_ms == pytest.approx(100.0)
    assert throttle.should_process(0)
    assert not throttle.should_process(50)
    assert throttle.should_process(100)
    assert (throttle.accepted, throttle.rejected) == (2, 1)
    throttle.reset()
    assert throttle.should_process(0)


# --- Monitor -----------------------------------------------------------------------
def test_monitor_derives_fps_and_frame_drops() -> None:
    monitor = PerformanceMonitor(30.0)
    assert monitor.record_frame(0) is None
    assert monitor.record_frame(50) == pytest.approx(20.0)
    assert monitor.record_frame(50) is None
    assert monitor.record_frame(75) == pytest.approx(40.0)

    assert monitor.frame_drops == 1
    assert monitor.average_fps == pytest.approx(30.0)
    assert monitor.current_sample(75).timestamp_ms == 75


def test_memory_provider_failure_keeps_last_reading() -> None:
    readings = iter([55.0])

    def provider() -> float:
        return next(readings)

    reporter = LoggingErrorReporter()
    monitor = PerformanceMonitor(30.0, memory_provider=provider, error_reporter=reporter)
    assert monitor.memory_usage_percent() == 55.0
    assert monitor.memory_usage_percent() == 55.0
    assert len(reporter.reports) == 1
    assert reporter.reports[0].exception_type == "StopIteration"


@pytest.mark.parametrize(
    "fps, memory, grade",
    [
        (30.0, 50.0, PerformanceGrade.EXCELLENT),
        (25.0, 70.0, PerformanceGrade.GOOD),
        (21.0, 80.0, PerformanceGrade.FAIR),
        (10.0, 10.0, PerformanceGrade.POOR),
        (30.0, 90.0, PerformanceGrade.POOR),
    ],
)
def test_grade_performance(fps, memory, grade) -> None:
    assert grade_performance(fps, memory) is grade


# --- Escalera de calidad -----------------------------------------------------------
def test_quality_ladder_lookup() -> None:
    assert get_quality_level("medium").resolution == (960, 540)
    assert next_lower("medium").level == "low"
    assert next_lower("minimal") is None
    with pytest.raises(UnknownQualityLevelError):
        get_quality_level("cinema")


# --- Gobernador --------------------------------------------------------------------
def test_three_poor_samples_downgrade_exactly_one_level() -> None:
    governor = QualityGovernor()
    results = [governor.check_performance(POOR, ts) for ts in (0, 1000, 2000)]

    assert results[:2] == [None, None]
    assert results[2].applied
    assert results[2].previous_level.level == "medium"
    assert results[2].new_level.level == "low"
    assert results[2].reason == "Low FPS: 10.0 (target: 30), Low average FPS: 10.0 (target: 30)"
    assert governor.current_quality_level.level == "low"
    assert governor.consecutive_poor_samples == 0
    assert governor.last_optimization_ms == 2000


def test_cooldown_blocks_second_downgrade() -> None:
    governor = QualityGovernor()
    for ts in (0, 1000, 2000):
        governor.check_performance(POOR, ts)

    for ts in (3000, 4000, 5000, 6000):
        assert governor.check_performance(POOR, ts) is None
    assert governor.current_quality_level.level == "low"

    result = governor.check_performance(POOR, 7000)
    assert result.new_level.level == "minimal"


def test_good_sample_resets_poor_counter() -> None:
    governor = QualityGovernor()
    governor.check_performance(POOR, 0)
    governor.check_performance(POOR, 1000)
    governor.check_performance(GOOD, 2000)
    assert governor.check_performance(POOR, 3000) is None
    assert governor.consecutive_poor_samples == 1
    assert governor.current_quality_level.level == "medium"


def test_lowest_level_is_a_floor() -> None:
    governor = QualityGovernor(GovernorConfig(initial_level="minimal", cooldown_ms=0))
    for ts in range(0, 6000, 1000):
        assert governor.check_performance(POOR, ts) is None
    assert governor.current_quality_level.level == "minimal"


def test_high_memory_is_poor_even_with_good_fps() -> None:
    governor = QualityGovernor(GovernorConfig(optimization_threshold=1))
    sample = PerformanceSample(fps=30.0, avg_fps=30.0, memory_usage_percent=90.0)
    result = governor.check_performance(sample, 0)
    assert result.reason == "High memory usage: 90% (max: 80%)"


def test_auto_optimization_can_be_disabled() -> None:
    governor = QualityGovernor(GovernorConfig(enable_auto_optimization=False))
    for ts in (0, 1000, 2000, 3000):
        assert governor.check_performance(POOR, ts) is None
    assert governor.current_quality_level.level == "medium"


def test_manual_level_moves_in_any_direction() -> None:
    governor = QualityGovernor()
    seen = []
    governor.on_optimization(seen.append)

    assert governor.set_quality_level("ultra", now_ms=10)
    assert governor.current_quality_level.level == "ultra"
    assert seen[0].reason == "Manual quality adjustment"
    assert seen[0].previous_level.level == "medium"
    assert not governor.set_quality_level("cinema")
    assert governor.current_quality_level.level == "ultra"


def test_failing_callback_does_not_block_others() -> None:
    reporter = LoggingErrorReporter()
    governor = QualityGovernor(GovernorConfig(optimization_threshold=1), error_reporter=reporter)
    received = []

    def broken(_result) -> None:
        raise RuntimeError("boom")

    governor.on_optimization(broken)
    handle = governor.on_optimization(received.append)
    governor.check_performance(POOR, 0)

    assert len(received) == 1
    assert len(reporter.reports) == 1
    assert "boom" in reporter.reports[0].message

    assert governor.unsubscribe(handle)
    assert not governor.unsubscribe(handle)


def test_performance_callbacks_receive_every_check() -> None:
    governor = QualityGovernor()
    updates = []
    governor.on_performance_update(updates.append)
    governor.check_performance(GOOD, 0)
    governor.check_performance(POOR, 1000)

    assert len(updates) == 2
    assert updates[0].grade is PerformanceGrade.EXCELLENT
    assert updates[1].grade is PerformanceGrade.POOR
    assert updates[1].resolution == (960, 540)


def test_history_frame_and_processing_time() -> None:
    governor = QualityGovernor()
    governor.check_performance(PerformanceSample(20.0, 20.0, 40.0, timestamp_ms=0), 0)
    governor.check_performance(PerformanceSample(25.0, 22.5, 40.0, timestamp_ms=1000), 1000)

    frame = governor.history_frame()
    assert list(frame.columns) == ["fps", "avg_fps", "memory_usage_percent", "frame_drops", "timestamp_ms"]
    assert len(frame) == 2
    assert frame["fps"].tolist() == [20.0, 25.0]
    assert governor.processing_time_ms() == pytest.approx(1000.0 / 22.5)


def test_empty_history_frame_keeps_columns() -> None:
    frame = QualityGovernor().history_frame()
    assert frame.empty
    assert "fps" in frame.columns


def test_tick_respects_check_interval() -> None:
    monitor = PerformanceMonitor(30.0)
    governor = QualityGovernor(monitor=monitor)
    monitor.record_frame(0)
    monitor.record_frame(33)

    governor.tick(0)
    assert governor.tick(500) is None
    governor.tick(1000)
    assert len(governor.performance_history()) == 2


def test_update_settings_and_camera_config() -> None:
    governor = QualityGovernor()
    governor.update_settings(min_fps=5.0)
    assert governor.check_performance(POOR, 0) is None
    assert governor.consecutive_poor_samples == 0

    with pytest.raises(ConfigurationError):
        governor.update_settings(max_fps=60)
    with pytest.raises(ConfigurationError):
        governor.update_settings(min_fps=50.0)

    governor.set_quality_level("low")
    camera = governor.optimal_camera_config(CameraConfig(facing_mode="environment"))
    assert (camera.width, camera.height, camera.frame_rate) == (640, 360, 30)
    assert camera.facing_mode == "environment"


def test_reset_keeps_quality_level() -> None:
    governor = QualityGovernor(GovernorConfig(optimization_threshold=1))
    governor.check_performance(POOR, 0)
    governor.reset()
    assert governor.current_quality_level.level == "low"
    assert governor.performance_history() == []
    assert governor.last_optimization_ms is None
    assert len(governor.available_quality_levels()) == 5
