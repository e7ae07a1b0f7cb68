"""Command-line replay of recorded landmark streams through the realtime core."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from realtime_pose import config
from realtime_pose.A_pose.types import Landmark, as_landmark
from realtime_pose.C_analysis.analyzer import SquatPoseAnalyzer
from realtime_pose.config.constants import DEFAULT_OUTPUT_DIR
from realtime_pose.core.errors import RealtimePoseError
from realtime_pose.D_performance.governor import QualityGovernor
from realtime_pose.D_performance.monitor import PerformanceMonitor

LOGGER = logging.getLogger(__name__)

RecordedFrame = Tuple[float, Optional[List[Optional[Landmark]]]]


@dataclass
class ReplayReport:
    metrics: pd.DataFrame
    repetitions: int
    final_quality: str
    config_sha1: str


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} no es un número válido") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser mayor que 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reproduce una secuencia de landmarks grabada a través del núcleo en tiempo real.",
    )
    parser.add_argument("--input", required=True, help="Archivo JSON (lista) o JSONL con un fotograma por línea")
    parser.add_argument(
        "--output_dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Carpeta donde guardar el CSV de métricas (por defecto data/replays).",
    )
    parser.add_argument("--config", default=None, help="YAML opcional que sobrescribe la configuración por defecto.")
    parser.add_argument(
        "--target_fps",
        type=_positive_float,
        default=None,
        help="FPS máximo del limitador de frames. Si se omite se usa la configuración.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Muestra mensajes de log detallados durante la ejecución.",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


def _parse_frame(record: Any, position: int) -> RecordedFrame:
    if not isinstance(record, dict):
        raise ValueError(f"frame {position} must be an object")
    timestamp = record.get("timestamp_ms", record.get("timestamp"))
    if timestamp is None:
        raise ValueError(f"frame {position} has no timestamp_ms")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise ValueError(f"frame {position} timestamp_ms must be a number")
    landmarks = record.get("landmarks")
    if landmarks is not None and not isinstance(landmarks, list):
        raise ValueError(f"frame {position} landmarks must be a list or null")
    if landmarks is None:
        return float(timestamp), None
    try:
        converted = [as_landmark(lm) for lm in landmarks]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"frame {position} has invalid landmarks: {exc}") from exc
    return float(timestamp), converted


def load_frames(path: Path) -> List[RecordedFrame]:
    """Leer fotogramas ``{"timestamp_ms": ..., "landmarks": [...] | null}``."""

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".jsonl":
        records = [json.loads(line) for line in text.splitlines() if line.strip()]
    else:
        records = json.loads(text)
        if isinstance(records, dict):
            records = records.get("frames", [])
    return [_parse_frame(record, idx) for idx, record in enumerate(records)]


def replay(frames: Iterable[RecordedFrame], cfg: config.Config) -> ReplayReport:
    """Pasar cada fotograma por el analizador y el gobernador de calidad."""

    monitor = PerformanceMonitor(cfg.governor.target_fps)
    analyzer = SquatPoseAnalyzer(cfg, monitor=monitor)
    governor = QualityGovernor(cfg.governor, monitor=monitor)

    rows = []
    for timestamp_ms, landmarks in frames:
        analysis = analyzer.analyze(landmarks, timestamp_ms)
        governor.tick(timestamp_ms)
        row = {
            "timestamp_ms": timestamp_ms,
            "throttled": analysis.throttled,
            "detection_state": analysis.detection_state.value,
            "is_valid": analysis.is_valid,
            "confidence": analysis.confidence,
            "processing_time_ms": analysis.processing_time_ms,
            "quality_level": governor.current_quality_level.level,
        }
        row.update(analysis.metrics.to_row())
        rows.append(row)

    reps = analyzer.pipeline.rep_counter.rep_count
    return ReplayReport(
        metrics=pd.DataFrame(rows),
        repetitions=reps,
        final_quality=governor.current_quality_level.level,
        config_sha1=cfg.fingerprint(),
    )


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    input_path = Path(args.input).expanduser()
    if not input_path.is_file():
        parser.error(f"No se encontró el archivo de entrada: {input_path}")

    try:
        cfg = config.from_yaml(args.config) if args.config else config.load_default()
        if args.target_fps is not None:
            cfg = config.merge_dataclass(cfg, {"throttle": {"target_fps": float(args.target_fps)}})
        frames = load_frames(input_path)
    except (OSError, ValueError, RealtimePoseError) as exc:
        LOGGER.error("No se pudo preparar la reproducción: %s", exc)
        return 2

    report = replay(frames, cfg)

    output_dir = Path(args.output_dir).expanduser()
    output_dir.mkdir(parents=True, exist_ok=True)
    metrics_path = output_dir / f"{input_path.stem}_metrics.csv"
    report.metrics.to_csv(metrics_path, index=False)

    print(f"Repeticiones válidas: {report.repetitions}")
    print(f"Calidad final: {report.final_quality}")
    print(f"CSV de métricas: {metrics_path}")
    print(f"CONFIG_SHA1: {report.config_sha1}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
