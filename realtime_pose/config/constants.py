"""Constantes globales del núcleo: nombre, modelo de landmarks y escalera de calidad."""
from pathlib import Path

# --- CONFIGURACIÓN GENERAL ---
APP_NAME = "FIT CONTROL realtime"

# --- RUTAS DE ARCHIVOS ---
# NOTA: usamos ``parents[2]`` porque este archivo vive en ``realtime_pose/config/``.
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "data" / "replays"

# --- MODELO DE LANDMARKS ---
# El proveedor externo entrega siempre 33 puntos en el orden de MediaPipe.
LANDMARK_COUNT = 33

# Visibilidad que asumimos cuando el proveedor no informa el campo.
MISSING_VISIBILITY = 0.0

# --- ESCALERA DE CALIDAD ---
# Orden descendente: el gobernador solo recorre la lista hacia el final.
QUALITY_LEVEL_ORDER = ("ultra", "high", "medium", "low", "minimal")
DEFAULT_QUALITY_LEVEL = "medium"

# Historiales acotados.
PERFORMANCE_HISTORY_SIZE = 60
ERROR_HISTORY_SIZE = 100
