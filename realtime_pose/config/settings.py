"""Parámetros por defecto del estabilizador, las métricas y el gobernador de rendimiento."""

from __future__ import annotations

# --- ESTABILIZADOR DE VALIDEZ DE POSE ---
# Umbral de confianza para entrar en estado válido. La entrada es inmediata
# para dar respuesta positiva al usuario en cuanto la pose es buena.
POSE_UPPER_THRESHOLD = 0.7

# Umbral por debajo del cual empieza la salida del estado válido. La banda
# entre ambos umbrales es la histéresis que evita el parpadeo.
POSE_LOWER_THRESHOLD = 0.5

# La entrada al estado válido nunca se retrasa.
POSE_ENTER_DEBOUNCE_MS = 0

# Tiempo que la confianza debe permanecer baja antes de marcar la pose inválida.
POSE_EXIT_DEBOUNCE_MS = 200

# Avisos no bloqueantes: una banda estrecha o una salida muy lenta.
MIN_RECOMMENDED_THRESHOLD_GAP = 0.1
MAX_RECOMMENDED_EXIT_DEBOUNCE_MS = 1000

# --- ESTABILIZADOR DE VISIBILIDAD POR GRUPOS ---
# Valores propios de la visibilidad de cada grupo (caderas, rodillas, ...);
# no son los de la validez de pose aunque coincidan por defecto.
VISIBILITY_UPPER_THRESHOLD = 0.7
VISIBILITY_LOWER_THRESHOLD = 0.5
VISIBILITY_EXIT_DEBOUNCE_MS = 200

# --- PRIMITIVAS GEOMÉTRICAS ---
# Visibilidad mínima de un landmark para considerarlo fiable en cálculos.
DEFAULT_LANDMARK_MIN_VISIBILITY = 0.5

# MediaPipe reporta visibilidades espurias (0.01-0.1) para puntos ausentes;
# por debajo de este suelo se tratan como 0.
NOISE_FLOOR_THRESHOLD = 0.1

# --- HISTORIALES DE MÉTRICAS ---
METRICS_HISTORY_SIZE = 30
CONFIDENCE_HISTORY_SIZE = 30

# --- SENTADILLA: PROFUNDIDAD Y FASES DE REPETICIÓN ---
# Profundidad exigida (fracción del rango de pie a paralelo).
SQUAT_DEPTH_THRESHOLD = 0.9
# Porcentajes de profundidad que gobiernan las fases del contador.
SQUAT_START_REP_THRESHOLD = 10.0
SQUAT_BOTTOM_PHASE_THRESHOLD = 80.0
SQUAT_ASCENDING_THRESHOLD = 70.0
SQUAT_COMPLETE_REP_THRESHOLD = 20.0

# Fotogramas de pie que se promedian para calibrar la línea base.
SQUAT_CALIBRATION_FRAMES = 10
# Línea base usada mientras no hay calibración (coordenadas normalizadas).
SQUAT_DEFAULT_STANDING_HIP_Y = 0.5
SQUAT_DEFAULT_STANDING_KNEE_Y = 0.7

# --- SENTADILLA: VISIBILIDAD, EQUILIBRIO Y VALIDACIÓN ---
SQUAT_MIN_LANDMARK_VISIBILITY = 0.7
SQUAT_BAR_POSITION_VISIBILITY = 0.7
# Desviación lateral máxima como fracción del ancho de cadera.
SQUAT_MAX_LATERAL_DEVIATION_RATIO = 0.05
# Relación cadera/rodilla por debajo de la cual se considera que el sujeto está de pie.
SQUAT_STANDING_POSITION_RATIO = 0.8
SQUAT_MAX_LATERAL_SHIFT = 0.15
SQUAT_MAX_BAR_PATH_DEVIATION = 0.2
# Un ángulo medio de rodilla por debajo de este valor indica posición de sentadilla.
SQUAT_MAX_VALID_KNEE_ANGLE = 140.0

# --- LIMITADOR DE FRAMES ---
# 30 FPS deja un presupuesto de ~33 ms por frame.
THROTTLE_TARGET_FPS = 30.0

# --- GOBERNADOR DE CALIDAD ---
GOVERNOR_TARGET_FPS = 30.0
GOVERNOR_MIN_FPS = 24.0
GOVERNOR_MAX_MEMORY_PERCENT = 80.0
GOVERNOR_CHECK_INTERVAL_MS = 1000
# Muestras pobres consecutivas necesarias para bajar un nivel.
GOVERNOR_OPTIMIZATION_THRESHOLD = 3
# Espera mínima entre dos bajadas automáticas.
GOVERNOR_COOLDOWN_MS = 5000
GOVERNOR_ENABLE_AUTO_OPTIMIZATION = True

# --- MONITOR DE RENDIMIENTO ---
# Un frame cuenta como caída si su FPS instantáneo queda por debajo de este
# factor del objetivo.
FRAME_DROP_FACTOR = 0.8
# Número de muestras recientes usadas para estimar el tiempo de procesado.
PROCESSING_TIME_WINDOW = 10
GRADE_EXCELLENT_MIN_FPS = 28.0
GRADE_EXCELLENT_MAX_MEMORY = 60.0
GRADE_GOOD_MIN_FPS = 24.0
GRADE_GOOD_MAX_MEMORY = 75.0
GRADE_FAIR_MIN_FPS = 20.0
GRADE_FAIR_MAX_MEMORY = 85.0
