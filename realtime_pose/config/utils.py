"""Utilidades para cargar configuraciones por defecto o desde archivos YAML.

Los valores del YAML se mezclan sobre los de :class:`Config`; como los modelos
son inmutables, el resultado es un objeto nuevo que vuelve a validarse."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml

from realtime_pose.core.errors import ConfigurationError

from .models import Config, merge_dataclass

logger = logging.getLogger(__name__)


def load_default() -> Config:
    """Obtener la configuración por defecto del núcleo en tiempo real."""
    return Config()


def from_yaml(path: Union[str, Path]) -> Config:
    """Cargar una configuración desde un YAML y mezclarla con los valores base."""
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError("yaml", [f"{path} is not valid YAML: {exc}"]) from exc
    if not isinstance(data, dict):
        raise ConfigurationError("yaml", [f"{path} must contain a mapping at the top level"])
    cfg = merge_dataclass(load_default(), data)
    log_warnings(cfg)
    return cfg


def log_warnings(cfg: Config) -> None:
    """Registrar los avisos no bloqueantes de los estabilizadores."""
    for name in ("stabilizer", "visibility"):
        for message in getattr(cfg, name).warnings():
            logger.warning("%s config: %s", name, message)
