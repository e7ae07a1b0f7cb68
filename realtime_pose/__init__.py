"""Núcleo en tiempo real de FIT CONTROL: estabilización, geometría y gobierno del rendimiento."""

__version__ = "0.1.0"
