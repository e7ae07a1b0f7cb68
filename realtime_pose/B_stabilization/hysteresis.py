"""Estabilizador genérico con histéresis y *debounce* temporal.

Convierte una señal de confianza ruidosa en un estado binario estable. Usa dos
umbrales (entrar con ``upper``, salir por debajo de ``lower``) y exige que la
condición de cambio se mantenga durante el tiempo de *debounce* antes de
confirmarlo. Mientras dura una transición se sigue entregando la última salida
producida en estado estable, de modo que la interfaz no oscila hacia el ruido.

El tipo de entrada y el de salida son genéricos; una
:class:`StabilizationStrategy` sabe extraer la confianza, construir la salida
y proporcionar el valor inicial.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Generic, Optional, TypeVar

from realtime_pose.config.models import StabilizerConfig

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


@dataclass
class TransitionState:
    """Estado interno: ``on``/``off`` y, si procede, inicio de la transición en curso."""

    is_on: bool = False
    transition_start_ms: Optional[float] = None
    last_update_ms: Optional[float] = None

    @property
    def is_transitioning(self) -> bool:
        return self.transition_start_ms is not None


@dataclass(frozen=True)
class StabilizationResult(Generic[InputT, OutputT]):
    """Resultado de una actualización.

    ``accepted`` es ``False`` cuando la marca temporal retrocedía y la llamada
    no modificó el estado.
    """

    input: InputT
    output: OutputT
    is_on: bool
    is_transitioning: bool
    confidence: float
    accepted: bool = True


class StabilizationStrategy(ABC, Generic[InputT, OutputT]):
    """Operaciones específicas de la señal que se estabiliza."""

    @abstractmethod
    def get_confidence(self, value: InputT) -> float:
        """Confianza 0-1 asociada a ``value``."""

    @abstractmethod
    def create_output(self, value: InputT, state: TransitionState) -> OutputT:
        """Salida correspondiente a ``value`` en un estado estable."""

    @abstractmethod
    def initial_value(self) -> OutputT:
        """Salida antes de la primera actualización y tras ``reset``."""


class ScalarStrategy(StabilizationStrategy[float, float]):
    """Estrategia para señales que ya son un escalar de confianza."""

    def get_confidence(self, value: float) -> float:
        return float(value)

    def create_output(self, value: float, state: TransitionState) -> float:
        return float(value)

    def initial_value(self) -> float:
        return 0.0


class HysteresisStabilizer(Generic[InputT, OutputT]):
    """Máquina de estados off / entering / on / exiting con dos umbrales."""

    def __init__(self, config: StabilizerConfig, strategy: StabilizationStrategy[InputT, OutputT]) -> None:
        if not isinstance(config, StabilizerConfig):
            raise TypeError("config must be a StabilizerConfig instance")
        self.config = config
        self.strategy = strategy
        self._state = TransitionState()
        self._last_output: OutputT = strategy.initial_value()

    @property
    def is_on(self) -> bool:
        return self._state.is_on

    @property
    def last_output(self) -> OutputT:
        return self._last_output

    def update(self, value: InputT, timestamp_ms: float) -> StabilizationResult[InputT, OutputT]:
        """Incorporar una muestra y devolver la salida estabilizada."""

        state = self._state
        confidence = float(self.strategy.get_confidence(value))

        if state.last_update_ms is not None and timestamp_ms < state.last_update_ms:
            logger.debug(
                "Ignoring out-of-order sample at %.1f ms (last accepted %.1f ms)",
                timestamp_ms,
                state.last_update_ms,
            )
            return self._result(value, confidence, state.is_transitioning, accepted=False)

        state.last_update_ms = timestamp_ms
        if state.is_on:
            desired_on = confidence >= self.config.lower_threshold
        else:
            desired_on = confidence >= self.config.upper_threshold

        if desired_on == state.is_on:
            # Sin cambio deseado: cualquier transición pendiente se cancela al instante.
            state.transition_start_ms = None
            self._last_output = self.strategy.create_output(value, state)
            return self._result(value, confidence, False)

        if state.transition_start_ms is None:
            state.transition_start_ms = timestamp_ms

        debounce = self.config.enter_debounce_ms if desired_on else self.config.exit_debounce_ms
        if timestamp_ms - state.transition_start_ms >= debounce:
            state.is_on = desired_on
            state.transition_start_ms = None
            self._last_output = self.strategy.create_output(value, state)
            logger.debug("Stabilizer switched %s at %.1f ms", "on" if desired_on else "off", timestamp_ms)
            return self._result(value, confidence, False)

        return self._result(value, confidence, True)

    def reset(self) -> None:
        """Volver a ``off`` con el valor inicial de la estrategia."""

        self._state = TransitionState()
        self._last_output = self.strategy.initial_value()

    def state(self) -> TransitionState:
        """Copia del estado interno, para diagnóstico."""

        return replace(self._state)

    def _result(
        self, value: InputT, confidence: float, is_transitioning: bool, *, accepted: bool = True
    ) -> StabilizationResult[InputT, OutputT]:
        return StabilizationResult(
            input=value,
            output=self._last_output,
            is_on=self._state.is_on,
            is_transitioning=is_transitioning,
            confidence=confidence,
            accepted=accepted,
        )


__all__ = [
    "HysteresisStabilizer",
    "ScalarStrategy",
    "StabilizationResult",
    "StabilizationStrategy",
    "TransitionState",
]
