"""Registro de *callbacks* con *handles* opacos y aislamiento de fallos."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from .reporting import ErrorReporter, LoggingErrorReporter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CallbackHandle:
    """Identificador opaco devuelto al suscribirse."""

    channel: str
    token: int


class CallbackRegistry(Generic[T]):
    """Notifica a los suscriptores de un canal sin propagar sus excepciones.

    Cada *callback* se ejecuta dentro de su propio ``try``: un suscriptor que
    falla se reporta al ``ErrorReporter`` y el resto sigue recibiendo el evento.
    """

    def __init__(self, channel: str, error_reporter: Optional[ErrorReporter] = None) -> None:
        self.channel = channel
        self._error_reporter = error_reporter or LoggingErrorReporter()
        self._callbacks: Dict[int, Callable[[T], None]] = {}
        self._tokens = itertools.count(1)

    def subscribe(self, callback: Callable[[T], None]) -> CallbackHandle:
        handle = CallbackHandle(self.channel, next(self._tokens))
        self._callbacks[handle.token] = callback
        return handle

    def unsubscribe(self, handle: CallbackHandle) -> bool:
        """Eliminar el *callback* asociado; devuelve ``False`` si ya no existía."""

        if handle.channel != self.channel:
            return False
        return self._callbacks.pop(handle.token, None) is not None

    def notify(self, payload: T) -> int:
        """Entregar ``payload`` a todos los suscriptores y devolver cuántos fallaron."""

        failures = 0
        for token, callback in list(self._callbacks.items()):
            try:
                callback(payload)
            except Exception as exc:
                failures += 1
                self._error_reporter.report_error(
                    f"Error in {self.channel} callback: {exc}",
                    severity="medium",
                    context={"channel": self.channel, "token": token},
                    exc=exc,
                )
        return failures

    def clear(self) -> None:
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)


__all__ = ["CallbackHandle", "CallbackRegistry"]
