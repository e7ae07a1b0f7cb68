"""Colaborador de observabilidad que recibe los errores aislados del bucle de frames."""

from __future__ import annotations

import itertools
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

SEVERITIES = ("low", "medium", "high", "critical")

_SEVERITY_LEVELS = {
    "low": logging.INFO,
    "medium": logging.WARNING,
    "high": logging.ERROR,
    "critical": logging.CRITICAL,
}


@dataclass(frozen=True)
class ErrorReport:
    """Registro inmutable de un error reportado."""

    id: str
    message: str
    severity: str
    timestamp: float
    context: Mapping[str, Any] = field(default_factory=dict)
    exception_type: Optional[str] = None


class ErrorReporter(Protocol):
    """Interfaz mínima que deben cumplir los colaboradores de reporte de errores."""

    def report_error(
        self,
        message: str,
        *,
        severity: str = "medium",
        context: Optional[Mapping[str, Any]] = None,
        exc: Optional[BaseException] = None,
    ) -> str:
        ...


class LoggingErrorReporter:
    """Reporter por defecto: registra en ``logging`` y conserva un historial acotado."""

    def __init__(self, max_history: int = 100) -> None:
        self._reports: Deque[ErrorReport] = deque(maxlen=max(1, int(max_history)))
        self._ids = itertools.count(1)

    def report_error(
        self,
        message: str,
        *,
        severity: str = "medium",
        context: Optional[Mapping[str, Any]] = None,
        exc: Optional[BaseException] = None,
    ) -> str:
        if severity not in SEVERITIES:
            severity = "medium"
        report = ErrorReport(
            id=f"err-{next(self._ids)}",
            message=message,
            severity=severity,
            timestamp=time.time(),
            context=dict(context or {}),
            exception_type=type(exc).__name__ if exc is not None else None,
        )
        self._reports.append(report)
        logger.log(
            _SEVERITY_LEVELS[severity],
            "%s (%s)",
            message,
            report.id,
            exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
        )
        return report.id

    @property
    def reports(self) -> List[ErrorReport]:
        return list(self._reports)

    def summary(self) -> Dict[str, int]:
        """Conteo de errores por severidad."""

        counts = {severity: 0 for severity in SEVERITIES}
        for report in self._reports:
            counts[report.severity] += 1
        return counts

    def clear(self) -> None:
        self._reports.clear()


__all__ = ["ErrorReport", "ErrorReporter", "LoggingErrorReporter", "SEVERITIES"]
