"""Domain-specific exceptions for the realtime pose core."""

from __future__ import annotations

from typing import Iterable


class RealtimePoseError(Exception):
    """Base exception for fatal failures of the realtime core."""


class ConfigurationError(RealtimePoseError, ValueError):
    """Raised when a component is constructed with an invalid configuration."""

    def __init__(self, component: str, errors: Iterable[str]) -> None:
        self.component = component
        self.errors = list(errors)
        super().__init__(f"Invalid {component} configuration: {', '.join(self.errors)}")


class UnknownQualityLevelError(RealtimePoseError, KeyError):
    """Raised when a quality level identifier is not part of the ladder."""
