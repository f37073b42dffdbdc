"""
Error taxonomy of the restoration engine.

Validation errors are raised at the boundary of each public function.
Every error remembers the offending parameter so that an outer layer can
report it.
"""

from typing import Any, Optional


class RestorationError(ValueError):
    """Base class for all engine errors."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class InvalidInput(RestorationError):
    """Malformed or too short series, or an invalid parameter combination."""


class InvalidRange(RestorationError):
    """Distance range inverted, outside the series, or segments not contiguous."""


class InvalidCurvature(RestorationError):
    """Non-positive curve radius."""


class DivisionByZero(RestorationError):
    """Degenerate denominator. Only raised by calls made with ``strict=True``."""


class ProcessingCancelled(RestorationError):
    """A chunked computation was cancelled between two chunks."""
