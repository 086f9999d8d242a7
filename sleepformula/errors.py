# sleepformula/errors.py
from __future__ import annotations


class SleepFormulaError(ValueError):
    """Base error for invalid engine inputs."""


class InvalidFormat(SleepFormulaError):
    """Clock-time string is not a valid HH:mm value."""


class OutOfRange(SleepFormulaError):
    """Numeric input outside the range the engine accepts."""
