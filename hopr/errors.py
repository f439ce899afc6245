"""Exception hierarchy shared by the migration pipeline."""

from __future__ import annotations

from typing import Iterable, List


class HoprError(RuntimeError):
    """Base class for failures raised by hopr components."""


class DetectionError(HoprError):
    """Raised when the source framework is unknown or the requested pair is unsupported."""


class MigrationValidationError(HoprError):
    """Raised when structural prerequisites for a migration are missing."""

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons: List[str] = list(reasons)
        summary = "; ".join(self.reasons) if self.reasons else "unknown reason"
        super().__init__(f"Migration validation failed: {summary}")


class TransformError(HoprError):
    """Raised when a single route file cannot be rewritten."""


__all__ = [
    "DetectionError",
    "HoprError",
    "MigrationValidationError",
    "TransformError",
]
