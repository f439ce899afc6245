"""Target framework generators."""

from __future__ import annotations

from .tanstack import TanStackStartGenerator

GENERATORS = {TanStackStartGenerator.framework: TanStackStartGenerator}

__all__ = ["GENERATORS", "TanStackStartGenerator"]
