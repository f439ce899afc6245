"""Project analyzers that turn a source tree into a ``ProjectStructure``."""

from __future__ import annotations

from .base import ProjectAnalyzer
from .nextjs import NextJsAnalyzer

__all__ = ["NextJsAnalyzer", "ProjectAnalyzer"]
