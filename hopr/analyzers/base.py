"""Base classes for project analyzer plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ..models import ProjectStructure


class ProjectAnalyzer(ABC):
    """Contract for analyzers that read a source project into a ``ProjectStructure``."""

    framework: str = "unknown"

    @abstractmethod
    def analyze(self, root: Path, exclude_paths: Sequence[str] = ()) -> ProjectStructure:
        """Inspect ``root`` without modifying it and describe its routes and metadata."""
