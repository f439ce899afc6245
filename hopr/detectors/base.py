"""Base classes for framework detector plugins."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping

from ..logging import get_logger

_logger = get_logger("detectors")


class Detector(ABC):
    """Contract for detectors that recognise a framework from project signals."""

    name: str = "unknown"
    routing_convention: str = "unknown"

    @abstractmethod
    def detect(self, root: Path, package_json: Mapping[str, Any]) -> bool:
        """Return True when the project at ``root`` uses this framework."""


class DependencySignatureDetector(Detector):
    """Recognises a framework by a signature package in package.json."""

    def __init__(self, name: str, package: str, routing_convention: str = "unknown") -> None:
        self.name = name
        self.package = package
        self.routing_convention = routing_convention

    def detect(self, root: Path, package_json: Mapping[str, Any]) -> bool:
        return self.package in declared_dependencies(package_json)


def read_package_json(root: Path) -> Dict[str, Any]:
    """Load package.json, returning an empty mapping when missing or unreadable."""
    path = root / "package.json"
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        _logger.debug("Ignoring unreadable %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def declared_dependencies(package_json: Mapping[str, Any]) -> Dict[str, str]:
    """Merge dependencies and devDependencies into one name -> range mapping."""
    merged: Dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        section = package_json.get(key)
        if isinstance(section, dict):
            merged.update({str(name): str(version) for name, version in section.items()})
    return merged


__all__ = [
    "DependencySignatureDetector",
    "Detector",
    "declared_dependencies",
    "read_package_json",
]
