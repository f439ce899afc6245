"""Next.js detection and directory-layout checks."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .base import Detector, declared_dependencies
from ..models import DirectoryLayout

_NEXT_CONFIG_FILES = ("next.config.js", "next.config.mjs", "next.config.ts")
_VITE_CONFIG_FILES = ("vite.config.js", "vite.config.mjs", "vite.config.ts")


class NextJsDetector(Detector):
    """Recognises Next.js projects by their ``next`` dependency."""

    name = "nextjs"
    routing_convention = "app-router"

    def detect(self, root: Path, package_json: Mapping[str, Any]) -> bool:
        if not (root / "package.json").exists():
            return False
        return "next" in declared_dependencies(package_json)

    def routing_convention_for(self, layout: DirectoryLayout) -> str:
        if layout.has_app_router:
            return "app-router"
        if layout.has_pages_folder:
            return "pages-router"
        return "unknown"


def analyze_layout(root: Path) -> DirectoryLayout:
    """Run the existence checks that describe a project's directory layout."""
    return DirectoryLayout(
        has_src_folder=(root / "src").is_dir(),
        has_app_folder=(root / "app").is_dir(),
        has_app_folder_in_src=(root / "src" / "app").is_dir(),
        has_pages_folder=(root / "pages").is_dir() or (root / "src" / "pages").is_dir(),
        has_next_config=any((root / name).exists() for name in _NEXT_CONFIG_FILES),
        has_vite_config=any((root / name).exists() for name in _VITE_CONFIG_FILES),
        package_json_path=str(root / "package.json"),
    )


def uses_src_directory(root: Path) -> bool:
    """Return True when routes live under ``src/app``."""
    return (root / "src" / "app").is_dir()


__all__ = ["NextJsDetector", "analyze_layout", "uses_src_directory"]
