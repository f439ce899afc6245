"""Framework detector plugins and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Set

from .base import DependencySignatureDetector, Detector, read_package_json
from .nextjs import NextJsDetector, analyze_layout, uses_src_directory
from .package_manager import detect_package_manager
from ..logging import get_logger
from ..models import DetectionResult

_ENTRY_POINT_GROUP = "hopr.detectors"

_BUILTIN_FACTORIES: dict[str, Callable[[], Detector]] = {
    "nextjs": NextJsDetector,
    "tanstack-start": lambda: DependencySignatureDetector(
        "tanstack-start", "@tanstack/react-start", routing_convention="file-routes"
    ),
    "remix": lambda: DependencySignatureDetector("remix", "@remix-run/react"),
    "sveltekit": lambda: DependencySignatureDetector("sveltekit", "@sveltejs/kit"),
    "astro": lambda: DependencySignatureDetector("astro", "astro"),
    "nuxt": lambda: DependencySignatureDetector("nuxt", "nuxt"),
}


def discover_detectors(enabled: Sequence[str] | None = None) -> List[Detector]:
    """Return instantiated detectors in priority order, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    detectors: List[Detector] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Detector]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Detector):
            raise TypeError(f"Detector factory for '{name}' did not return a Detector instance")
        detectors.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load detector entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Detector:
            return _coerce_detector(obj)

        _add(entry.name, _factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown detectors requested: {', '.join(sorted(missing))}")

    return detectors


def _coerce_detector(obj: object) -> Detector:
    if isinstance(obj, Detector):
        return obj
    if isinstance(obj, type) and issubclass(obj, Detector):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Detector):
            return instance
    raise TypeError("Detector entry point must be a Detector subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        return metadata.entry_points(group=_ENTRY_POINT_GROUP)
    except Exception:  # pragma: no cover - defensive guard
        return []


class FrameworkDetector:
    """Classifies a project's framework, routing convention and package manager."""

    def __init__(self, detectors: Iterable[Detector] | None = None) -> None:
        self.detectors = list(detectors) if detectors is not None else discover_detectors()
        self.logger = get_logger("detectors")

    def detect_framework(self, root: Path) -> Detector | None:
        package_json = read_package_json(root)
        for detector in self.detectors:
            if detector.detect(root, package_json):
                self.logger.debug("Detector %s matched %s", detector.name, root)
                return detector
        return None

    def detect(self, path: str | Path) -> DetectionResult:
        root = Path(path).expanduser().resolve()
        detector = self.detect_framework(root)
        layout = analyze_layout(root)
        framework = detector.name if detector is not None else "unknown"
        if isinstance(detector, NextJsDetector):
            convention = detector.routing_convention_for(layout)
        elif detector is not None:
            convention = detector.routing_convention
        else:
            convention = "unknown"
        return DetectionResult(
            framework=framework,
            package_manager=detect_package_manager(root),
            layout=layout,
            routing_convention=convention,
            root_path=str(root),
        )


__all__ = [
    "DependencySignatureDetector",
    "Detector",
    "FrameworkDetector",
    "NextJsDetector",
    "analyze_layout",
    "detect_package_manager",
    "discover_detectors",
    "read_package_json",
    "uses_src_directory",
]
