"""Next.js App Router project analyzer."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .base import ProjectAnalyzer
from ..detectors.base import read_package_json
from ..detectors.nextjs import uses_src_directory
from ..detectors.package_manager import detect_package_manager
from ..logging import get_logger
from ..models import ProjectMetadata, ProjectStructure, RouteDescriptor
from ..routing import extract_params

_SCRIPT_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")

# Outer discovery order; each role is collected across the whole tree before the next.
_ROLE_FILES: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("page", "page", _SCRIPT_SUFFIXES),
    ("layout", "layout", _SCRIPT_SUFFIXES),
    ("error", "error", _SCRIPT_SUFFIXES),
    ("loading", "loading", _SCRIPT_SUFFIXES),
    ("not-found", "not-found", _SCRIPT_SUFFIXES),
    ("api", "route", (".ts", ".js")),
)

_SKIPPED_DIRS = {"node_modules", ".next", ".git"}

_MIDDLEWARE_FILES = ("middleware.ts", "middleware.js")


class NextJsAnalyzer(ProjectAnalyzer):
    """Discovers App Router route files and the project facts the generator needs."""

    framework = "nextjs"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.nextjs")

    def analyze(
        self,
        root: Path,
        exclude_paths: Sequence[str] = (),
        use_src: Optional[bool] = None,
    ) -> ProjectStructure:
        root = Path(root).resolve()
        if use_src is None:
            use_src = uses_src_directory(root)
        app_dir = "src/app" if use_src else "app"

        package_json = read_package_json(root)
        dependencies = _string_map(package_json.get("dependencies"))
        dev_dependencies = _string_map(package_json.get("devDependencies"))

        files = self._walk(root, root / app_dir, exclude_paths)
        routes, extra_files, diagnostics = self._collect_routes(root, app_dir, files)

        metadata = ProjectMetadata(
            has_tailwind="tailwindcss" in dependencies or "tailwindcss" in dev_dependencies,
            has_typescript=(root / "tsconfig.json").exists(),
            has_middleware=any(
                (base / name).exists() for base in (root, root / "src") for name in _MIDDLEWARE_FILES
            ),
        )

        structure = ProjectStructure(
            root_dir=str(root),
            framework=self.framework,
            use_src=use_src,
            app_dir=app_dir,
            routes=routes,
            public_dir="public" if (root / "public").is_dir() else None,
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
            scripts=_string_map(package_json.get("scripts")),
            package_manager=detect_package_manager(root),
            metadata=metadata,
            extra_files=extra_files,
            top_level_dirs=sorted(entry.name for entry in root.iterdir() if entry.is_dir()),
            diagnostics=diagnostics,
        )
        self.logger.debug(
            "Analyzed %s: %d routes, %d extra files under %s",
            root,
            len(routes),
            len(extra_files),
            app_dir,
        )
        return structure

    def _walk(self, root: Path, app_root: Path, exclude_paths: Sequence[str]) -> List[str]:
        if not app_root.is_dir():
            return []
        collected: List[str] = []
        for current, dirnames, filenames in os.walk(app_root):
            current_path = Path(current)
            kept_dirs = []
            for dirname in sorted(dirnames):
                if dirname in _SKIPPED_DIRS:
                    continue
                rel_dir = (current_path / dirname).relative_to(root).as_posix()
                if _is_excluded(rel_dir, exclude_paths):
                    self.logger.debug("Skipping excluded directory %s", rel_dir)
                    continue
                kept_dirs.append(dirname)
            dirnames[:] = kept_dirs
            for filename in sorted(filenames):
                rel_path = (current_path / filename).relative_to(root).as_posix()
                if _is_excluded(rel_path, exclude_paths):
                    self.logger.debug("Skipping excluded file %s", rel_path)
                    continue
                collected.append(rel_path)
        return collected

    def _collect_routes(
        self, root: Path, app_dir: str, files: Sequence[str]
    ) -> Tuple[List[RouteDescriptor], List[str], List[str]]:
        routes: List[RouteDescriptor] = []
        diagnostics: List[str] = []
        claimed: set[str] = set()

        for role, stem, suffixes in _ROLE_FILES:
            for rel_path in files:
                name = rel_path.rsplit("/", 1)[-1]
                base, dot, suffix = name.rpartition(".")
                if not dot or base != stem or f".{suffix}" not in suffixes:
                    continue
                claimed.add(rel_path)
                try:
                    content = (root / rel_path).read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    message = f"Skipped unreadable route file {rel_path}: {exc}"
                    self.logger.warning(message)
                    diagnostics.append(message)
                    continue
                pattern = _route_pattern(app_dir, rel_path)
                params, is_catch_all = extract_params(pattern)
                routes.append(
                    RouteDescriptor(
                        source_path=rel_path,
                        pattern=pattern,
                        role=role,
                        params=params,
                        is_catch_all=is_catch_all,
                        content=content,
                        discovery_index=len(routes),
                    )
                )

        extra_files = [rel_path for rel_path in files if rel_path not in claimed]
        return routes, extra_files, diagnostics


def _route_pattern(app_dir: str, rel_path: str) -> str:
    directory = rel_path.rsplit("/", 1)[0] if "/" in rel_path else ""
    prefix = app_dir.rstrip("/")
    if directory == prefix:
        return "/"
    return "/" + directory[len(prefix) + 1 :]


def _is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for raw in patterns:
        pattern = raw.strip().lstrip("/")
        if not pattern:
            continue
        directory = pattern.rstrip("/")
        if fnmatchcase(rel_path, pattern) or rel_path == directory or rel_path.startswith(f"{directory}/"):
            return True
        if "/" not in directory and any(fnmatchcase(part, directory) for part in rel_path.split("/")):
            return True
    return False


def _string_map(value: object) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(name): str(version) for name, version in value.items()}


__all__ = ["NextJsAnalyzer"]
