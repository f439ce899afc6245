"""TanStack Start output generator."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..detectors.package_manager import install_command, run_command
from ..errors import HoprError, TransformError
from ..logging import get_logger
from ..models import (
    ConfigFile,
    FileMove,
    MigrationReport,
    ProjectStructure,
    RouteDescriptor,
    TransformedOutput,
    TransformedRoute,
)
from ..package_json import extract_dev_port
from ..routing import pattern_to_route_id, pattern_to_target_path
from ..templating import render_template
from ..transformers import CodeTransformer

FRAMEWORK = "tanstack-start"


@dataclass(frozen=True)
class VersionSet:
    """Package ranges installed for one root route variant."""

    dependencies: Mapping[str, str]
    dev_dependencies: Mapping[str, str]
    tailwind: Mapping[str, str]


VERSION_SETS: Dict[str, VersionSet] = {
    "shell": VersionSet(
        dependencies={
            "@tanstack/react-router": "^1.132.0",
            "@tanstack/react-start": "^1.132.0",
            "@tanstack/nitro-v2-vite-plugin": "^1.132.31",
            "@tanstack/react-router-devtools": "^1.132.0",
            "@tanstack/react-devtools": "^0.7.0",
            "@tanstack/react-router-ssr-query": "^1.131.7",
            "@tanstack/router-plugin": "^1.132.0",
        },
        dev_dependencies={
            "vite": "^7.1.7",
            "@vitejs/plugin-react": "^5.0.4",
            "vite-tsconfig-paths": "^5.1.4",
        },
        tailwind={"@tailwindcss/vite": "^4.0.6", "tailwindcss": "^4.0.6"},
    ),
    "component": VersionSet(
        dependencies={
            "@tanstack/react-router": "latest",
            "@tanstack/react-start": "latest",
            "@tanstack/react-router-devtools": "latest",
        },
        dev_dependencies={
            "@tanstack/router-plugin": "latest",
            "@vitejs/plugin-react": "latest",
            "vite": "latest",
            "vite-tsconfig-paths": "latest",
        },
        tailwind={"@tailwindcss/vite": "latest", "tailwindcss": "latest"},
    ),
}

REMOVED_DEPENDENCIES = ("next", "@tailwindcss/postcss")

SUPERSEDED_FILES = (
    "next.config.js",
    "next.config.mjs",
    "next.config.ts",
    "next-env.d.ts",
    "postcss.config.js",
    "postcss.config.mjs",
    "postcss.config.cjs",
    ".next",
)

# Root-level directories that stay where they are when sources move under src/.
_STATIONARY_DIRS = {
    "public",
    "node_modules",
    "src",
    "dist",
    "build",
    "coverage",
}

_SCRIPT_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")


class TanStackStartGenerator:
    """Builds the complete ``TransformedOutput`` for a Next.js ``ProjectStructure``.

    Nothing here touches the filesystem; the materializer applies the result.
    """

    framework = FRAMEWORK

    def __init__(
        self,
        variant: str = "shell",
        routes_dir: str = "src/routes",
        page_strategy: str = "structural",
        backup_dir: str = ".hopr-backup",
        transformer: Optional[CodeTransformer] = None,
    ) -> None:
        if variant not in VERSION_SETS:
            raise HoprError(f"Unknown root route variant: {variant}")
        self.variant = variant
        self.routes_dir = routes_dir.replace("\\", "/").strip("/")
        self.backup_dir = backup_dir
        self.transformer = transformer or CodeTransformer(variant=variant, page_strategy_name=page_strategy)
        self.logger = get_logger("generators.tanstack")

    @property
    def src_directory(self) -> str:
        return posixpath.dirname(self.routes_dir) or "."

    @property
    def routes_directory(self) -> str:
        return posixpath.basename(self.routes_dir)

    def generate(self, structure: ProjectStructure) -> TransformedOutput:
        routes, warnings, errors = self._transform_routes(structure)
        warnings.extend(structure.diagnostics)

        directories_to_move = self._directories_to_move(structure)
        if directories_to_move:
            moved = ", ".join(move.source for move in directories_to_move)
            warnings.append(f"Moved {moved} into src/; relative imports may need review")

        leftover = [path for path in structure.extra_files if path.endswith(_SCRIPT_SUFFIXES)]
        if leftover:
            warnings.append(
                f"Non-route modules remain under {structure.app_dir}: {', '.join(leftover)}; "
                "update imports that pointed at them from moved routes"
            )
        if structure.metadata.has_middleware:
            warnings.append("middleware has no TanStack Start equivalent and was left in place")

        dependencies, dev_dependencies = self._dependencies(structure)
        port = extract_dev_port(structure.scripts.get("dev"))
        targets = {route.target_path for route in routes}
        sources = [route.source.source_path for route in routes if route.source.source_path not in targets]

        report = MigrationReport(
            total_routes=len(structure.routes),
            transformed_routes=len(routes),
            skipped_routes=len(structure.routes) - len(routes),
            warnings=tuple(warnings),
            errors=tuple(errors),
        )
        return TransformedOutput(
            framework=self.framework,
            routes=tuple(routes),
            configs=tuple(self._configs(structure, port)),
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
            remove_dependencies=REMOVED_DEPENDENCIES,
            files_to_delete=tuple(sources) + SUPERSEDED_FILES,
            report=report,
            files_to_move=tuple(self._stylesheet_moves(structure)),
            directories_to_move=tuple(directories_to_move),
            next_steps=(
                f"Run: {install_command(structure.package_manager)}",
                f"Run: {run_command(structure.package_manager, 'dev')}",
                f"Visit: http://localhost:{port}",
            ),
        )

    def _transform_routes(
        self, structure: ProjectStructure
    ) -> Tuple[List[TransformedRoute], List[str], List[str]]:
        routes: List[TransformedRoute] = []
        warnings: List[str] = []
        errors: List[str] = []
        for route in sorted(structure.routes, key=lambda item: item.discovery_index):
            reason = self.transformer.skip_reason(route)
            if reason is not None:
                warnings.append(f"Skipped {route.source_path}: {reason}")
                continue
            try:
                result = self.transformer.transform(route, pattern_to_route_id(route.pattern))
            except TransformError as exc:
                errors.append(self._failure(route, exc))
                continue
            except Exception as exc:  # pragma: no cover - defensive guard
                errors.append(self._failure(route, exc))
                continue
            if result is None:
                continue
            warnings.extend(result.warnings)
            routes.append(TransformedRoute(target_path=self.target_path(route), content=result.content, source=route))
        return routes, warnings, errors

    def _failure(self, route: RouteDescriptor, exc: Exception) -> str:
        self.logger.warning("Failed to transform %s: %s", route.source_path, exc)
        return f"Failed to transform {route.source_path}: {exc}"

    def target_path(self, route: RouteDescriptor) -> str:
        """Return where ``route`` lives under the flat routes directory."""
        javascript = route.extension in {".js", ".jsx"}
        if route.role == "layout":
            return posixpath.join(self.routes_dir, "__root.jsx" if javascript else "__root.tsx")
        if route.role == "api":
            return pattern_to_target_path(route.pattern, self.routes_dir, ".js" if javascript else ".ts")
        return pattern_to_target_path(route.pattern, self.routes_dir, ".jsx" if javascript else ".tsx")

    def _configs(self, structure: ProjectStructure, port: int) -> List[ConfigFile]:
        context = {
            "nitro": self.variant == "shell",
            "tailwind": structure.metadata.has_tailwind,
            "port": port,
            "src_directory": self.src_directory,
            "routes_directory": self.routes_directory,
        }
        configs = [
            ConfigFile("vite.config.ts", render_template("vite.config.ts.j2", **context)),
            ConfigFile(posixpath.join(self.src_directory, "router.tsx"), render_template("router.tsx.j2", **context)),
        ]
        if not structure.metadata.has_typescript:
            configs.append(ConfigFile("tsconfig.json", render_template("tsconfig.json.j2", **context)))
        return configs

    def _dependencies(self, structure: ProjectStructure) -> Tuple[Dict[str, str], Dict[str, str]]:
        versions = VERSION_SETS[self.variant]
        dependencies = dict(versions.dependencies)
        dependencies["react"] = structure.dependencies.get("react", "^19.0.0")
        dependencies["react-dom"] = structure.dependencies.get("react-dom", "^19.0.0")
        dev_dependencies = dict(versions.dev_dependencies)
        dev_dependencies["typescript"] = structure.dev_dependencies.get(
            "typescript", structure.dependencies.get("typescript", "^5.0.0")
        )
        if structure.metadata.has_tailwind:
            dev_dependencies.update(versions.tailwind)
        return dependencies, dev_dependencies

    def _stylesheet_moves(self, structure: ProjectStructure) -> List[FileMove]:
        prefix = structure.app_dir.rstrip("/") + "/"
        moves = []
        for path in structure.extra_files:
            if path.endswith(".css") and path.startswith(prefix):
                moves.append(FileMove(path, posixpath.join(self.routes_dir, path[len(prefix) :])))
        return moves

    def _directories_to_move(self, structure: ProjectStructure) -> List[FileMove]:
        if structure.use_src:
            return []
        stationary = set(_STATIONARY_DIRS)
        stationary.add(structure.app_dir.split("/", 1)[0])
        stationary.add(self.backup_dir.strip("/").split("/", 1)[0])
        stationary.add(self.routes_dir.split("/", 1)[0])
        return [
            FileMove(name, f"src/{name}")
            for name in structure.top_level_dirs
            if name not in stationary and not name.startswith(".")
        ]


__all__ = [
    "FRAMEWORK",
    "REMOVED_DEPENDENCIES",
    "SUPERSEDED_FILES",
    "TanStackStartGenerator",
    "VERSION_SETS",
    "VersionSet",
]
