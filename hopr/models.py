"""Core data models shared across hopr components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

UNSUPPORTED_ROLES = frozenset({"error", "loading", "not-found"})


@dataclass
class DirectoryLayout:
    """Existence checks the detector runs against a project root."""

    has_src_folder: bool = False
    has_app_folder: bool = False
    has_app_folder_in_src: bool = False
    has_pages_folder: bool = False
    has_next_config: bool = False
    has_vite_config: bool = False
    package_json_path: str = "package.json"

    @property
    def has_app_router(self) -> bool:
        return self.has_app_folder or self.has_app_folder_in_src


@dataclass
class DetectionResult:
    """Framework, routing convention and package manager of a project."""

    framework: str
    package_manager: str
    layout: DirectoryLayout
    routing_convention: str
    root_path: str


@dataclass(frozen=True)
class RouteDescriptor:
    """One discovered route source file."""

    source_path: str
    pattern: str
    role: str
    params: Tuple[str, ...] = ()
    is_catch_all: bool = False
    content: str = ""
    discovery_index: int = 0

    @property
    def is_root(self) -> bool:
        return self.pattern == "/"

    @property
    def extension(self) -> str:
        _, dot, suffix = self.source_path.rpartition(".")
        return f".{suffix}" if dot else ""


@dataclass(frozen=True)
class TransformedRoute:
    """Rewritten route file ready to be written under the target convention."""

    target_path: str
    content: str
    source: RouteDescriptor = field(compare=False, repr=False)


@dataclass
class ProjectMetadata:
    """Feature flags detected while analysing a project."""

    has_tailwind: bool = False
    has_typescript: bool = False
    has_middleware: bool = False


@dataclass
class ProjectStructure:
    """Normalized view of the project the analyzer hands to the generator."""

    root_dir: str
    framework: str
    use_src: bool
    app_dir: str
    routes: List[RouteDescriptor] = field(default_factory=list)
    public_dir: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    scripts: Dict[str, str] = field(default_factory=dict)
    package_manager: str = "npm"
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)
    extra_files: List[str] = field(default_factory=list)
    top_level_dirs: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConfigFile:
    """Generated configuration file (path relative to the project root)."""

    path: str
    content: str


@dataclass(frozen=True)
class FileMove:
    """A file or directory relocation, both paths relative to the project root."""

    source: str
    target: str


@dataclass(frozen=True)
class MigrationReport:
    """Route counts plus the warnings and errors accumulated while transforming."""

    total_routes: int
    transformed_routes: int
    skipped_routes: int
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TransformedOutput:
    """Everything the materializer needs to rewrite a project."""

    framework: str
    routes: Tuple[TransformedRoute, ...]
    configs: Tuple[ConfigFile, ...]
    dependencies: Dict[str, str]
    dev_dependencies: Dict[str, str]
    remove_dependencies: Tuple[str, ...]
    files_to_delete: Tuple[str, ...]
    report: MigrationReport
    files_to_move: Tuple[FileMove, ...] = ()
    directories_to_move: Tuple[FileMove, ...] = ()
    next_steps: Tuple[str, ...] = ()
