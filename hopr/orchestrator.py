"""Pipeline orchestration for the migrate flow."""

from __future__ import annotations

import difflib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .analyzers import NextJsAnalyzer
from .backup import BackupManager
from .config import HoprConfig, load_config
from .detectors import FrameworkDetector
from .errors import DetectionError, MigrationValidationError
from .generators import GENERATORS, TanStackStartGenerator
from .logging import get_logger
from .materializer import MaterializationSummary, Materializer
from .models import DetectionResult, ProjectStructure, TransformedOutput
from .package_json import transform_manifest

SUPPORTED_PAIRS = {("nextjs", "tanstack-start")}

ConfirmCallback = Callable[[Sequence[str]], bool]


@dataclass
class MigrationOptions:
    """Per-run switches; ``None`` values fall back to ``.hopr.yml``."""

    source: Optional[str] = None
    target: str = "tanstack-start"
    variant: Optional[str] = None
    page_strategy: Optional[str] = None
    dry_run: bool = False
    show_diff: bool = False
    backup: Optional[bool] = None
    skip_install: bool = False
    require_routes: bool = False
    assume_yes: bool = False


@dataclass
class MigrationResult:
    """Outcome of a migrate run."""

    success: bool
    cancelled: bool = False
    dry_run: bool = False
    detection: Optional[DetectionResult] = None
    structure: Optional[ProjectStructure] = None
    output: Optional[TransformedOutput] = None
    materialization: Optional[MaterializationSummary] = None
    plan: List[str] = field(default_factory=list)
    diffs: List[str] = field(default_factory=list)
    backup_path: Optional[Path] = None
    next_steps: List[str] = field(default_factory=list)


def prompt_confirmation(summary: Sequence[str]) -> bool:
    """Print the migration summary and ask the user to proceed."""
    for line in summary:
        print(line)
    try:
        answer = input("Proceed with the migration? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


class Migrator:
    """Runs detect, validate, analyze, confirm, backup, transform, materialize and report."""

    def __init__(
        self,
        detector: FrameworkDetector | None = None,
        analyzer: NextJsAnalyzer | None = None,
        confirm: ConfirmCallback | None = None,
        generator_factory: Callable[[HoprConfig], TanStackStartGenerator] | None = None,
        materializer_factory: Callable[[Path], Materializer] | None = None,
        backup_factory: Callable[[Path, str], BackupManager] | None = None,
        config_loader: Callable[[Path], HoprConfig] | None = None,
    ) -> None:
        self.detector = detector or FrameworkDetector()
        self.analyzer = analyzer or NextJsAnalyzer()
        self.confirm = confirm or prompt_confirmation
        self.generator_factory = generator_factory or _default_generator
        self.materializer_factory = materializer_factory or Materializer
        self.backup_factory = backup_factory or BackupManager
        self.config_loader = config_loader or load_config
        self.logger = get_logger("orchestrator")

    def run(self, path: str | Path, options: MigrationOptions | None = None) -> MigrationResult:
        options = options or MigrationOptions()
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Project directory not found: {root}")

        config = self.config_loader(root).with_overrides(
            variant=options.variant,
            page_strategy=options.page_strategy,
            target_framework=options.target,
            backup_enabled=options.backup,
        )

        detection = self.detector.detect(root)
        self._check_pair(detection, options.source, config.target.framework)
        reasons = self.validate(detection)
        if reasons:
            raise MigrationValidationError(reasons)

        structure = self.analyzer.analyze(
            root,
            exclude_paths=config.transform.exclude_paths,
            use_src=detection.layout.has_app_folder_in_src,
        )
        self.logger.info("Found %d route files under %s", len(structure.routes), structure.app_dir)
        if not structure.routes and options.require_routes:
            raise MigrationValidationError([f"No route files found under {structure.app_dir}"])

        if not (options.assume_yes or options.dry_run):
            if not self.confirm(self.summary(detection, structure, config)):
                self.logger.info("Migration cancelled")
                return MigrationResult(success=False, cancelled=True, detection=detection, structure=structure)

        backup_path: Optional[Path] = None
        if config.backup.enabled and not options.dry_run:
            backup_path = self.backup_factory(root, config.backup.directory).create_backup()

        output = self.generator_factory(config).generate(structure)
        materializer = self.materializer_factory(root)
        plan = materializer.plan(output)
        diffs = self._diffs(root, output) if options.show_diff else []

        materialization: Optional[MaterializationSummary] = None
        if options.dry_run:
            self.logger.info("Dry run: %d file operations planned, nothing written", len(plan))
        else:
            materialization = materializer.apply(output)

        result = MigrationResult(
            success=True,
            dry_run=options.dry_run,
            detection=detection,
            structure=structure,
            output=output,
            materialization=materialization,
            plan=plan,
            diffs=diffs,
            backup_path=backup_path,
            next_steps=[] if options.skip_install or options.dry_run else list(output.next_steps),
        )
        for line in self.render_report(result):
            self.logger.debug(line)
        return result

    def _check_pair(self, detection: DetectionResult, source: Optional[str], target: str) -> None:
        if detection.framework == "unknown":
            raise DetectionError(f"Could not detect a supported framework in {detection.root_path}")
        if source is not None and source != detection.framework:
            raise DetectionError(f"Expected a {source} project but detected {detection.framework}")
        if (detection.framework, target) not in SUPPORTED_PAIRS or target not in GENERATORS:
            raise DetectionError(f"Migration from {detection.framework} to {target} is not supported")

    def validate(self, detection: DetectionResult) -> List[str]:
        """Return the prerequisite violations for ``detection``; empty when it can migrate."""
        reasons: List[str] = []
        if detection.framework != "nextjs":
            reasons.append("Project is not a Next.js application")
        if not detection.layout.has_app_router:
            reasons.append("Project does not use the Next.js App Router; only the App Router is supported")
        if not Path(detection.layout.package_json_path).exists():
            reasons.append("package.json not found")
        return reasons

    def summary(self, detection: DetectionResult, structure: ProjectStructure, config: HoprConfig) -> List[str]:
        return [
            f"Framework: Next.js → TanStack Start ({config.target.variant} variant)",
            f"Package manager: {detection.package_manager}",
            f"Project path: {detection.root_path}",
            f"Has src/ folder: {'yes' if detection.layout.has_src_folder else 'no'}",
            f"Routes found: {len(structure.routes)}",
            "",
            "The following changes will be made:",
            "  - Remove Next.js dependencies",
            "  - Add TanStack Start and Vite",
            f"  - Move routes from {structure.app_dir}/ to {config.target.routes_dir}/",
            "  - Rewrite route modules for TanStack Router",
            "  - Generate configuration files",
            "  - Update package.json scripts",
        ]

    def render_report(self, result: MigrationResult) -> List[str]:
        """Human readable report lines for a finished run."""
        if result.cancelled:
            return ["Migration cancelled; no files were changed."]
        lines: List[str] = []
        if result.output is not None:
            report = result.output.report
            lines.append(
                f"Routes: {report.total_routes} found, {report.transformed_routes} transformed, "
                f"{report.skipped_routes} skipped"
            )
            lines.extend(f"warning: {warning}" for warning in report.warnings)
            lines.extend(f"error: {error}" for error in report.errors)
        if result.dry_run:
            lines.append("Planned changes (dry run):")
            lines.extend(f"  {line}" for line in result.plan)
        elif result.materialization is not None:
            summary = result.materialization
            lines.append(
                f"Files: {len(summary.created)} created, {len(summary.modified)} modified, "
                f"{len(summary.moved)} moved, {len(summary.deleted)} deleted"
            )
            lines.extend(f"error: {failure}" for failure in summary.failures)
        if result.backup_path is not None:
            lines.append(f"Backup: {result.backup_path}")
            if result.materialization is not None and not result.materialization.ok:
                backups = result.backup_path.parent
                lines.extend(self.backup_factory(backups.parent, backups.name).rollback_instructions())
        if result.next_steps:
            lines.append("Next steps:")
            lines.extend(f"  {step}" for step in result.next_steps)
        return lines

    def _diffs(self, root: Path, output: TransformedOutput) -> List[str]:
        diffs: List[str] = []
        for route in output.routes:
            diffs.append(_unified(route.source.content, route.content, route.source.source_path, route.target_path))
        for config in output.configs:
            existing = root / config.path
            original = existing.read_text(encoding="utf-8") if existing.is_file() else ""
            diffs.append(_unified(original, config.content, config.path, config.path))
        manifest_path = root / "package.json"
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.debug("Skipping package.json diff: %s", exc)
        else:
            if isinstance(manifest, dict):
                updated = transform_manifest(manifest, output)
                diffs.append(
                    _unified(
                        json.dumps(manifest, indent=2) + "\n",
                        json.dumps(updated, indent=2) + "\n",
                        "package.json",
                        "package.json",
                    )
                )
        return [diff for diff in diffs if diff]


def _unified(original: str, updated: str, source: str, target: str) -> str:
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        updated.splitlines(keepends=True),
        fromfile=f"a/{source}",
        tofile=f"b/{target}",
    )
    return "".join(diff)


def _default_generator(config: HoprConfig) -> TanStackStartGenerator:
    generator_cls = GENERATORS[config.target.framework]
    return generator_cls(
        variant=config.target.variant,
        routes_dir=config.target.routes_dir,
        page_strategy=config.transform.page_strategy,
        backup_dir=config.backup.directory,
    )


__all__ = [
    "MigrationOptions",
    "MigrationResult",
    "Migrator",
    "SUPPORTED_PAIRS",
    "prompt_confirmation",
]
