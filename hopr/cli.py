"""CLI entrypoints for hopr commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import PAGE_STRATEGIES, TARGET_FRAMEWORKS, TARGET_VARIANTS
from .detectors import FrameworkDetector
from .errors import DetectionError, MigrationValidationError
from .logging import configure_logging
from .orchestrator import MigrationOptions, Migrator


def _add_output_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a debug log of the run to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hopr",
        description="Migrate Next.js App Router projects to TanStack Start.",
    )
    _add_output_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser(
        "migrate",
        help="Rewrite a project in place for the target framework.",
    )
    _add_output_options(migrate_parser, suppress_default=True)
    migrate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    migrate_parser.add_argument(
        "--from",
        dest="source",
        default=None,
        help="Framework the project is expected to use (defaults to detection).",
    )
    migrate_parser.add_argument(
        "--to",
        dest="target",
        choices=TARGET_FRAMEWORKS,
        default=TARGET_FRAMEWORKS[0],
        help="Framework to migrate to.",
    )
    migrate_parser.add_argument(
        "--variant",
        choices=TARGET_VARIANTS,
        default=None,
        help="Root route flavour: a document shell or a plain component.",
    )
    migrate_parser.add_argument(
        "--page-strategy",
        choices=PAGE_STRATEGIES,
        default=None,
        help="How page modules are rewritten.",
    )
    migrate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show planned file operations without writing anything.",
    )
    migrate_parser.add_argument(
        "--diff",
        action="store_true",
        help="Print unified diffs of rewritten files.",
    )
    migrate_parser.add_argument(
        "--no-backup",
        dest="backup",
        action="store_false",
        default=None,
        help="Skip the pre-migration backup.",
    )
    migrate_parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Omit install and run hints from the report.",
    )
    migrate_parser.add_argument(
        "--require-routes",
        action="store_true",
        help="Abort when no route files are found.",
    )
    migrate_parser.add_argument(
        "-y",
        "--yes",
        dest="assume_yes",
        action="store_true",
        help="Do not ask for confirmation.",
    )

    detect_parser = subparsers.add_parser(
        "detect",
        help="Report the framework, routing convention and package manager of a project.",
    )
    _add_output_options(detect_parser, suppress_default=True)
    detect_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for hopr commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    if args.command == "migrate":
        migrator = Migrator()
        options = MigrationOptions(
            source=args.source,
            target=args.target,
            variant=args.variant,
            page_strategy=args.page_strategy,
            dry_run=bool(args.dry_run),
            show_diff=bool(args.diff),
            backup=args.backup,
            skip_install=bool(args.skip_install),
            require_routes=bool(args.require_routes),
            assume_yes=bool(args.assume_yes),
        )
        try:
            result = migrator.run(args.path, options)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (DetectionError, MigrationValidationError) as exc:
            parser.exit(1, f"hopr migrate failed: {exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"hopr migrate failed: {exc}\nRun with --verbose for more details.\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"hopr migrate failed: {exc}\nRun with --verbose for more details.\n")
        for diff in result.diffs:
            print(diff, end="")
        for line in migrator.render_report(result):
            print(line)
        if result.structure is None or not result.success or result.dry_run:
            return
        root = _relativize(Path(result.structure.root_dir))
        if result.materialization is not None and not result.materialization.ok:
            print(f"Migrated {root} with {len(result.materialization.failures)} failed file operations")
        else:
            print(f"Migrated {root}")
    elif args.command == "detect":
        try:
            detection = FrameworkDetector().detect(args.path)
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"hopr detect failed: {exc}\n")
        layout = detection.layout
        print(f"Framework: {detection.framework}")
        print(f"Routing: {detection.routing_convention}")
        print(f"Package manager: {detection.package_manager}")
        print(f"Path: {_relativize(Path(detection.root_path))}")
        print(f"src/ folder: {_yes_no(layout.has_src_folder)}")
        print(f"app/ folder: {_yes_no(layout.has_app_folder or layout.has_app_folder_in_src)}")
        print(f"pages/ folder: {_yes_no(layout.has_pages_folder)}")
        print(f"next.config: {_yes_no(layout.has_next_config)}")
        print(f"vite.config: {_yes_no(layout.has_vite_config)}")
        if detection.framework == "nextjs" and layout.has_app_router:
            print(f"Ready to migrate: hopr migrate {args.path} --to tanstack-start")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
