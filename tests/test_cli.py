"""CLI parser and entrypoint tests."""

from __future__ import annotations

import pytest

from hopr.cli import _build_parser, main
from tests._fixtures.project_builder import ProjectBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "migrate"])
    assert args.verbose is True
    assert args.command == "migrate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["detect", "--verbose"])
    assert args.verbose is True
    assert args.command == "detect"


def test_cli_migrate_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        [
            "migrate",
            "./app",
            "--from",
            "nextjs",
            "--to",
            "tanstack-start",
            "--variant",
            "component",
            "--page-strategy",
            "regex",
            "--dry-run",
            "--diff",
            "--no-backup",
            "--skip-install",
            "--require-routes",
            "-y",
        ]
    )
    assert args.path == "./app"
    assert args.source == "nextjs"
    assert args.target == "tanstack-start"
    assert args.variant == "component"
    assert args.page_strategy == "regex"
    assert args.dry_run is True
    assert args.diff is True
    assert args.backup is False
    assert args.skip_install is True
    assert args.require_routes is True
    assert args.assume_yes is True


def test_cli_backup_defaults_to_config() -> None:
    args = _build_parser().parse_args(["migrate"])
    assert args.backup is None
    assert args.variant is None


def test_cli_output_options() -> None:
    args = _build_parser().parse_args(["migrate", "-q", "--log-file", "run.log"])
    assert args.quiet is True
    assert args.verbose is False
    assert str(args.log_file) == "run.log"
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["detect", "-v", "-q"])


def test_cli_rejects_unknown_target() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["migrate", "--to", "remix"])


def test_main_dry_run_prints_plan(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    project_builder.nextjs_app()

    main(["migrate", str(project_builder.path()), "--dry-run"])

    out = capsys.readouterr().out
    assert "Routes: 4 found, 4 transformed, 0 skipped" in out
    assert "Planned changes (dry run):" in out
    assert "+ src/routes/__root.tsx" in out
    assert not (project_builder.path() / "src").exists()


def test_main_migrate_failure_exits_with_error(
    project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    project_builder.write_json("package.json", {"dependencies": {"next": "14.0.0"}})

    with pytest.raises(SystemExit) as excinfo:
        main(["migrate", str(project_builder.path()), "-y"])

    assert excinfo.value.code == 1
    assert "App Router" in capsys.readouterr().err


def test_main_detect_reports_project(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    project_builder.nextjs_app()

    main(["detect", str(project_builder.path())])

    out = capsys.readouterr().out
    assert "Framework: nextjs" in out
    assert "Routing: app-router" in out
    assert "Package manager: npm" in out
    assert "hopr migrate" in out


def test_main_migrate_reports_file_failures_without_failing(
    project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    project_builder.nextjs_app()
    (project_builder.path() / "tsconfig.json").write_text("{ not json", encoding="utf-8")

    main(["migrate", str(project_builder.path()), "--yes", "--no-backup"])

    out = capsys.readouterr().out
    assert "Routes: 4 found, 4 transformed, 0 skipped" in out
    assert "error: Failed to update tsconfig.json" in out
    assert "with 1 failed file operations" in out
    assert (project_builder.path() / "src" / "routes" / "__root.tsx").exists()
