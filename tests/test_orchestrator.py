"""Tests for hopr.orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from hopr.errors import DetectionError, MigrationValidationError
from hopr.orchestrator import MigrationOptions, Migrator
from tests._fixtures.project_builder import ProjectBuilder


class RecordingConfirm:
    """Test double that records the summary it was shown."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.calls: list[list[str]] = []

    def __call__(self, summary: Sequence[str]) -> bool:
        self.calls.append(list(summary))
        return self.answer


def _snapshot(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_dry_run_reports_plan_without_writing(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    root = project_builder.path()
    before = _snapshot(root)
    confirm = RecordingConfirm(answer=False)

    result = Migrator(confirm=confirm).run(root, MigrationOptions(dry_run=True, show_diff=True))

    assert result.success is True
    assert result.dry_run is True
    assert result.materialization is None
    assert result.backup_path is None
    assert confirm.calls == []
    assert "+ src/routes/index.tsx" in result.plan
    assert any("+++ b/src/routes/index.tsx" in diff for diff in result.diffs)
    assert any("+++ b/package.json" in diff for diff in result.diffs)
    assert _snapshot(root) == before


def test_full_run_migrates_project(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    project_builder.write({"pnpm-lock.yaml": ""})
    root = project_builder.path()

    result = Migrator().run(root, MigrationOptions(assume_yes=True))

    assert result.success is True
    assert result.output is not None
    assert result.output.report.transformed_routes == 4
    assert result.materialization is not None and result.materialization.ok
    assert result.backup_path is not None
    assert (result.backup_path / "app/page.tsx").is_file()
    assert (root / "src/routes/__root.tsx").is_file()
    assert not (root / "app").exists()
    assert result.next_steps == ["Run: pnpm install", "Run: pnpm run dev", "Visit: http://localhost:4000"]

    report = Migrator().render_report(result)
    assert report[0] == "Routes: 4 found, 4 transformed, 0 skipped"
    assert any(line.startswith("Backup: ") for line in report)


def test_declined_confirmation_cancels(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    root = project_builder.path()
    before = _snapshot(root)
    confirm = RecordingConfirm(answer=False)

    result = Migrator(confirm=confirm).run(root, MigrationOptions())

    assert result.success is False
    assert result.cancelled is True
    assert len(confirm.calls) == 1
    assert "Routes found: 4" in confirm.calls[0]
    assert _snapshot(root) == before
    assert Migrator().render_report(result) == ["Migration cancelled; no files were changed."]


def test_cli_options_override_config(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    project_builder.write({".hopr.yml": "backup:\n  enabled: false\ntarget:\n  variant: shell\n"})
    root = project_builder.path()

    result = Migrator().run(root, MigrationOptions(assume_yes=True, variant="component", skip_install=True))

    assert result.backup_path is None
    assert not (root / ".hopr-backup").exists()
    assert result.next_steps == []
    assert "<Outlet />" in (root / "src/routes/__root.tsx").read_text(encoding="utf-8")


def test_unknown_project_raises_detection_error(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"express": "^4.0.0"}})

    with pytest.raises(DetectionError):
        Migrator().run(project_builder.path(), MigrationOptions(assume_yes=True))


def test_source_mismatch_raises_detection_error(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()

    with pytest.raises(DetectionError, match="remix"):
        Migrator().run(project_builder.path(), MigrationOptions(source="remix", assume_yes=True))


def test_pages_router_fails_validation(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"next": "14.0.0"}})
    project_builder.write({"pages/index.tsx": "export default function Home() { return null; }\n"})

    with pytest.raises(MigrationValidationError) as excinfo:
        Migrator().run(project_builder.path(), MigrationOptions(assume_yes=True))

    assert any("App Router" in reason for reason in excinfo.value.reasons)


def test_zero_routes_only_fail_when_required(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"next": "15.0.0"}})
    project_builder.write({"app/globals.css": "body {}\n"})
    root = project_builder.path()

    with pytest.raises(MigrationValidationError):
        Migrator().run(root, MigrationOptions(dry_run=True, require_routes=True))

    result = Migrator().run(root, MigrationOptions(dry_run=True))
    assert result.success is True
    assert result.output is not None
    assert result.output.report.total_routes == 0
    assert result.output.routes == ()


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Migrator().run(tmp_path / "missing", MigrationOptions())


def test_validate_lists_every_reason(project_builder: ProjectBuilder) -> None:
    migrator = Migrator()
    detection = migrator.detector.detect(project_builder.path())

    reasons = migrator.validate(detection)

    assert len(reasons) == 3


def test_report_includes_rollback_steps_after_failures(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    root = project_builder.path()
    migrator = Migrator()
    result = migrator.run(root, MigrationOptions(assume_yes=True))
    assert result.materialization is not None
    result.materialization.failures.append("Failed to update package.json: boom")

    report = migrator.render_report(result)

    assert "error: Failed to update package.json: boom" in report
    assert "To roll back the migration:" in report
