"""Tests for hopr.backup."""

from __future__ import annotations

from datetime import UTC, datetime

from hopr.backup import BackupManager
from tests._fixtures.project_builder import ProjectBuilder


def _clock() -> datetime:
    return datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=UTC)


def test_create_backup_copies_sources_and_configs(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    project_builder.write(
        {
            ".env.local": "SECRET=1\n",
            "README.md": "# app\n",
            "public/logo.svg": "<svg />\n",
            "node_modules/react/index.js": "module.exports = {};\n",
            ".next/cache/data.json": "{}\n",
        }
    )
    manager = BackupManager(project_builder.path(), clock=_clock)

    destination = manager.create_backup()

    assert destination.name == "2024-05-01T12-30-45-123456+00-00"
    assert (destination / "package.json").is_file()
    assert (destination / "app/layout.tsx").is_file()
    assert (destination / "app/globals.css").is_file()
    assert (destination / ".env.local").is_file()
    assert (destination / "README.md").is_file()
    assert not (destination / "public/logo.svg").exists()
    assert not (destination / "node_modules").exists()
    assert not (destination / ".next").exists()
    assert not (destination / ".gitignore").exists()


def test_backup_skips_its_own_directory(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    manager = BackupManager(project_builder.path(), directory="backups", clock=_clock)
    first = manager.create_backup()

    later = BackupManager(
        project_builder.path(),
        directory="backups",
        clock=lambda: datetime(2024, 5, 2, tzinfo=UTC),
    )
    second = later.create_backup()

    assert not (second / "backups").exists()
    assert later.has_backups() is True
    assert later.list_backups() == sorted([first.name, second.name])


def test_rollback_instructions_name_backup_dir(project_builder: ProjectBuilder) -> None:
    manager = BackupManager(project_builder.path())

    assert manager.has_backups() is False
    assert manager.list_backups() == []
    assert any(".hopr-backup" in line for line in manager.rollback_instructions())
