"""Tests for framework and package manager detection."""

from __future__ import annotations

import pytest

from hopr.detectors import FrameworkDetector, discover_detectors
from hopr.detectors.package_manager import (
    detect_package_manager,
    install_command,
    run_command,
)
from tests._fixtures.project_builder import ProjectBuilder


def test_detects_nextjs_app_router(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()

    result = FrameworkDetector().detect(project_builder.path())

    assert result.framework == "nextjs"
    assert result.routing_convention == "app-router"
    assert result.layout.has_app_folder is True
    assert result.layout.has_next_config is True
    assert result.package_manager == "npm"


def test_detects_app_router_under_src(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app(src=True)

    result = FrameworkDetector().detect(project_builder.path())

    assert result.layout.has_app_folder_in_src is True
    assert result.layout.has_src_folder is True
    assert result.routing_convention == "app-router"


def test_pages_router_is_reported(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"next": "14.0.0"}})
    project_builder.write({"pages/index.tsx": "export default function Home() { return null; }\n"})

    result = FrameworkDetector().detect(project_builder.path())

    assert result.framework == "nextjs"
    assert result.routing_convention == "pages-router"
    assert result.layout.has_app_router is False


def test_unknown_project_without_package_json(project_builder: ProjectBuilder) -> None:
    result = FrameworkDetector().detect(project_builder.path())

    assert result.framework == "unknown"
    assert result.routing_convention == "unknown"


def test_malformed_package_json_is_treated_as_missing(project_builder: ProjectBuilder) -> None:
    project_builder.write({"package.json": "{not json"})

    result = FrameworkDetector().detect(project_builder.path())

    assert result.framework == "unknown"


def test_other_frameworks_detected_by_signature(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"dependencies": {"@sveltejs/kit": "^2.0.0"}})

    result = FrameworkDetector().detect(project_builder.path())

    assert result.framework == "sveltekit"


def test_discover_detectors_honours_enabled_names() -> None:
    detectors = discover_detectors(["nextjs"])
    assert [detector.name for detector in detectors] == ["nextjs"]

    with pytest.raises(ValueError):
        discover_detectors(["does-not-exist"])


@pytest.mark.parametrize(
    ("lockfile", "expected"),
    [
        ("bun.lockb", "bun"),
        ("pnpm-lock.yaml", "pnpm"),
        ("yarn.lock", "yarn"),
        ("package-lock.json", "npm"),
    ],
)
def test_package_manager_from_lockfile(project_builder: ProjectBuilder, lockfile: str, expected: str) -> None:
    project_builder.write({lockfile: ""})
    assert detect_package_manager(project_builder.path()) == expected


def test_package_manager_defaults_to_npm(project_builder: ProjectBuilder) -> None:
    assert detect_package_manager(project_builder.path()) == "npm"


def test_lockfile_priority_prefers_bun_over_npm(project_builder: ProjectBuilder) -> None:
    project_builder.write({"bun.lockb": "", "package-lock.json": "{}"})
    assert detect_package_manager(project_builder.path()) == "bun"


def test_package_manager_commands() -> None:
    assert install_command("pnpm") == "pnpm install"
    assert install_command("unknown") == "npm install"
    assert run_command("bun", "dev") == "bun run dev"
