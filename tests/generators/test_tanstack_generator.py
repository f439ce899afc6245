"""Tests for the TanStack Start generator."""

from __future__ import annotations

import textwrap

from hopr.generators import TanStackStartGenerator
from hopr.generators.tanstack import SUPERSEDED_FILES
from hopr.models import ProjectStructure, RouteDescriptor
from tests._fixtures.project_builder import ProjectBuilder


def _output_by_target(output):
    return {route.target_path: route for route in output.routes}


def test_generate_maps_routes_to_flat_files(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    structure = project_builder.analyze()

    output = TanStackStartGenerator().generate(structure)

    routes = _output_by_target(output)
    assert set(routes) == {
        "src/routes/__root.tsx",
        "src/routes/index.tsx",
        "src/routes/blog/$slug.tsx",
        "src/routes/api/hello.ts",
    }
    assert 'createFileRoute("/blog/$slug")' in routes["src/routes/blog/$slug.tsx"].content
    assert output.report.total_routes == 4
    assert output.report.transformed_routes == 4
    assert output.report.skipped_routes == 0
    assert output.report.errors == ()


def test_generate_plans_deletions_and_moves(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    project_builder.write({"components/Nav.tsx": "export const Nav = () => null;\n"})
    structure = project_builder.analyze()

    output = TanStackStartGenerator().generate(structure)

    assert "app/page.tsx" in output.files_to_delete
    assert "app/layout.tsx" in output.files_to_delete
    for superseded in SUPERSEDED_FILES:
        assert superseded in output.files_to_delete
    assert [(move.source, move.target) for move in output.files_to_move] == [
        ("app/globals.css", "src/routes/globals.css")
    ]
    assert [(move.source, move.target) for move in output.directories_to_move] == [
        ("components", "src/components")
    ]
    assert any("components" in warning and "src/" in warning for warning in output.report.warnings)


def test_src_projects_do_not_move_directories(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app(src=True)
    project_builder.write({"components/Nav.tsx": "export const Nav = () => null;\n"})
    structure = project_builder.analyze()

    output = TanStackStartGenerator().generate(structure)

    assert output.directories_to_move == ()
    assert [(move.source, move.target) for move in output.files_to_move] == [
        ("src/app/globals.css", "src/routes/globals.css")
    ]


def test_generate_dependencies_and_configs(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    structure = project_builder.analyze()

    output = TanStackStartGenerator().generate(structure)

    assert output.dependencies["@tanstack/react-start"] == "^1.132.0"
    assert output.dependencies["react"] == "^19.0.0"
    assert output.dev_dependencies["vite"] == "^7.1.7"
    assert output.dev_dependencies["typescript"] == "^5.6.0"
    assert "@tailwindcss/vite" in output.dev_dependencies
    assert output.remove_dependencies == ("next", "@tailwindcss/postcss")

    configs = {config.path: config.content for config in output.configs}
    assert set(configs) == {"vite.config.ts", "src/router.tsx"}
    vite = configs["vite.config.ts"]
    assert "port: 4000," in vite
    assert "nitroV2Plugin()," in vite
    assert "tailwindcss()," in vite
    assert 'routesDirectory: "routes",' in vite
    assert 'srcDirectory: "src",' in vite
    assert "getRouter" in configs["src/router.tsx"]
    assert output.next_steps == ("Run: npm install", "Run: npm run dev", "Visit: http://localhost:4000")


def test_component_variant_uses_latest_versions_without_nitro(project_builder: ProjectBuilder) -> None:
    project_builder.nextjs_app()
    structure = project_builder.analyze()

    output = TanStackStartGenerator(variant="component").generate(structure)

    assert output.dependencies["@tanstack/react-start"] == "latest"
    vite = next(config.content for config in output.configs if config.path == "vite.config.ts")
    assert "nitro" not in vite


def test_javascript_project_gets_tsconfig() -> None:
    structure = ProjectStructure(
        root_dir="/tmp/project",
        framework="nextjs",
        use_src=False,
        app_dir="app",
        routes=[
            RouteDescriptor(
                source_path="app/page.jsx",
                pattern="/",
                role="page",
                content="export default function Home() {\n  return <p>Hi</p>;\n}\n",
            )
        ],
    )

    output = TanStackStartGenerator().generate(structure)

    assert [route.target_path for route in output.routes] == ["src/routes/index.jsx"]
    assert "tsconfig.json" in {config.path for config in output.configs}


def test_skips_and_failures_are_reported_per_route() -> None:
    broken = RouteDescriptor(
        source_path="app/broken/page.tsx",
        pattern="/broken",
        role="page",
        content="export default function ( {\n",
        discovery_index=0,
    )
    good = RouteDescriptor(
        source_path="app/page.tsx",
        pattern="/",
        role="page",
        content=textwrap.dedent(
            """
            export default function Home() {
              return <p>Home</p>;
            }
            """
        ).lstrip("\n"),
        discovery_index=1,
    )
    loading = RouteDescriptor(
        source_path="app/loading.tsx",
        pattern="/",
        role="loading",
        content="export default function Loading() { return null; }\n",
        discovery_index=2,
    )
    structure = ProjectStructure(
        root_dir="/tmp/project",
        framework="nextjs",
        use_src=False,
        app_dir="app",
        routes=[loading, good, broken],
    )

    output = TanStackStartGenerator().generate(structure)

    assert [route.target_path for route in output.routes] == ["src/routes/index.tsx"]
    assert output.report.total_routes == 3
    assert output.report.transformed_routes == 1
    assert output.report.skipped_routes == 2
    assert len(output.report.errors) == 1
    assert output.report.errors[0].startswith("Failed to transform app/broken/page.tsx:")
    assert "Skipped app/loading.tsx: loading files are not migrated" in output.report.warnings
    assert "app/broken/page.tsx" not in output.files_to_delete
