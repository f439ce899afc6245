"""Tests for page rewrite strategies."""

from __future__ import annotations

import textwrap

import pytest

from hopr.errors import TransformError
from hopr.transformers.page import RegexPageStrategy, StructuralPageStrategy, page_strategy
from tests._fixtures.project_builder import HOME_PAGE, POST_PAGE


def _source(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def test_structural_rewrites_link_and_adds_route() -> None:
    result = StructuralPageStrategy().transform_page(_source(HOME_PAGE), "/", "app/page.tsx")
    content = result.content

    assert content.startswith('import { createFileRoute, Link } from "@tanstack/react-router";')
    assert 'export const Route = createFileRoute("/")({' in content
    assert "component: Home," in content
    assert "function Home() {" in content
    assert '<Link to="/blog">Blog</Link>' in content
    assert "next/link" not in content
    assert "export default" not in content
    assert result.warnings == []


def test_structural_reads_params_from_route_hooks() -> None:
    result = StructuralPageStrategy().transform_page(
        _source(POST_PAGE), "/blog/$slug", "app/blog/[slug]/page.tsx"
    )
    content = result.content

    assert 'createFileRoute("/blog/$slug")' in content
    assert "function BlogPost() {" in content
    assert "const params = Route.useParams();" in content
    assert "const data = Route.useLoaderData();" in content
    assert "await params" not in content
    assert "async function" not in content
    assert any("awaited params" in warning for warning in result.warnings)


def test_structural_keeps_use_client_directive_first() -> None:
    source = _source(
        """
        "use client";

        import { useState } from "react";

        export default function Counter() {
          const [count, setCount] = useState(0);
          return <button onClick={() => setCount(count + 1)}>{count}</button>;
        }
        """
    )

    content = StructuralPageStrategy().transform_page(source, "/counter", "app/counter/page.tsx").content

    assert content.startswith('"use client";')
    assert content.index("createFileRoute") < content.index('import { useState } from "react";')
    assert content.index('import { useState } from "react";') < content.index("export const Route")


def test_structural_handles_arrow_default_export() -> None:
    source = _source(
        """
        const About = () => <p>About us</p>;

        export default About;
        """
    )

    content = StructuralPageStrategy().transform_page(source, "/about", "app/about/page.tsx").content

    assert "function About() {" in content
    assert "return (<p>About us</p>);" in content
    assert "export default About" not in content
    assert "component: About," in content


def test_structural_replaces_image_with_img() -> None:
    source = _source(
        """
        import Image from "next/image";

        export default function Gallery() {
          return <Image src="/a.png" alt="A" width={10} height={10} priority />;
        }
        """
    )

    content = StructuralPageStrategy().transform_page(source, "/gallery", "app/gallery/page.tsx").content

    assert '<img src="/a.png" alt="A" width={10} height={10} />' in content
    assert "priority" not in content
    assert "next/image" not in content


def test_structural_warns_about_other_next_imports_and_segment_exports() -> None:
    source = _source(
        """
        import { notFound } from "next/navigation";

        export const revalidate = 60;

        export default function Missing() {
          notFound();
          return null;
        }
        """
    )

    result = StructuralPageStrategy().transform_page(source, "/missing", "app/missing/page.tsx")

    assert "next/navigation" not in result.content
    assert any("notFound" in warning for warning in result.warnings)
    assert any("'revalidate'" in warning for warning in result.warnings)


def test_structural_requires_default_export() -> None:
    with pytest.raises(TransformError):
        StructuralPageStrategy().transform_page("export const x = 1;\n", "/", "app/page.tsx")


def test_regex_strategy_rewrites_textually() -> None:
    result = RegexPageStrategy().transform_page(_source(HOME_PAGE), "/", "app/page.tsx")
    content = result.content

    assert content.startswith('import { createFileRoute } from "@tanstack/react-router";')
    assert 'import { Link } from "@tanstack/react-router";' in content
    assert 'export const Route = createFileRoute("/")({' in content
    assert "function Home()" in content
    assert '<Link to="/blog">' in content
    assert result.warnings == []


def test_regex_strategy_warns_without_default_function() -> None:
    result = RegexPageStrategy().transform_page("const Page = () => null;\nexport default Page;\n", "/", "app/page.tsx")

    assert result.warnings
    assert "createFileRoute" in result.content


def test_page_strategy_lookup() -> None:
    assert page_strategy("regex").name == "regex"
    with pytest.raises(TransformError):
        page_strategy("ast")


def test_structural_orders_route_hooks_before_original_statements() -> None:
    source = _source(
        """
        type Props = { params: Promise<{ q: string }>; searchParams: Promise<{ page?: string }> };

        export default async function Search({ params, searchParams }: Props) {
          const { q } = await params;
          const { page } = await searchParams;
          return <p>{q} {page}</p>;
        }
        """
    )

    result = StructuralPageStrategy().transform_page(source, "/search", "app/search/page.tsx")
    content = result.content

    assert "function Search() {" in content
    assert "await" not in content
    params_at = content.index("const params = Route.useParams();")
    search_at = content.index("const searchParams = Route.useSearch();")
    data_at = content.index("const data = Route.useLoaderData();")
    assert params_at < search_at < data_at < content.index("return <p>")
    assert any("awaited params" in warning for warning in result.warnings)
    assert any("awaited searchParams" in warning for warning in result.warnings)
    assert not any("still awaits" in warning for warning in result.warnings)


def test_structural_keeps_named_export_of_component() -> None:
    source = _source(
        """
        export function Pricing() {
          return <p>Plans</p>;
        }

        export default Pricing;
        """
    )

    content = StructuralPageStrategy().transform_page(source, "/pricing", "app/pricing/page.tsx").content

    assert "export function Pricing() {" in content
    assert "export default" not in content
    assert "component: Pricing," in content


def test_structural_merges_into_existing_router_import() -> None:
    source = _source(
        """
        import { useRouter } from "@tanstack/react-router";
        import Link from "next/link";

        export default function Nav() {
          const router = useRouter();
          return <Link href="/">Home</Link>;
        }
        """
    )

    content = StructuralPageStrategy().transform_page(source, "/nav", "app/nav/page.tsx").content

    assert content.count("@tanstack/react-router") == 1
    assert 'import { useRouter, createFileRoute, Link } from "@tanstack/react-router";' in content
    assert content.index("@tanstack/react-router") < content.index("export const Route")
    assert '<Link to="/">Home</Link>' in content


def test_regex_strategy_warns_about_async_components() -> None:
    source = _source(
        """
        export default async function Report() {
          const response = await fetch("/api/report");
          return <p>{response.status}</p>;
        }
        """
    )

    result = RegexPageStrategy().transform_page(source, "/report", "app/report/page.tsx")

    assert "function Report() {" in result.content
    assert "async function" not in result.content
    assert any("was async" in warning and "route loader" in warning for warning in result.warnings)
