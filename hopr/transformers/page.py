"""Page to file route rewrites: a syntax-tree strategy and a textual fallback."""

from __future__ import annotations

import re
from typing import Dict, List, Protocol, Type

from tree_sitter import Node

from .common import (
    ComponentTarget,
    ROUTER_MODULE,
    TransformResult,
    destructured_keys,
    has_parameters,
    insert_header,
    kept_imports,
    merge_named_import,
    resolve_default_component,
    rewrite_component_header,
    rewrite_next_imports,
    segment_export_warnings,
)
from .syntax import ParsedSource, SourceEditor, parse_source, tidy, unwrap_parens, walk
from ..errors import TransformError

_NESTED_FUNCTIONS = {
    "function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "method_definition",
    "generator_function_declaration",
}

_AWAITED_PROPS = {"params", "searchParams"}


class RouteTransformStrategy(Protocol):
    """Rewrites one page module into a file route module."""

    name: str

    def transform_page(self, content: str, route_id: str, source_path: str) -> TransformResult:
        ...


def route_export(route_id: str, component: str) -> str:
    return "\n".join(
        [
            f'export const Route = createFileRoute("{route_id}")({{',
            f"  component: {component},",
            "});",
        ]
    )


class StructuralPageStrategy:
    """Rewrites pages through the tree-sitter syntax tree."""

    name = "structural"

    def transform_page(self, content: str, route_id: str, source_path: str) -> TransformResult:
        parsed = parse_source(content)
        editor = SourceEditor(parsed)
        warnings: List[str] = []

        target = resolve_default_component(parsed)
        if target is None:
            raise TransformError("page has no default-exported component")
        name = target.name or "Page"

        keys = destructured_keys(parsed, target.parameters)
        if has_parameters(target.parameters) and not keys:
            warnings.append(
                f"{name} in {source_path} takes props; read params with Route.useParams() instead"
            )
        prologue = []
        if "params" in keys:
            prologue.append("const params = Route.useParams();")
        if "searchParams" in keys:
            prologue.append("const searchParams = Route.useSearch();")
        if target.is_async:
            prologue.append("const data = Route.useLoaderData();")
        rewrite_component_header(parsed, editor, target, f"function {name}() ", prologue)

        removed = _remove_await_destructuring(parsed, editor, target)
        for statement, bindings in removed:
            warnings.append(
                f"Removed awaited {bindings} destructuring in {source_path}; read the values from "
                f"the route hooks instead"
            )
        if target.is_async and _has_remaining_await(target, [statement for statement, _ in removed]):
            warnings.append(f"{name} in {source_path} still awaits data; move that work into a route loader")

        rewrite = rewrite_next_imports(parsed, editor, source_path)
        warnings.extend(rewrite.warnings)
        warnings.extend(segment_export_warnings(parsed, source_path))

        kept = kept_imports(parsed, rewrite.removed)
        router_import = merge_named_import(
            parsed, editor, ["createFileRoute", *rewrite.router_names], ROUTER_MODULE, kept
        )
        imports = [router_import] if router_import else []
        insert_header(parsed, editor, imports, route_export(route_id, name), kept)
        return TransformResult(content=tidy(editor.render()), warnings=warnings)


def _remove_await_destructuring(
    parsed: ParsedSource, editor: SourceEditor, target: ComponentTarget
) -> List[tuple[Node, str]]:
    """Remove ``const {..} = await params`` statements from the component body."""
    removed: List[tuple[Node, str]] = []
    if not target.has_block_body:
        return removed
    for node in walk(target.body):
        if node.type not in {"lexical_declaration", "variable_declaration"}:
            continue
        declarators = [child for child in node.named_children if child.type == "variable_declarator"]
        if not declarators:
            continue
        awaited = []
        for declarator in declarators:
            pattern = declarator.child_by_field_name("name")
            value = unwrap_parens(declarator.child_by_field_name("value"))
            if pattern is None or pattern.type != "object_pattern" or value is None:
                break
            if value.type != "await_expression":
                break
            argument = unwrap_parens(value.named_children[0]) if value.named_children else None
            if argument is None or argument.type != "identifier" or parsed.text_of(argument) not in _AWAITED_PROPS:
                break
            awaited.append(parsed.text_of(argument))
        else:
            editor.remove_statement(node)
            removed.append((node, " and ".join(awaited)))
    return removed


def _has_remaining_await(target: ComponentTarget, removed: List[Node]) -> bool:
    removed_ranges = [(node.start_byte, node.end_byte) for node in removed]
    stack = list(target.body.children)
    while stack:
        node = stack.pop()
        if node.type in _NESTED_FUNCTIONS:
            continue
        if any(start <= node.start_byte and node.end_byte <= end for start, end in removed_ranges):
            continue
        if node.type == "await_expression":
            return True
        stack.extend(node.children)
    return False


_DEFAULT_EXPORT_FUNCTION = re.compile(r"export\s+default\s+(async\s+)?function\s+(\w+)")
_LINK_IMPORT = re.compile(r"""import\s+Link\s+from\s+["']next/link["'];?""")
_IMAGE_IMPORT = re.compile(r"""import\s+Image\s+from\s+["']next/image["'];?""")
_HREF_ATTRIBUTE = re.compile(r"\shref=")


class RegexPageStrategy:
    """Best-effort textual rewrite for sources the structural strategy should not touch."""

    name = "regex"

    def transform_page(self, content: str, route_id: str, source_path: str) -> TransformResult:
        warnings: List[str] = []
        transformed = content
        if ROUTER_MODULE not in transformed:
            transformed = f'import {{ createFileRoute }} from "{ROUTER_MODULE}";\n\n{transformed}'

        match = _DEFAULT_EXPORT_FUNCTION.search(transformed)
        if match:
            component = match.group(2)
            if match.group(1):
                warnings.append(
                    f"{component} in {source_path} was async; move awaited data loading into a route loader"
                )
            transformed = (
                transformed[: match.start()]
                + f"{route_export(route_id, component)}\n\nfunction {component}"
                + transformed[match.end() :]
            )
        else:
            warnings.append(f"No default-exported function found in {source_path}; add the Route export manually")

        transformed = _LINK_IMPORT.sub(f'import {{ Link }} from "{ROUTER_MODULE}";', transformed)
        transformed = _HREF_ATTRIBUTE.sub(" to=", transformed)
        transformed = _IMAGE_IMPORT.sub(
            '// import Image from "next/image"; replace <Image> with <img>', transformed
        )
        return TransformResult(content=tidy(transformed), warnings=warnings)


PAGE_STRATEGIES: Dict[str, Type[RouteTransformStrategy]] = {
    StructuralPageStrategy.name: StructuralPageStrategy,
    RegexPageStrategy.name: RegexPageStrategy,
}


def page_strategy(name: str) -> RouteTransformStrategy:
    try:
        return PAGE_STRATEGIES[name]()
    except KeyError:
        raise TransformError(f"unknown page strategy {name!r}") from None


__all__ = [
    "PAGE_STRATEGIES",
    "RegexPageStrategy",
    "RouteTransformStrategy",
    "StructuralPageStrategy",
    "page_strategy",
    "route_export",
]
