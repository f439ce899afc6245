"""Root layout to root route rewrite."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Set, Tuple

from tree_sitter import Node

from .common import (
    ROUTER_MODULE,
    TransformResult,
    format_named_import,
    insert_header,
    kept_imports,
    merge_named_import,
    remove_attribute,
    resolve_default_component,
    returned_jsx,
    rewrite_component_header,
    rewrite_next_imports,
    segment_export_warnings,
)
from .syntax import (
    ParsedSource,
    SourceEditor,
    import_source,
    indent_block,
    jsx_attribute_name,
    jsx_tag_name,
    parse_source,
    tidy,
    top_level_statements,
    unwrap_parens,
    walk,
)
from ..errors import TransformError

VARIANTS = ("shell", "component")

DEFAULT_STYLESHEET = "./globals.css"
DEFAULT_TITLE = "TanStack Start Starter"

_BASE_META = (
    '{ charSet: "utf-8" }',
    '{ name: "viewport", content: "width=device-width, initial-scale=1" }',
)

_SHELL_SIGNATURE = "function RootDocument({ children }: { children: React.ReactNode }) "

_DEVTOOLS_MARKUP = (
    "<TanStackDevtools",
    '  config={{ position: "bottom-right" }}',
    "  plugins={[",
    "    {",
    '      name: "Tanstack Router",',
    "      render: <TanStackRouterDevtoolsPanel />,",
    "    },",
    "  ]}",
    "/>",
)

_FONT_HINT = re.compile(r"geist|font", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

_MIGRATED_METADATA_KEYS = {"title", "description"}


def transform_layout_to_root(
    content: str, variant: str = "shell", source_path: str = "app/layout.tsx"
) -> TransformResult:
    """Rewrite a root ``layout`` module into a ``createRootRoute`` module."""
    if variant not in VARIANTS:
        raise TransformError(f"unknown root route variant {variant!r}")

    parsed = parse_source(content)
    editor = SourceEditor(parsed)
    warnings: List[str] = []

    metadata = _take_metadata(parsed, editor)
    target = resolve_default_component(parsed)
    if target is None:
        raise TransformError("root layout has no default-exported component")
    name = target.name or "RootLayout"

    rewrite = rewrite_next_imports(parsed, editor, source_path)
    warnings.extend(rewrite.warnings)
    font_names = _remove_font_loaders(parsed, editor, rewrite.font_loaders, source_path, warnings)
    stylesheets = _rewrite_stylesheets(parsed, editor)
    warnings.extend(segment_export_warnings(parsed, source_path, ignore={"metadata"}))

    document = returned_jsx(parsed, target)
    if document is None:
        raise TransformError("root layout does not return a JSX document")
    _rewrite_document(parsed, editor, document, variant, font_names, source_path, warnings)

    if variant == "shell":
        rewrite_component_header(parsed, editor, target, _SHELL_SIGNATURE)
        component_property = "shellComponent: RootDocument"
        router_names = ["HeadContent", "Scripts", "createRootRoute", *rewrite.router_names]
        imports = [
            format_named_import(["TanStackRouterDevtoolsPanel"], "@tanstack/react-router-devtools"),
            format_named_import(["TanStackDevtools"], "@tanstack/react-devtools"),
        ]
    else:
        rewrite_component_header(parsed, editor, target, f"function {name}() ")
        component_property = f"component: {name}"
        router_names = ["HeadContent", "Outlet", "Scripts", "createRootRoute", *rewrite.router_names]
        imports = [
            format_named_import(["TanStackRouterDevtools"], "@tanstack/react-router-devtools"),
        ]

    css_names = [binding for binding, _ in stylesheets]
    if not stylesheets:
        css_names = ["appCss"]
        imports.append(f'import appCss from "{DEFAULT_STYLESHEET}?url";')

    head = _head_accessor(parsed, metadata, css_names, source_path, warnings)
    route_export = "\n".join(
        [
            "export const Route = createRootRoute({",
            f"  head: {head},",
            f"  {component_property},",
            "});",
        ]
    )
    kept = kept_imports(parsed, rewrite.removed)
    router_import = merge_named_import(parsed, editor, router_names, ROUTER_MODULE, kept)
    if router_import:
        imports.insert(0, router_import)
    insert_header(parsed, editor, imports, route_export, kept)
    return TransformResult(content=tidy(editor.render()), warnings=warnings)


def _take_metadata(parsed: ParsedSource, editor: SourceEditor) -> Optional[Node]:
    for statement in top_level_statements(parsed):
        if statement.type != "export_statement":
            continue
        declaration = statement.child_by_field_name("declaration")
        if declaration is None or declaration.type != "lexical_declaration":
            continue
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is not None and parsed.text_of(name) == "metadata" and value is not None:
                editor.remove_statement(statement)
                return unwrap_parens(value)
    return None


def _is_font_loader_call(parsed: ParsedSource, value: Optional[Node], loaders: Set[str]) -> bool:
    value = unwrap_parens(value)
    if value is None or value.type != "call_expression":
        return False
    function = value.child_by_field_name("function")
    if function is None or function.type != "identifier":
        return False
    callee = parsed.text_of(function)
    return callee in loaders or bool(_FONT_HINT.search(callee))


def _remove_font_loaders(
    parsed: ParsedSource,
    editor: SourceEditor,
    loaders: Set[str],
    source_path: str,
    warnings: List[str],
) -> Set[str]:
    """Drop ``const inter = Inter({...})`` style declarations and return the bound names."""
    removed: Set[str] = set()
    for statement in top_level_statements(parsed):
        if statement.type != "lexical_declaration":
            continue
        declarators = [child for child in statement.named_children if child.type == "variable_declarator"]
        fonts = [d for d in declarators if _is_font_loader_call(parsed, d.child_by_field_name("value"), loaders)]
        if not fonts:
            continue
        names = [parsed.text_of(d.child_by_field_name("name")) for d in fonts]
        if len(fonts) == len(declarators):
            editor.remove_statement(statement)
            removed.update(names)
        else:
            warnings.append(
                f"Font loader call for {', '.join(names)} in {source_path} shares a declaration; remove it manually"
            )
    return removed


def _rewrite_stylesheets(parsed: ParsedSource, editor: SourceEditor) -> List[Tuple[str, str]]:
    """Bind every global stylesheet import to ``appCss``, ``appCss2`` and so on."""
    bindings: List[Tuple[str, str]] = []
    for statement in top_level_statements(parsed):
        if statement.type != "import_statement":
            continue
        source = import_source(parsed, statement)
        if source is None:
            continue
        path = source.split("?", 1)[0]
        if not path.endswith(".css") or path.endswith(".module.css"):
            continue
        binding = "appCss" if not bindings else f"appCss{len(bindings) + 1}"
        editor.replace_node(statement, f'import {binding} from "{path}?url";')
        bindings.append((binding, path))
    return bindings


def _pairs(parsed: ParsedSource, obj: Node) -> Dict[str, Node]:
    pairs: Dict[str, Node] = {}
    for child in obj.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        value = child.child_by_field_name("value")
        if key is not None and value is not None:
            pairs[parsed.text_of(key).strip("\"'")] = value
    return pairs


def _head_accessor(
    parsed: ParsedSource,
    metadata: Optional[Node],
    css_names: Sequence[str],
    source_path: str,
    warnings: List[str],
) -> str:
    meta = list(_BASE_META)
    if metadata is None:
        meta.append(f'{{ title: "{DEFAULT_TITLE}" }}')
    elif metadata.type != "object":
        warnings.append(f"metadata in {source_path} is not an object literal; default head tags were used")
        meta.append(f'{{ title: "{DEFAULT_TITLE}" }}')
    else:
        pairs = _pairs(parsed, metadata)
        title = pairs.get("title")
        if title is not None and title.type == "object":
            title = _pairs(parsed, title).get("default")
        if title is not None:
            meta.append(f"{{ title: {parsed.text_of(title)} }}")
        description = pairs.get("description")
        if description is not None:
            meta.append(f'{{ name: "description", content: {parsed.text_of(description)} }}')
        dropped = sorted(key for key in pairs if key not in _MIGRATED_METADATA_KEYS)
        if dropped:
            warnings.append(f"metadata fields {', '.join(dropped)} in {source_path} were not migrated")

    links = ", ".join(f'{{ rel: "stylesheet", href: {name} }}' for name in css_names)
    lines = ["() => ({", "    meta: ["]
    lines.extend(f"      {entry}," for entry in meta)
    lines.extend(["    ],", f"    links: [{links}],", "  })"])
    return "\n".join(lines)


def _find_element(parsed: ParsedSource, root: Node, tag: str) -> Optional[Node]:
    for node in walk(root):
        if node.type in {"jsx_element", "jsx_self_closing_element"} and jsx_tag_name(parsed, node) == tag:
            return node
    return None


def _is_blank(parsed: ParsedSource, node: Node) -> bool:
    return node.type == "jsx_text" and not parsed.text_of(node).strip()


def _content_children(parsed: ParsedSource, element: Node) -> List[Node]:
    opening = element.child_by_field_name("open_tag")
    closing = element.child_by_field_name("close_tag")
    return [
        child
        for child in element.named_children
        if child != opening and child != closing and child.type != "comment" and not _is_blank(parsed, child)
    ]


def _child_indent(parsed: ParsedSource, element: Node, children: Sequence[Node]) -> str:
    base = parsed.line_indent(element.start_byte)
    if children:
        indent = parsed.line_indent(children[0].start_byte)
        if indent != base:
            return indent
    return base + "  "


def _append_children(parsed: ParsedSource, editor: SourceEditor, element: Node, lines: Sequence[str]) -> None:
    children = _content_children(parsed, element)
    indent = _child_indent(parsed, element, children)
    if children:
        block = indent_block(lines, indent)
        closing = element.child_by_field_name("close_tag")
        base = parsed.line_indent(element.start_byte)
        if closing is not None and b"\n" not in parsed.data[children[-1].end_byte : closing.start_byte]:
            block += f"\n{base}"
        editor.insert(children[-1].end_byte, block)
    else:
        opening = element.child_by_field_name("open_tag")
        base = parsed.line_indent(element.start_byte)
        editor.insert(opening.end_byte, indent_block(lines, indent) + f"\n{base}")


def _rewrite_document(
    parsed: ParsedSource,
    editor: SourceEditor,
    document: Node,
    variant: str,
    font_names: Set[str],
    source_path: str,
    warnings: List[str],
) -> None:
    for node in walk(document):
        if node.type in {"jsx_opening_element", "jsx_self_closing_element"}:
            _strip_font_class_names(parsed, editor, node, font_names)

    body = _find_element(parsed, document, "body")
    if body is None or body.type != "jsx_element":
        raise TransformError("root layout does not render a <body> element with children")

    placeholder = _children_placeholder(parsed, body)
    if variant == "shell":
        lines = [] if placeholder is not None else ["{children}"]
        lines.extend(_DEVTOOLS_MARKUP)
        lines.append("<Scripts />")
    else:
        lines = [] if placeholder is not None else ["<Outlet />"]
        lines.extend(["<Scripts />", "<TanStackRouterDevtools />"])
        if placeholder is not None:
            editor.replace_node(placeholder, "<Outlet />")
    _append_children(parsed, editor, body, lines)

    head = _find_element(parsed, document, "head")
    if head is not None and head.type == "jsx_element":
        _append_children(parsed, editor, head, ["<HeadContent />"])
    elif head is not None:
        base = parsed.line_indent(head.start_byte)
        editor.replace_node(head, "<head>" + indent_block(["<HeadContent />"], base + "  ") + f"\n{base}</head>")
    else:
        html = _find_element(parsed, document, "html")
        if html is None or html.type != "jsx_element":
            warnings.append(f"{source_path} renders no <html> element; add <HeadContent /> to the document head")
            return
        children = _content_children(parsed, html)
        indent = _child_indent(parsed, html, children)
        opening = html.child_by_field_name("open_tag")
        editor.insert(opening.end_byte, indent_block(["<head>", "  <HeadContent />", "</head>"], indent))


def _children_placeholder(parsed: ParsedSource, body: Node) -> Optional[Node]:
    for node in walk(body):
        if node.type != "jsx_expression":
            continue
        named = [child for child in node.named_children if child.type != "comment"]
        if len(named) == 1 and named[0].type == "identifier" and parsed.text_of(named[0]) == "children":
            return node
    return None


def _is_font_reference(parsed: ParsedSource, node: Node, font_names: Set[str]) -> bool:
    for child in walk(node):
        if child.type != "member_expression":
            continue
        obj = child.child_by_field_name("object")
        if obj is None or obj.type != "identifier":
            continue
        name = parsed.text_of(obj)
        if name in font_names or _FONT_HINT.search(name):
            return True
    return False


def _strip_font_class_names(parsed: ParsedSource, editor: SourceEditor, opening: Node, font_names: Set[str]) -> None:
    for attribute in opening.named_children:
        if attribute.type != "jsx_attribute" or jsx_attribute_name(parsed, attribute) != "className":
            continue
        value = attribute.named_children[-1] if len(attribute.named_children) > 1 else None
        if value is None or value.type != "jsx_expression" or not _is_font_reference(parsed, value, font_names):
            continue
        expressions = [child for child in value.named_children if child.type != "comment"]
        expression = expressions[0] if expressions else None
        if expression is not None and expression.type == "template_string":
            replacement = _template_without_fonts(parsed, expression, font_names)
            if replacement:
                editor.replace_node(value, replacement)
                continue
        remove_attribute(editor, attribute)


def _template_without_fonts(parsed: ParsedSource, template: Node, font_names: Set[str]) -> Optional[str]:
    """Rebuild a className template literal without its font substitutions."""
    pieces: List[str] = []
    kept_expression = False
    cursor = template.start_byte + 1
    for child in template.named_children:
        if child.type != "template_substitution":
            continue
        pieces.append(parsed.slice(cursor, child.start_byte))
        if not _is_font_reference(parsed, child, font_names):
            pieces.append(parsed.text_of(child))
            kept_expression = True
        cursor = child.end_byte
    pieces.append(parsed.slice(cursor, template.end_byte - 1))
    text = _WHITESPACE.sub(" ", "".join(pieces)).strip()
    if not text:
        return None
    if kept_expression:
        return "{`" + text + "`}"
    return '"' + text.replace('"', '\\"') + '"'


__all__ = ["DEFAULT_STYLESHEET", "DEFAULT_TITLE", "VARIANTS", "transform_layout_to_root"]
