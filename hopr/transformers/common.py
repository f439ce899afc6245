"""Helpers shared by the layout and page transforms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from tree_sitter import Node

from .syntax import (
    ParsedSource,
    SourceEditor,
    import_source,
    is_directive,
    jsx_attribute_name,
    jsx_tag_name,
    top_level_statements,
    unwrap_parens,
    walk,
)
from ..errors import TransformError

ROUTER_MODULE = "@tanstack/react-router"

IMAGE_PROP_DENYLIST = frozenset({"priority", "fill", "quality", "placeholder", "blurDataURL", "loading"})

_FUNCTION_TYPES = {"function_expression", "function", "arrow_function"}

# Route segment config and data exports recognised by Next.js.
SEGMENT_EXPORTS = frozenset(
    {
        "metadata",
        "generateMetadata",
        "generateStaticParams",
        "generateViewport",
        "viewport",
        "dynamic",
        "dynamicParams",
        "revalidate",
        "fetchCache",
        "runtime",
        "preferredRegion",
        "maxDuration",
    }
)


@dataclass
class TransformResult:
    """Rewritten source plus advisory notes for the migration report."""

    content: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class ComponentTarget:
    """The default-exported component of a route module."""

    name: Optional[str]
    function: Node
    container: Node
    body: Node
    is_async: bool
    export_statement: Optional[Node] = None
    named_export: bool = False

    @property
    def has_block_body(self) -> bool:
        return self.body.type == "statement_block"

    @property
    def parameters(self) -> Optional[Node]:
        return self.function.child_by_field_name("parameters") or self.function.child_by_field_name(
            "parameter"
        )


def _is_async(function: Node) -> bool:
    return any(child.type == "async" for child in function.children)


def _is_default_export(statement: Node) -> bool:
    return statement.type == "export_statement" and any(child.type == "default" for child in statement.children)


def resolve_default_component(parsed: ParsedSource) -> Optional[ComponentTarget]:
    """Locate the default-exported component, following ``export default Name``."""
    statements = top_level_statements(parsed)
    for statement in statements:
        if not _is_default_export(statement):
            continue
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None and declaration.type == "function_declaration":
            return _from_function(parsed, declaration, statement)
        value = unwrap_parens(statement.child_by_field_name("value"))
        if value is None:
            return None
        if value.type in _FUNCTION_TYPES:
            return _from_function(parsed, value, statement)
        if value.type == "identifier":
            target = _resolve_identifier(parsed, statements, parsed.text_of(value))
            if target is None:
                raise TransformError(f"default export {parsed.text_of(value)} is not a local function")
            target.export_statement = statement
            return target
        raise TransformError(f"unsupported default export ({value.type})")
    return None


def _from_function(parsed: ParsedSource, function: Node, container: Node) -> ComponentTarget:
    name_node = function.child_by_field_name("name")
    body = function.child_by_field_name("body")
    if body is None:
        raise TransformError("default-exported function has no body")
    return ComponentTarget(
        name=parsed.text_of(name_node) if name_node is not None else None,
        function=function,
        container=container,
        body=body,
        is_async=_is_async(function),
    )


def _resolve_identifier(parsed: ParsedSource, statements: Sequence[Node], name: str) -> Optional[ComponentTarget]:
    for statement in statements:
        inner = statement
        if statement.type == "export_statement":
            inner = statement.child_by_field_name("declaration")
            if inner is None:
                continue
        if inner.type == "function_declaration":
            name_node = inner.child_by_field_name("name")
            if name_node is not None and parsed.text_of(name_node) == name:
                target = _from_function(parsed, inner, statement)
                target.named_export = statement.type == "export_statement"
                return target
        elif inner.type == "lexical_declaration":
            declarators = [child for child in inner.named_children if child.type == "variable_declarator"]
            for declarator in declarators:
                name_node = declarator.child_by_field_name("name")
                if name_node is None or parsed.text_of(name_node) != name:
                    continue
                value = unwrap_parens(declarator.child_by_field_name("value"))
                if value is None or value.type not in _FUNCTION_TYPES:
                    return None
                if len(declarators) > 1:
                    raise TransformError(f"{name} is declared alongside other variables")
                target = _from_function(parsed, value, statement)
                target.name = name
                target.named_export = statement.type == "export_statement"
                return target
    return None


def rewrite_component_header(
    parsed: ParsedSource,
    editor: SourceEditor,
    target: ComponentTarget,
    header: str,
    prologue: Sequence[str] = (),
) -> None:
    """Turn the component into ``<header>{ ... }``, prepending ``prologue`` statements.

    Expression-bodied arrows get a block that returns the original expression. A component
    that is also a named export keeps its ``export`` keyword.
    """
    if target.named_export:
        header = f"export {header}"
    indent = _body_indent(parsed, target)
    lines = "".join(f"\n{indent}{line}" for line in prologue)
    if target.has_block_body:
        editor.replace(target.container.start_byte, target.body.start_byte, header)
        if lines:
            editor.insert(target.body.start_byte + 1, lines)
        if target.body.end_byte < target.container.end_byte:
            editor.remove(target.body.end_byte, target.container.end_byte)
    else:
        base = parsed.line_indent(target.container.start_byte)
        opening, closing = ("", "") if target.body.type == "parenthesized_expression" else ("(", ")")
        editor.replace(
            target.container.start_byte,
            target.body.start_byte,
            f"{header}{{{lines}\n{base}  return {opening}",
        )
        editor.replace(target.body.end_byte, target.container.end_byte, f"{closing};\n{base}}}")
    if target.export_statement is not None:
        editor.remove_statement(target.export_statement)


def _body_indent(parsed: ParsedSource, target: ComponentTarget) -> str:
    if target.has_block_body:
        for child in target.body.named_children:
            return parsed.line_indent(child.start_byte)
    return parsed.line_indent(target.container.start_byte) + "  "


def returned_jsx(parsed: ParsedSource, target: ComponentTarget) -> Optional[Node]:
    """Return the JSX element the component renders, if it returns one directly."""
    if not target.has_block_body:
        candidate = unwrap_parens(target.body)
        return candidate if candidate is not None and candidate.type.startswith("jsx") else None
    for statement in target.body.named_children:
        if statement.type != "return_statement":
            continue
        for child in statement.named_children:
            candidate = unwrap_parens(child)
            if candidate is not None and candidate.type in {"jsx_element", "jsx_self_closing_element"}:
                return candidate
    return None


def destructured_keys(parsed: ParsedSource, parameters: Optional[Node]) -> Set[str]:
    """Return the property names destructured by the first parameter."""
    if parameters is None:
        return set()
    if parameters.type == "formal_parameters":
        candidates = [child for child in parameters.named_children if child.type != "comment"]
        if not candidates:
            return set()
        first = candidates[0]
        pattern = first.child_by_field_name("pattern") or first
    else:
        pattern = parameters
    if pattern.type != "object_pattern":
        return set()
    keys: Set[str] = set()
    for child in pattern.named_children:
        if child.type == "shorthand_property_identifier_pattern":
            keys.add(parsed.text_of(child))
        elif child.type == "pair_pattern":
            key = child.child_by_field_name("key")
            if key is not None:
                keys.add(parsed.text_of(key).strip("\"'"))
        elif child.type == "object_assignment_pattern":
            left = child.child_by_field_name("left")
            if left is not None:
                keys.add(parsed.text_of(left))
    return keys


def has_parameters(parameters: Optional[Node]) -> bool:
    if parameters is None:
        return False
    if parameters.type != "formal_parameters":
        return True
    return any(child.type != "comment" for child in parameters.named_children)


@dataclass
class NextImportRewrite:
    """Outcome of removing ``next`` imports and rewriting their JSX usages."""

    removed: List[Node] = field(default_factory=list)
    router_names: List[str] = field(default_factory=list)
    font_loaders: Set[str] = field(default_factory=set)
    warnings: List[str] = field(default_factory=list)


def is_next_module(source: str) -> bool:
    return source == "next" or source.startswith("next/")


def imported_names(parsed: ParsedSource, statement: Node) -> List[str]:
    """Local names bound by an import statement."""
    names: List[str] = []
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for child in clause.named_children:
            if child.type == "identifier":
                names.append(parsed.text_of(child))
            elif child.type == "namespace_import":
                names.extend(parsed.text_of(n) for n in child.named_children if n.type == "identifier")
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    alias = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    if alias is not None:
                        names.append(parsed.text_of(alias))
    return names


def _default_import(parsed: ParsedSource, statement: Node) -> Optional[str]:
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for child in clause.named_children:
            if child.type == "identifier":
                return parsed.text_of(child)
    return None


def rewrite_next_imports(
    parsed: ParsedSource,
    editor: SourceEditor,
    source_path: str,
    scope: Optional[Node] = None,
) -> NextImportRewrite:
    """Remove ``next`` imports; map ``next/link`` to the router Link and ``next/image`` to ``<img>``."""
    outcome = NextImportRewrite()
    link_name: Optional[str] = None
    image_name: Optional[str] = None

    for statement in top_level_statements(parsed):
        if statement.type != "import_statement":
            continue
        source = import_source(parsed, statement)
        if source is None or not is_next_module(source):
            continue
        outcome.removed.append(statement)
        editor.remove_statement(statement)
        if source == "next/link":
            link_name = _default_import(parsed, statement)
            if link_name and "Link" not in outcome.router_names:
                outcome.router_names.append("Link")
        elif source == "next/image":
            image_name = _default_import(parsed, statement)
        elif source.startswith("next/font"):
            outcome.font_loaders.update(imported_names(parsed, statement))
        elif source != "next":
            names = imported_names(parsed, statement)
            if names:
                outcome.warnings.append(
                    f"Removed import from '{source}' in {source_path}; review uses of {', '.join(names)}"
                )

    if link_name or image_name:
        _rewrite_jsx_usages(parsed, editor, scope or parsed.root, link_name, image_name)
    return outcome


def _rewrite_jsx_usages(
    parsed: ParsedSource,
    editor: SourceEditor,
    scope: Node,
    link_name: Optional[str],
    image_name: Optional[str],
) -> None:
    for node in walk(scope):
        if node.type not in {"jsx_element", "jsx_self_closing_element"}:
            continue
        tag = jsx_tag_name(parsed, node)
        if tag is None or tag not in {link_name, image_name}:
            continue
        replacement = "Link" if tag == link_name else "img"
        opening = node.child_by_field_name("open_tag") if node.type == "jsx_element" else node
        closing = node.child_by_field_name("close_tag") if node.type == "jsx_element" else None
        if replacement != tag:
            for tag_node in (opening, closing):
                name = tag_node.child_by_field_name("name") if tag_node is not None else None
                if name is not None:
                    editor.replace_node(name, replacement)
        for attribute in _attributes(opening):
            attribute_name = jsx_attribute_name(parsed, attribute)
            if replacement == "Link" and attribute_name == "href":
                editor.replace_node(attribute.named_children[0], "to")
            elif replacement == "img" and attribute_name in IMAGE_PROP_DENYLIST:
                remove_attribute(editor, attribute)


def _attributes(opening: Optional[Node]) -> Iterable[Node]:
    if opening is None:
        return []
    return [child for child in opening.named_children if child.type == "jsx_attribute"]


def remove_attribute(editor: SourceEditor, attribute: Node) -> None:
    previous = attribute.prev_sibling
    start = previous.end_byte if previous is not None else attribute.start_byte
    editor.remove(start, attribute.end_byte)


def header_offset(parsed: ParsedSource) -> int:
    """Offset after leading directives such as ``"use client"``; 0 when there are none."""
    offset = 0
    for statement in parsed.root.named_children:
        if statement.type == "comment":
            continue
        if is_directive(parsed, statement):
            offset = statement.end_byte
            continue
        break
    return offset


def insert_header(
    parsed: ParsedSource,
    editor: SourceEditor,
    imports: Sequence[str],
    route_export: str,
    kept_imports: Sequence[Node],
) -> None:
    """Insert new imports at the top and the Route export after the last surviving import."""
    offset = header_offset(parsed)
    block = "\n".join(imports)
    if kept_imports:
        if block:
            editor.insert(offset, _surround(offset, block))
        editor.insert(kept_imports[-1].end_byte, f"\n\n{route_export}\n")
    else:
        editor.insert(offset, _surround(offset, f"{block}\n\n{route_export}"))


def _surround(offset: int, block: str) -> str:
    return f"\n\n{block}\n" if offset else f"{block}\n\n"


def kept_imports(parsed: ParsedSource, removed: Iterable[Node]) -> List[Node]:
    removed_offsets = {node.start_byte for node in removed}
    return [
        statement
        for statement in top_level_statements(parsed)
        if statement.type == "import_statement" and statement.start_byte not in removed_offsets
    ]


def format_named_import(names: Sequence[str], module: str) -> str:
    unique: Dict[str, None] = dict.fromkeys(names)
    return f'import {{ {", ".join(unique)} }} from "{module}";'


def merge_named_import(
    parsed: ParsedSource,
    editor: SourceEditor,
    names: Sequence[str],
    module: str,
    kept: Sequence[Node],
) -> Optional[str]:
    """Add ``names`` to an existing value import of ``module``.

    Returns ``None`` when an import was extended, otherwise the new import line.
    """
    for statement in kept:
        if import_source(parsed, statement) != module or _is_type_import(statement):
            continue
        named = _named_imports(statement)
        if named is None:
            continue
        bound = set(imported_names(parsed, statement))
        missing = [name for name in dict.fromkeys(names) if name not in bound]
        if missing:
            specifiers = [parsed.text_of(child) for child in named.named_children if child.type == "import_specifier"]
            editor.replace_node(named, f'{{ {", ".join([*specifiers, *missing])} }}')
        return None
    return format_named_import(names, module)


def _named_imports(statement: Node) -> Optional[Node]:
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for child in clause.named_children:
            if child.type == "named_imports":
                return child
    return None


def _is_type_import(statement: Node) -> bool:
    return any(child.type == "type" for child in statement.children)


def _exported_names(parsed: ParsedSource, statement: Node) -> List[str]:
    declaration = statement.child_by_field_name("declaration")
    if declaration is None:
        return []
    if declaration.type == "function_declaration":
        name = declaration.child_by_field_name("name")
        return [parsed.text_of(name)] if name is not None else []
    if declaration.type == "lexical_declaration":
        names = []
        for declarator in declaration.named_children:
            name = declarator.child_by_field_name("name") if declarator.type == "variable_declarator" else None
            if name is not None:
                names.append(parsed.text_of(name))
        return names
    return []


def segment_export_warnings(parsed: ParsedSource, source_path: str, ignore: Iterable[str] = ()) -> List[str]:
    """Warn about Next.js route segment exports that have no router counterpart."""
    skipped = set(ignore)
    warnings: List[str] = []
    for statement in top_level_statements(parsed):
        if statement.type != "export_statement" or _is_default_export(statement):
            continue
        for name in _exported_names(parsed, statement):
            if name in SEGMENT_EXPORTS and name not in skipped:
                warnings.append(f"Export '{name}' in {source_path} has no TanStack Start equivalent and was left as is")
    return warnings


__all__ = [
    "ComponentTarget",
    "IMAGE_PROP_DENYLIST",
    "NextImportRewrite",
    "ROUTER_MODULE",
    "SEGMENT_EXPORTS",
    "TransformResult",
    "destructured_keys",
    "format_named_import",
    "has_parameters",
    "header_offset",
    "imported_names",
    "insert_header",
    "is_next_module",
    "kept_imports",
    "merge_named_import",
    "remove_attribute",
    "resolve_default_component",
    "returned_jsx",
    "rewrite_component_header",
    "rewrite_next_imports",
    "segment_export_warnings",
]
