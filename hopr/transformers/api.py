"""API route handler stubs."""

from __future__ import annotations

from typing import List

from .common import TransformResult
from .syntax import parse_source, top_level_statements
from ..templating import render_template

HTTP_METHODS = ("GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE")


def exported_methods(content: str) -> List[str]:
    """Return the HTTP handler names a ``route`` module exports, in declaration order."""
    parsed = parse_source(content)
    methods: List[str] = []
    for statement in top_level_statements(parsed):
        if statement.type != "export_statement":
            continue
        declaration = statement.child_by_field_name("declaration")
        names: List[str] = []
        if declaration is None:
            clause = next((child for child in statement.named_children if child.type == "export_clause"), None)
            if clause is not None:
                for specifier in clause.named_children:
                    exported = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    if exported is not None:
                        names.append(parsed.text_of(exported))
        elif declaration.type == "function_declaration":
            name = declaration.child_by_field_name("name")
            if name is not None:
                names.append(parsed.text_of(name))
        elif declaration.type == "lexical_declaration":
            for declarator in declaration.named_children:
                name = declarator.child_by_field_name("name") if declarator.type == "variable_declarator" else None
                if name is not None:
                    names.append(parsed.text_of(name))
        methods.extend(name for name in names if name in HTTP_METHODS and name not in methods)
    return methods


def transform_api_route(content: str, route_id: str, source_path: str) -> TransformResult:
    """Replace a route handler module with a GET stub; the original logic is not ported."""
    methods = exported_methods(content)
    handled = ", ".join(methods) if methods else "no recognised"
    warning = (
        f"API route {source_path} was replaced by a stub GET handler; "
        f"port its original {handled} handlers manually"
    )
    return TransformResult(content=render_template("api_route.ts.j2", route_id=route_id), warnings=[warning])


__all__ = ["HTTP_METHODS", "exported_methods", "transform_api_route"]
