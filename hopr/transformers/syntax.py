"""tree-sitter parsing and byte-range editing for TSX route sources."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from ..errors import TransformError

TSX_LANGUAGE = Language(tstypescript.language_tsx())

_parser: Parser | None = None

_BLANK_RUNS = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


def _get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser(TSX_LANGUAGE)
    return _parser


@dataclass
class ParsedSource:
    """Source text together with its syntax tree."""

    text: str
    data: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text_of(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8")

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")

    def line_indent(self, offset: int) -> str:
        """Return the leading whitespace of the line containing ``offset``."""
        line_start = self.data.rfind(b"\n", 0, offset) + 1
        index = line_start
        while index < len(self.data) and self.data[index : index + 1] in (b" ", b"\t"):
            index += 1
        return self.data[line_start:index].decode("utf-8")


def parse_source(text: str) -> ParsedSource:
    """Parse TSX/TypeScript source, raising ``TransformError`` when the tree has errors."""
    data = text.encode("utf-8")
    tree = _get_parser().parse(data)
    if tree.root_node.has_error:
        problem = _first_error(tree.root_node)
        line = problem.start_point[0] + 1 if problem is not None else 1
        raise TransformError(f"syntax error near line {line}")
    return ParsedSource(text=text, data=data, tree=tree)


def _first_error(node: Node) -> Node | None:
    for child in walk(node):
        if child.type == "ERROR" or child.is_missing:
            return child
    return None


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def unwrap_parens(node: Node | None) -> Node | None:
    while node is not None and node.type == "parenthesized_expression":
        inner = [child for child in node.named_children if child.type != "comment"]
        if not inner:
            return node
        node = inner[0]
    return node


def string_value(parsed: ParsedSource, node: Node | None) -> Optional[str]:
    """Return the literal value of a ``string`` node without its quotes."""
    if node is None or node.type != "string":
        return None
    return parsed.text_of(node)[1:-1]


def import_source(parsed: ParsedSource, statement: Node) -> Optional[str]:
    return string_value(parsed, statement.child_by_field_name("source"))


def top_level_statements(parsed: ParsedSource) -> List[Node]:
    return [child for child in parsed.root.named_children if child.type != "comment"]


def is_directive(parsed: ParsedSource, statement: Node) -> bool:
    """True for prologue strings such as ``"use client"``."""
    if statement.type != "expression_statement":
        return False
    named = statement.named_children
    return len(named) == 1 and named[0].type == "string"


def jsx_tag_name(parsed: ParsedSource, element: Node) -> Optional[str]:
    """Return the tag name of a ``jsx_element`` or ``jsx_self_closing_element``."""
    opening = element.child_by_field_name("open_tag") if element.type == "jsx_element" else element
    if opening is None:
        return None
    name = opening.child_by_field_name("name")
    return parsed.text_of(name) if name is not None else None


def jsx_attribute_name(parsed: ParsedSource, attribute: Node) -> Optional[str]:
    if attribute.type != "jsx_attribute" or not attribute.named_children:
        return None
    return parsed.text_of(attribute.named_children[0])


@dataclass(order=True)
class _Edit:
    start: int
    end: int
    seq: int
    text: str


class SourceEditor:
    """Collects non-overlapping byte-range edits and renders the result."""

    def __init__(self, parsed: ParsedSource) -> None:
        self.parsed = parsed
        self._edits: List[_Edit] = []

    def __len__(self) -> int:
        return len(self._edits)

    def replace(self, start: int, end: int, text: str) -> None:
        if start > end:
            raise ValueError("edit start must not exceed its end")
        self._edits.append(_Edit(start, end, len(self._edits), text))

    def replace_node(self, node: Node, text: str) -> None:
        self.replace(node.start_byte, node.end_byte, text)

    def insert(self, offset: int, text: str) -> None:
        self.replace(offset, offset, text)

    def remove(self, start: int, end: int) -> None:
        self.replace(start, end, "")

    def remove_statement(self, node: Node) -> None:
        """Remove a statement together with the rest of its line."""
        data = self.parsed.data
        start = node.start_byte
        while start > 0 and data[start - 1 : start] in (b" ", b"\t"):
            start -= 1
        if start > 0 and data[start - 1 : start] != b"\n":
            start = node.start_byte
        end = node.end_byte
        while end < len(data) and data[end : end + 1] in (b" ", b"\t", b";"):
            end += 1
        if data[end : end + 1] == b"\r":
            end += 1
        if data[end : end + 1] == b"\n":
            end += 1
        self.remove(start, end)

    def render(self) -> str:
        edits = sorted(self._edits)
        data = self.parsed.data
        pieces: List[bytes] = []
        cursor = 0
        for edit in edits:
            if edit.start < cursor:
                line = data.count(b"\n", 0, edit.start) + 1
                raise TransformError(f"overlapping rewrites near line {line}")
            pieces.append(data[cursor : edit.start])
            pieces.append(edit.text.encode("utf-8"))
            cursor = edit.end
        pieces.append(data[cursor:])
        return b"".join(pieces).decode("utf-8")


def tidy(text: str) -> str:
    """Collapse blank-line runs, drop leading blank lines, end with a single newline."""
    text = text.replace("\r\n", "\n")
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.lstrip("\n").rstrip() + "\n"


def indent_block(lines: Sequence[str], indent: str) -> str:
    """Join ``lines`` so each starts on its own line at ``indent``."""
    return "".join(f"\n{indent}{line}" if line else "\n" for line in lines)


__all__ = [
    "ParsedSource",
    "SourceEditor",
    "TSX_LANGUAGE",
    "import_source",
    "indent_block",
    "is_directive",
    "jsx_attribute_name",
    "jsx_tag_name",
    "parse_source",
    "string_value",
    "tidy",
    "top_level_statements",
    "unwrap_parens",
    "walk",
]
