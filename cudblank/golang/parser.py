"""tree-sitter front-end for Go sources.

Thin helpers over the tree-sitter-go grammar. Node shapes differ slightly
between grammar releases (``literal_element`` wrappers, ``*_spec_list``
containers, ``statement_list`` in blocks), so lookups go through the
helpers here instead of indexing children directly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree

GO_LANGUAGE = Language(tsgo.language())
_parser = Parser(GO_LANGUAGE)

_WRAPPERS = {"literal_element", "element"}


def parse_source(data: bytes) -> Tree:
    """Parse Go source bytes into a tree-sitter tree."""
    return _parser.parse(data)


def node_text(node: Node | None) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8")


def line_of(node: Node) -> int:
    """1-based line number of the node's first byte."""
    return node.start_point[0] + 1


def first_syntax_error(root: Node) -> Node | None:
    """Return the first ERROR or MISSING node in the tree, if any."""
    if not root.has_error:
        return None
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed(node.children))
    return root


def named(node: Node) -> list[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def unwrap(node: Node) -> Node:
    """Strip grammar wrappers such as ``literal_element``."""
    while node.type in _WRAPPERS or node.type == "parenthesized_expression":
        inner = named(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def iter_specs(decl: Node, kinds: set[str]) -> Iterator[Node]:
    """Yield the specs of a ``type``/``var``/``const``/``import`` declaration."""
    for child in named(decl):
        if child.type in kinds:
            yield child
        elif child.type.endswith("_list"):
            for spec in named(child):
                if spec.type in kinds:
                    yield spec


def keyed_pair(node: Node) -> tuple[Node, Node] | None:
    """Return ``(key, value)`` of a ``keyed_element``, wrappers removed."""
    parts = named(node)
    if len(parts) != 2:
        return None
    return unwrap(parts[0]), unwrap(parts[1])


def block_statements(block: Node) -> list[Node]:
    stmts: list[Node] = []
    for child in named(block):
        if child.type == "statement_list":
            stmts.extend(named(child))
        else:
            stmts.append(child)
    return stmts


def inspect(node: Node, visit: Callable[[Node], bool]) -> None:
    """Pre-order walk; children are skipped when ``visit`` returns False."""
    stack = [node]
    while stack:
        current = stack.pop()
        if not visit(current):
            continue
        stack.extend(reversed(current.named_children))


def line_indent(source: bytes, node: Node) -> str:
    """Leading whitespace of the line the node starts on."""
    start = source.rfind(b"\n", 0, node.start_byte) + 1
    end = start
    while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
        end += 1
    return source[start:end].decode("utf-8")
