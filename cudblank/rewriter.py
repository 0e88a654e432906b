"""Turn match and definition sites into byte-range edits.

Two mutation kinds exist:

* ``blank_value`` replaces a matched value expression with ``nil``.
* ``blank_body`` replaces a function body with a single ``return`` of the
  zero value for its results.

A body that already is the sentinel body yields no mutation, which keeps
repeated runs and shared definitions from being rewritten twice.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from .golang import Declaration, TypeResolver
from .golang.gotypes import NUMERIC, Array, Basic, GoType, Struct, is_nilable
from .golang.parser import line_indent, line_of, named, node_text
from .matchers import MatchSite
from .resolver import DefinitionSite
from .targets import SENTINEL

logger = logging.getLogger(__name__)

BLANK_VALUE = "blank_value"
BLANK_BODY = "blank_body"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class Mutation:
    """A single edit to one file."""

    kind: str
    path: Path
    start: int
    end: int
    replacement: str
    line: int
    target: str  # function or key the edit applies to

    def contains(self, other: "Mutation") -> bool:
        return self.start <= other.start and other.end <= self.end


def _result_type_nodes(result: Node | None) -> list[Node]:
    if result is None:
        return []
    if result.type != "parameter_list":
        return [result]
    nodes: list[Node] = []
    for decl in named(result):
        type_node = decl.child_by_field_name("type")
        nodes.extend([type_node] * max(1, len(decl.children_by_field_name("name"))))
    return nodes


def zero_value(resolver: TypeResolver, t: GoType, type_text: str) -> str:
    """Go source for the zero value of ``t``."""
    underlying = resolver.underlying(t)
    if is_nilable(underlying):
        return "nil"
    if isinstance(underlying, Basic):
        if underlying.name in NUMERIC:
            return "0"
        if underlying.name == "string":
            return '""'
        if underlying.name == "bool":
            return "false"
    if isinstance(underlying, (Struct, Array)):
        return f"{type_text}{{}}"
    return f"*new({type_text})"


def sentinel_body(resolver: TypeResolver, decl: Declaration) -> str:
    """Replacement block for a definition, indented like the declaration."""
    indent = line_indent(decl.file.source, decl.node)
    types = resolver.result_types(decl)
    if not types:
        return "{\n" + indent + "}"
    nodes = _result_type_nodes(decl.result)
    values = ", ".join(zero_value(resolver, t, node_text(n)) for t, n in zip(types, nodes))
    return "{\n" + indent + "\treturn " + values + "\n" + indent + "}"


def is_blanked(body: Node, replacement: str) -> bool:
    return _WHITESPACE.sub("", node_text(body)) == _WHITESPACE.sub("", replacement)


def blank_value(site: MatchSite) -> Mutation:
    return Mutation(
        kind=BLANK_VALUE,
        path=site.file.path,
        start=site.expression.start_byte,
        end=site.expression.end_byte,
        replacement=SENTINEL,
        line=site.line,
        target=f"{site.declaration.name}.{site.key}",
    )


def blank_body(resolver: TypeResolver, definition: DefinitionSite) -> Mutation | None:
    decl = definition.declaration
    body = decl.body
    if body is None:
        return None
    replacement = sentinel_body(resolver, decl)
    if is_blanked(body, replacement):
        logger.debug("%s is already blank", decl.name)
        return None
    return Mutation(
        kind=BLANK_BODY,
        path=decl.file.path,
        start=body.start_byte,
        end=body.end_byte,
        replacement=replacement,
        line=line_of(decl.node),
        target=decl.name,
    )


def _drop_nested(mutations: list[Mutation]) -> list[Mutation]:
    kept: list[Mutation] = []
    for mutation in sorted(mutations, key=lambda m: (m.start, -m.end)):
        if kept and kept[-1].contains(mutation):
            logger.debug("%s:%d already covered by %s", mutation.path, mutation.line, kept[-1].target)
            continue
        kept.append(mutation)
    return kept


def plan_mutations(
    resolver: TypeResolver,
    direct: list[MatchSite],
    definitions: list[DefinitionSite],
) -> dict[Path, list[Mutation]]:
    """Group every pending edit by file, in source order."""
    by_file: dict[Path, list[Mutation]] = defaultdict(list)
    for site in direct:
        by_file[site.file.path].append(blank_value(site))
    for definition in definitions:
        mutation = blank_body(resolver, definition)
        if mutation is not None:
            by_file[mutation.path].append(mutation)
    return {path: _drop_nested(muts) for path, muts in sorted(by_file.items())}


def apply_mutations(source: bytes, mutations: list[Mutation]) -> bytes:
    """Splice the edits into ``source``, last edit first so offsets stay valid."""
    for mutation in sorted(mutations, key=lambda m: m.start, reverse=True):
        source = source[:mutation.start] + mutation.replacement.encode("utf-8") + source[mutation.end:]
    return source
