"""Locate lifecycle functions under the two authoring conventions.

Field assignment (convention A)::

    func resourceFoo() *pluginsdk.Resource {
        return &pluginsdk.Resource{Create: resourceFooCreate, ...}
    }

Named method (convention B)::

    func (r FooResource) Create() sdk.ResourceFunc {
        return sdk.ResourceFunc{Func: func(ctx context.Context, metadata sdk.ResourceMetaData) error {...}}
    }

Each matcher is a plain function from a declaration to its match sites;
the project-level entry points just run them over every service file.
"""

import logging
from dataclasses import dataclass, field

from tree_sitter import Node

from .golang import Declaration, Project, SourceFile, TypeResolver, local_names
from .golang.gotypes import GoType, identical
from .golang.parser import inspect, keyed_pair, line_of, node_text
from .registry import SignatureRegistry
from .targets import (
    FIELD_ASSIGNMENT,
    LIFECYCLE_KEYS,
    LIFECYCLE_METHODS,
    NAMED_METHOD,
    SDK_FUNC_KEY,
    SERVICES_PREFIX,
    package_path,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class MatchSite:
    """A value expression whose type equals a target signature."""

    convention: str
    key: str
    expression: Node
    declaration: Declaration
    shadowed: frozenset[str] = frozenset()
    typed: dict[str, GoType] = field(default_factory=dict)

    @property
    def file(self) -> SourceFile:
        return self.declaration.file

    @property
    def line(self) -> int:
        return line_of(self.expression)

    @property
    def is_literal(self) -> bool:
        return self.expression.type == "func_literal"

    def __repr__(self) -> str:
        return f"MatchSite({self.convention} {self.key} at {self.file.path}:{self.line})"


def sole_result(resolver: TypeResolver, decl: Declaration) -> GoType | None:
    results = resolver.result_types(decl)
    return results[0] if len(results) == 1 else None


def _keyed_sites(
    resolver: TypeResolver,
    decl: Declaration,
    keys: frozenset[str],
    target: GoType,
    convention: str,
) -> list[MatchSite]:
    """Every ``Key: value`` pair in the body with a matching key and value type.

    A matched pair is not descended into; siblings and nested composite
    values elsewhere in the body are still visited.
    """
    body = decl.body
    if body is None:
        return []
    shadowed = local_names(decl.node)
    typed = resolver.local_types(decl)
    sites: list[MatchSite] = []

    def visit(node: Node) -> bool:
        if node.type != "keyed_element":
            return True
        pair = keyed_pair(node)
        if pair is None:
            return True
        key, value = pair
        if key.type not in ("identifier", "field_identifier") or node_text(key) not in keys:
            return True
        if not identical(resolver.type_of(decl.file, value, shadowed, typed), target):
            return True
        sites.append(MatchSite(convention=convention, key=node_text(key), expression=value,
                               declaration=decl, shadowed=shadowed, typed=typed))
        return False

    inspect(body, visit)
    return sites


def field_assignment_sites(resolver: TypeResolver, decl: Declaration,
                           registry: SignatureRegistry) -> list[MatchSite]:
    """Convention A sites within one declaration (at most one per lifecycle key)."""
    if not identical(sole_result(resolver, decl), registry.descriptor_type):
        return []
    return _keyed_sites(resolver, decl, LIFECYCLE_KEYS, registry.field_assignment, FIELD_ASSIGNMENT)


def named_method_sites(resolver: TypeResolver, decl: Declaration,
                       registry: SignatureRegistry) -> list[MatchSite]:
    """Convention B sites within one declaration."""
    if decl.name not in LIFECYCLE_METHODS:
        return []
    if not identical(sole_result(resolver, decl), registry.operation_type):
        return []
    return _keyed_sites(resolver, decl, frozenset({SDK_FUNC_KEY}), registry.named_method, NAMED_METHOD)


def _service_files(project: Project) -> list[SourceFile]:
    prefix = package_path(project.module_path, SERVICES_PREFIX) + "/"
    return [f for p in project.packages_under(prefix) for f in p.files]


def _match(project: Project, resolver: TypeResolver, registry: SignatureRegistry, matcher) -> list[MatchSite]:
    sites: list[MatchSite] = []
    for source_file in _service_files(project):
        for decl in source_file.declarations:
            found = matcher(resolver, decl, registry)
            for site in found:
                logger.debug("%s: %s %s in %s", site.convention, site.key,
                             "literal" if site.is_literal else node_text(site.expression), decl.name)
            sites.extend(found)
    return sites


def match_field_assignments(project: Project, resolver: TypeResolver,
                            registry: SignatureRegistry) -> list[MatchSite]:
    return _match(project, resolver, registry, field_assignment_sites)


def match_named_methods(project: Project, resolver: TypeResolver,
                        registry: SignatureRegistry) -> list[MatchSite]:
    return _match(project, resolver, registry, named_method_sites)
