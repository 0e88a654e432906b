"""Follow field-assignment references back to their function definitions.

A named function reused by several descriptors is blanked once, where it
is defined, instead of at each use. Function literals have no separate
definition and stay use-site matches, as do all named-method sites.
"""

import logging
from dataclasses import dataclass, field

from .errors import ResolutionError
from .golang import Declaration, TypeResolver
from .golang.parser import node_text
from .matchers import MatchSite
from .targets import FIELD_ASSIGNMENT

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class DefinitionSite:
    """A function declaration referenced by one or more match sites."""

    declaration: Declaration
    references: list[MatchSite] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        return self.declaration.key


def resolve_sites(resolver: TypeResolver,
                  sites: list[MatchSite]) -> tuple[list[MatchSite], list[DefinitionSite]]:
    """Split sites into use-site mutations and deduplicated definitions."""
    direct: list[MatchSite] = []
    definitions: dict[tuple[str, int], DefinitionSite] = {}

    for site in sites:
        if site.convention != FIELD_ASSIGNMENT or site.is_literal:
            direct.append(site)
            continue

        decl = resolver.definition_of(site.file, site.expression, site.shadowed, site.typed)
        if decl is None:
            raise ResolutionError(
                f"{site.key}: {node_text(site.expression)} (line {site.line}) "
                "does not refer to a function declaration",
                str(site.file.path),
            )
        definition = definitions.setdefault(decl.key, DefinitionSite(declaration=decl))
        definition.references.append(site)

    for definition in definitions.values():
        if len(definition.references) > 1:
            logger.debug("%s is referenced %d times", definition.declaration.name,
                         len(definition.references))
    return direct, list(definitions.values())
