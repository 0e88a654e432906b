"""One rewriting run: load, register, match, resolve, rewrite, serialize.

Phases run strictly in order. Every file is matched before any file is
written, because a reference in one file may resolve to a definition in
another.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .golang import TypeResolver, load_project
from .matchers import match_field_assignments, match_named_methods
from .registry import build_registry
from .resolver import resolve_sites
from .rewriter import Mutation, apply_mutations, plan_mutations
from .serializer import serialize

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What a run changed (or, for a dry run, would change)."""

    root: Path
    dry_run: bool = False
    mutations: dict[Path, list[Mutation]] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
    sites: int = 0
    definitions: int = 0

    @property
    def total(self) -> int:
        return sum(len(m) for m in self.mutations.values())

    def relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)


def run(root: Path | str, config: dict) -> RunReport:
    """Rewrite every matched lifecycle function under ``root``."""
    root = Path(root).resolve()
    dry_run = bool(config.get("dry_run"))

    logger.info("Loading %s", config["packages"])
    project = load_project(root, config["packages"])
    resolver = TypeResolver(project)
    registry = build_registry(project, resolver)

    sites = match_field_assignments(project, resolver, registry)
    sites += match_named_methods(project, resolver, registry)
    logger.info("Matched %d site(s)", len(sites))

    direct, definitions = resolve_sites(resolver, sites)
    logger.info("Resolved %d definition(s), %d use site(s)", len(definitions), len(direct))

    report = RunReport(root=root, dry_run=dry_run, sites=len(sites), definitions=len(definitions))
    report.mutations = {path: muts for path, muts in plan_mutations(resolver, direct, definitions).items() if muts}

    sources = {f.path: f.source for f in project.files()}
    for path, mutations in report.mutations.items():
        if dry_run:
            logger.info("Would rewrite %s (%d)", report.relative(path), len(mutations))
            continue
        serialize(path, apply_mutations(sources[path], mutations), config.get("formatter"))
        report.written.append(path)

    logger.info("%d mutation(s) in %d file(s)", report.total, len(report.mutations))
    return report
