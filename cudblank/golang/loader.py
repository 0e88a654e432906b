"""Discover and parse the Go packages of a module.

Plays the role ``golang.org/x/tools/go/packages`` plays for Go tools:
given a project root and a package selector, it returns every parsed file
with its imports and top-level declarations. Loading is all-or-nothing;
any unreadable or unparsable file aborts with ``LoadError``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from tree_sitter import Node, Tree

from ..errors import LoadError
from .parser import first_syntax_error, iter_specs, line_of, named, node_text, parse_source

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)
_MAJOR_VERSION_RE = re.compile(r"^v\d+$")
_SKIP_DIRS = {"testdata", "vendor"}


@dataclass(eq=False)
class Declaration:
    """A top-level function or method."""

    name: str
    node: Node
    file: SourceFile
    is_method: bool = False

    @property
    def body(self) -> Node | None:
        return self.node.child_by_field_name("body")

    @property
    def result(self) -> Node | None:
        return self.node.child_by_field_name("result")

    @property
    def key(self) -> tuple[str, int]:
        return str(self.file.path), self.node.start_byte

    @property
    def line(self) -> int:
        return line_of(self.node)


@dataclass(eq=False)
class SourceFile:
    path: Path
    package_path: str
    package_name: str
    source: bytes
    tree: Tree
    imports: dict[str, str] = field(default_factory=dict)
    declarations: list[Declaration] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node


@dataclass(eq=False)
class Package:
    """One directory of Go files sharing a package clause."""

    path: str
    name: str
    directory: Path
    files: list[SourceFile] = field(default_factory=list)
    functions: dict[str, Declaration] = field(default_factory=dict)
    types: dict[str, tuple[SourceFile, Node]] = field(default_factory=dict)
    variables: dict[str, tuple[SourceFile, Node]] = field(default_factory=dict)
    methods: dict[tuple[str, str], Declaration] = field(default_factory=dict)  # (receiver type, name)


@dataclass(eq=False)
class Project:
    root: Path
    module_path: str
    packages: dict[str, Package] = field(default_factory=dict)

    def package(self, path: str) -> Package | None:
        return self.packages.get(path)

    def packages_under(self, prefix: str) -> list[Package]:
        """Packages whose import path starts with ``prefix``, sorted by path."""
        return [self.packages[p] for p in sorted(self.packages) if p.startswith(prefix)]

    def files(self) -> list[SourceFile]:
        return [f for p in sorted(self.packages) for f in self.packages[p].files]


def read_module_path(root: Path) -> str:
    """Return the module path declared in ``root/go.mod``."""
    gomod = root / "go.mod"
    try:
        content = gomod.read_text(encoding="utf-8")
    except OSError as e:
        raise LoadError(f"cannot read go.mod: {e.strerror or e}", str(gomod)) from e
    match = _MODULE_RE.search(content)
    if not match:
        raise LoadError("no module directive", str(gomod))
    return match.group(1)


def _is_go_source(path: Path) -> bool:
    return path.suffix == ".go" and not path.name.endswith("_test.go")


def _skipped(name: str) -> bool:
    return name in _SKIP_DIRS or name.startswith((".", "_"))


def discover_packages(root: Path, selector: str) -> list[Path]:
    """Directories selected by a ``./dir/...`` style pattern, sorted."""
    recursive = selector.endswith("/...") or selector == "..."
    base = selector[:-len("...")].rstrip("/") if recursive else selector
    base = base.removeprefix("./").strip("/")
    start = (root / base) if base and base != "." else root
    if not start.is_dir():
        return []

    candidates = [start]
    if recursive:
        candidates += [
            d for d in start.rglob("*")
            if d.is_dir() and not any(_skipped(part) for part in d.relative_to(start).parts)
        ]
    return sorted(d for d in candidates if any(_is_go_source(f) for f in d.iterdir() if f.is_file()))


def _parse_file(path: Path) -> tuple[bytes, Tree, str]:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise LoadError(f"cannot read file: {e.strerror or e}", str(path)) from e
    tree = parse_source(data)
    bad = first_syntax_error(tree.root_node)
    if bad is not None:
        raise LoadError(f"syntax error at line {line_of(bad)}", str(path))
    clause = next((c for c in named(tree.root_node) if c.type == "package_clause"), None)
    if clause is None:
        raise LoadError("missing package clause", str(path))
    return data, tree, node_text(named(clause)[0])


def _load_package(root: Path, module_path: str, directory: Path) -> Package:
    rel = directory.relative_to(root).as_posix()
    import_path = module_path if rel == "." else f"{module_path}/{rel}"
    files: list[SourceFile] = []
    for path in sorted(p for p in directory.iterdir() if p.is_file() and _is_go_source(p)):
        data, tree, name = _parse_file(path)
        files.append(SourceFile(path=path, package_path=import_path, package_name=name,
                                source=data, tree=tree))

    names = sorted({f.package_name for f in files})
    if len(names) > 1:
        raise LoadError(f"found packages {' and '.join(names)}", str(directory))

    package = Package(path=import_path, name=names[0], directory=directory, files=files)
    for source_file in files:
        _index_declarations(package, source_file)
    return package


def receiver_type_name(method: Node) -> str | None:
    """Base type name of a method receiver: ``T`` for ``(r T)``, ``(r *T)`` and ``(r T[K])``."""
    receiver = method.child_by_field_name("receiver")
    params = named(receiver) if receiver is not None else []
    if not params:
        return None
    type_node = params[0].child_by_field_name("type")
    while type_node is not None and type_node.type in ("pointer_type", "parenthesized_type"):
        inner = named(type_node)
        type_node = inner[0] if inner else None
    if type_node is not None and type_node.type == "generic_type":
        type_node = type_node.child_by_field_name("type")
    if type_node is None or type_node.type != "type_identifier":
        return None
    return node_text(type_node)


def _index_declarations(package: Package, source_file: SourceFile) -> None:
    for node in named(source_file.root):
        if node.type == "function_declaration":
            name = node_text(node.child_by_field_name("name"))
            decl = Declaration(name=name, node=node, file=source_file)
            source_file.declarations.append(decl)
            if name not in ("_", "init"):
                package.functions[name] = decl
        elif node.type == "method_declaration":
            name = node_text(node.child_by_field_name("name"))
            decl = Declaration(name=name, node=node, file=source_file, is_method=True)
            source_file.declarations.append(decl)
            receiver = receiver_type_name(node)
            if receiver:
                package.methods[(receiver, name)] = decl
        elif node.type == "type_declaration":
            for spec in iter_specs(node, {"type_spec", "type_alias"}):
                package.types[node_text(spec.child_by_field_name("name"))] = (source_file, spec)
        elif node.type == "var_declaration":
            for spec in iter_specs(node, {"var_spec"}):
                for ident in spec.children_by_field_name("name"):
                    package.variables[node_text(ident)] = (source_file, spec)


def _default_alias(import_path: str, project: Project) -> str:
    package = project.package(import_path)
    if package is not None:
        return package.name
    parts = import_path.split("/")
    if len(parts) > 1 and _MAJOR_VERSION_RE.match(parts[-1]):
        return parts[-2]
    return parts[-1]


def _index_imports(source_file: SourceFile, project: Project) -> None:
    for node in named(source_file.root):
        if node.type != "import_declaration":
            continue
        for spec in iter_specs(node, {"import_spec"}):
            import_path = node_text(spec.child_by_field_name("path")).strip("\"`")
            alias_node = spec.child_by_field_name("name")
            alias = node_text(alias_node) if alias_node is not None else _default_alias(import_path, project)
            if alias in ("_", "."):
                continue
            source_file.imports[alias] = import_path


def load_project(root: Path | str, selector: str) -> Project:
    """Load every package matched by ``selector`` under ``root``."""
    root = Path(root).resolve()
    project = Project(root=root, module_path=read_module_path(root))

    directories = discover_packages(root, selector)
    if not directories:
        raise LoadError(f"no Go packages match {selector}", str(root))

    for directory in directories:
        package = _load_package(root, project.module_path, directory)
        project.packages[package.path] = package
        logger.debug("loaded %s (%d files)", package.path, len(package.files))

    for source_file in project.files():
        _index_imports(source_file, project)

    logger.info("Loaded %d package(s) from %s", len(project.packages), root)
    return project
