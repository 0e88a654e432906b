"""Go semantic model: parsing, package loading and type queries."""

from .loader import Declaration, Package, Project, SourceFile, load_project, read_module_path
from .semantics import TypeResolver, local_names

__all__ = [
    "Declaration",
    "Package",
    "Project",
    "SourceFile",
    "TypeResolver",
    "load_project",
    "local_names",
    "read_module_path",
]
