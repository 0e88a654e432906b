"""Type and binding queries over a loaded project.

``TypeResolver`` answers the two questions the rewriting engine asks of a
Go expression: what is its type, and which top-level declaration does it
name. It is built once per run and never mutated afterwards, so a
reference in one file can be followed into a definition in another.

Coverage is deliberately partial. Anything outside the supported shapes
resolves to ``None`` (or an ``Opaque`` type) and therefore never matches.
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from .gotypes import (
    Array,
    Chan,
    GoType,
    Interface,
    Map,
    Named,
    Opaque,
    Pointer,
    Signature,
    Slice,
    Struct,
    predeclared,
)
from .loader import Declaration, Package, Project, SourceFile
from .parser import inspect, named, node_text, unwrap

logger = logging.getLogger(__name__)

_BINDING_FIELDS = {
    "short_var_declaration": "left",
    "range_clause": "left",
    "receive_statement": "left",
    "type_switch_statement": "alias",
}


class TypeResolver:
    """Read-only type and identifier lookups for one project."""

    def __init__(self, project: Project):
        self.project = project

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def resolve_type(self, source_file: SourceFile, node: Node | None) -> GoType:
        """Structural type denoted by a type expression in ``source_file``."""
        return self._resolve(source_file, node, frozenset())

    def _resolve(self, source_file: SourceFile, node: Node | None, seen: frozenset) -> GoType:
        if node is None:
            return Opaque("<none>")
        kind = node.type

        if kind == "type_identifier":
            return self._named(source_file.package_path, node_text(node), seen, qualified=False)
        if kind == "qualified_type":
            alias = node_text(node.child_by_field_name("package"))
            import_path = source_file.imports.get(alias)
            if import_path is None:
                return Opaque(node_text(node))
            return self._named(import_path, node_text(node.child_by_field_name("name")), seen, qualified=True)
        if kind == "pointer_type":
            return Pointer(self._resolve(source_file, named(node)[0], seen))
        if kind == "slice_type":
            return Slice(self._resolve(source_file, node.child_by_field_name("element"), seen))
        if kind == "array_type":
            return Array(node_text(node.child_by_field_name("length")),
                         self._resolve(source_file, node.child_by_field_name("element"), seen))
        if kind == "map_type":
            return Map(self._resolve(source_file, node.child_by_field_name("key"), seen),
                       self._resolve(source_file, node.child_by_field_name("value"), seen))
        if kind == "channel_type":
            text = node_text(node)
            direction = "recv" if text.startswith("<-") else "send" if text.startswith("chan<-") else "both"
            return Chan(direction, self._resolve(source_file, node.child_by_field_name("value"), seen))
        if kind == "function_type":
            return self.signature(source_file, node.child_by_field_name("parameters"),
                                  node.child_by_field_name("result"))
        if kind == "interface_type":
            return self._interface(source_file, node, seen)
        if kind == "struct_type":
            return self._struct(source_file, node, seen)
        if kind == "parenthesized_type":
            return self._resolve(source_file, named(node)[0], seen)
        return Opaque(node_text(node))

    def named_type(self, package_path: str, name: str) -> GoType:
        """Type that ``package_path.name`` denotes, with aliases followed."""
        return self._named(package_path, name, frozenset(), qualified=True)

    def _named(self, package_path: str, name: str, seen: frozenset, qualified: bool) -> GoType:
        package = self.project.package(package_path)
        if package is not None and name in package.types:
            spec_file, spec = package.types[name]
            if spec.type == "type_alias":
                key = (package_path, name)
                if key in seen:
                    return Opaque(name)
                return self._resolve(spec_file, spec.child_by_field_name("type"), seen | {key})
            return Named(package_path, name)
        if not qualified:
            builtin = predeclared(name)
            if builtin is not None:
                return builtin
        return Named(package_path, name)

    def _interface(self, source_file: SourceFile, node: Node, seen: frozenset) -> GoType:
        methods: list[tuple[str, GoType]] = []
        embedded: list[GoType] = []
        for elem in named(node):
            if elem.type in ("method_elem", "method_spec"):
                methods.append((node_text(elem.child_by_field_name("name")),
                                self.signature(source_file, elem.child_by_field_name("parameters"),
                                               elem.child_by_field_name("result"))))
            else:
                embedded.append(self._resolve(source_file, unwrap_type_elem(elem), seen))
        return Interface(tuple(sorted(methods, key=lambda m: m[0])), tuple(embedded))

    def _struct(self, source_file: SourceFile, node: Node, seen: frozenset) -> GoType:
        fields: list[tuple[str, GoType, bool]] = []
        body = named(node)
        for decl in named(body[0]) if body else []:
            if decl.type != "field_declaration":
                continue
            type_node = decl.child_by_field_name("type")
            field_type = self._resolve(source_file, type_node, seen)
            names = decl.children_by_field_name("name")
            if names:
                fields.extend((node_text(n), field_type, False) for n in names)
            else:
                fields.append((node_text(type_node).lstrip("*"), field_type, True))
        return Struct(tuple(fields))

    def signature(self, source_file: SourceFile, params: Node | None, result: Node | None) -> Signature:
        """Build a ``Signature`` from parameter and result nodes."""
        param_types, variadic = self._parameters(source_file, params)
        if result is None:
            results: list[GoType] = []
        elif result.type == "parameter_list":
            results, _ = self._parameters(source_file, result)
        else:
            results = [self.resolve_type(source_file, result)]
        return Signature(tuple(param_types), tuple(results), variadic)

    def _parameters(self, source_file: SourceFile, params: Node | None) -> tuple[list[GoType], bool]:
        types: list[GoType] = []
        variadic = False
        for decl in named(params) if params is not None else []:
            if decl.type == "parameter_declaration":
                param_type = self.resolve_type(source_file, decl.child_by_field_name("type"))
                count = max(1, len(decl.children_by_field_name("name")))
                types.extend([param_type] * count)
            elif decl.type == "variadic_parameter_declaration":
                types.append(Slice(self.resolve_type(source_file, decl.child_by_field_name("type"))))
                variadic = True
        return types, variadic

    def declared_signature(self, decl: Declaration) -> Signature:
        """Signature of a function or method, receiver excluded."""
        return self.signature(decl.file, decl.node.child_by_field_name("parameters"), decl.result)

    def local_types(self, decl: Declaration) -> dict[str, GoType]:
        """Receiver and parameter types of ``decl`` that the body never rebinds."""
        rebound = local_names(decl.body) if decl.body is not None else frozenset()
        types: dict[str, GoType] = {}
        for field_name in ("receiver", "parameters"):
            params = decl.node.child_by_field_name(field_name)
            for param in named(params) if params is not None else []:
                if param.type != "parameter_declaration":
                    continue
                param_type = self.resolve_type(decl.file, param.child_by_field_name("type"))
                for ident in param.children_by_field_name("name"):
                    types[node_text(ident)] = param_type
        return {name: t for name, t in types.items() if name != "_" and name not in rebound}

    def result_types(self, decl: Declaration) -> list[GoType]:
        """Declared result types of a function or method, in order."""
        return list(self.signature(decl.file, None, decl.result).results)

    def underlying(self, t: GoType) -> GoType:
        """Follow a defined project type to its underlying type."""
        seen: set[Named] = set()
        while isinstance(t, Named) and t not in seen:
            seen.add(t)
            package = self.project.package(t.package)
            if package is None or t.name not in package.types:
                return t
            spec_file, spec = package.types[t.name]
            t = self.resolve_type(spec_file, spec.child_by_field_name("type"))
        return t

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def type_of(self, source_file: SourceFile, expr: Node, shadowed: frozenset[str] = frozenset(),
                typed: dict[str, GoType] | None = None) -> GoType | None:
        """Type of a value expression, or None when it cannot be known.

        ``typed`` maps local names of known type (see ``local_types``) so
        that method values such as ``r.create`` resolve.
        """
        expr = unwrap(expr)
        if expr.type == "func_literal":
            return self.signature(source_file, expr.child_by_field_name("parameters"),
                                  expr.child_by_field_name("result"))
        method = self._method_value(expr, typed)
        if method is not None:
            return self.declared_signature(method)
        target = self._lookup(source_file, expr, shadowed)
        if target is None:
            return None
        package, name = target
        if name in package.functions:
            return self.declared_signature(package.functions[name])
        if name in package.variables:
            return self._variable_type(package, name)
        return None

    def definition_of(self, source_file: SourceFile, expr: Node, shadowed: frozenset[str] = frozenset(),
                      typed: dict[str, GoType] | None = None) -> Declaration | None:
        """Function or method a bare name, ``pkg.Name`` or method value refers to."""
        expr = unwrap(expr)
        method = self._method_value(expr, typed)
        if method is not None:
            return method
        target = self._lookup(source_file, expr, shadowed)
        if target is None:
            return None
        package, name = target
        return package.functions.get(name)

    def _method_value(self, expr: Node, typed: dict[str, GoType] | None) -> Declaration | None:
        if not typed or expr.type != "selector_expression":
            return None
        operand = unwrap(expr.child_by_field_name("operand"))
        if operand.type != "identifier":
            return None
        operand_type = typed.get(node_text(operand))
        if isinstance(operand_type, Pointer):
            operand_type = operand_type.elem
        if not isinstance(operand_type, Named):
            return None
        package = self.project.package(operand_type.package)
        if package is None:
            return None
        return package.methods.get((operand_type.name, node_text(expr.child_by_field_name("field"))))

    def _lookup(self, source_file: SourceFile, expr: Node, shadowed: frozenset[str]) -> tuple[Package, str] | None:
        if expr.type == "identifier":
            name = node_text(expr)
            if name in shadowed:
                return None
            package = self.project.package(source_file.package_path)
            return (package, name) if package is not None else None
        if expr.type == "selector_expression":
            operand = unwrap(expr.child_by_field_name("operand"))
            if operand.type != "identifier" or node_text(operand) in shadowed:
                return None
            import_path = source_file.imports.get(node_text(operand))
            package = self.project.package(import_path) if import_path else None
            if package is None:
                return None
            return package, node_text(expr.child_by_field_name("field"))
        return None

    def _variable_type(self, package: Package, name: str) -> GoType | None:
        spec_file, spec = package.variables[name]
        type_node = spec.child_by_field_name("type")
        if type_node is not None:
            return self.resolve_type(spec_file, type_node)
        names = [node_text(n) for n in spec.children_by_field_name("name")]
        values = spec.child_by_field_name("value")
        if values is None:
            return None
        exprs = named(values) if values.type == "expression_list" else [values]
        if len(exprs) != len(names):
            return None
        value = unwrap(exprs[names.index(name)])
        if value.type == "func_literal":
            return self.type_of(spec_file, value)
        return None


def unwrap_type_elem(node: Node) -> Node:
    """Interface embedding nodes wrap the embedded type in ``type_elem``."""
    if node.type in ("type_elem", "constraint_elem", "interface_type_name"):
        inner = named(node)
        if len(inner) == 1:
            return inner[0]
    return node


def local_names(decl_node: Node) -> frozenset[str]:
    """Every name declared inside a function or method, receiver included.

    Used to decide whether an identifier might refer to something other
    than a package-level declaration. Scopes are not tracked; a name bound
    anywhere in the declaration counts as shadowing everywhere in it.
    """
    names: set[str] = set()

    def visit(node: Node) -> bool:
        if node.type in ("parameter_declaration", "variadic_parameter_declaration",
                         "var_spec", "const_spec"):
            names.update(node_text(n) for n in node.children_by_field_name("name"))
        elif node.type in _BINDING_FIELDS:
            left = node.child_by_field_name(_BINDING_FIELDS[node.type])
            if left is not None:
                targets = named(left) if left.type == "expression_list" else [left]
                names.update(node_text(t) for t in targets if t.type == "identifier")
        return True

    inspect(decl_node, visit)
    names.discard("_")
    return frozenset(names)
