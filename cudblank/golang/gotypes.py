"""Structural model of Go types.

Instances are immutable and compare the way ``types.Identical`` does in
the Go toolchain: defined types by package path and name, everything else
by structure. Parameter names never take part in identity.
"""

from __future__ import annotations

from dataclasses import dataclass

NUMERIC = frozenset({
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64", "complex64", "complex128",
})

PREDECLARED = NUMERIC | {"bool", "string", "error", "comparable"}

_ALIASES = {"byte": "uint8", "rune": "int32"}


class GoType:
    """Marker base class."""

    __slots__ = ()


@dataclass(frozen=True)
class Basic(GoType):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Named(GoType):
    """A defined type, identified by its declaring package and name."""

    package: str
    name: str

    def __str__(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


@dataclass(frozen=True)
class Pointer(GoType):
    elem: GoType

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(frozen=True)
class Slice(GoType):
    elem: GoType

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass(frozen=True)
class Array(GoType):
    length: str
    elem: GoType

    def __str__(self) -> str:
        return f"[{self.length}]{self.elem}"


@dataclass(frozen=True)
class Map(GoType):
    key: GoType
    value: GoType

    def __str__(self) -> str:
        return f"map[{self.key}]{self.value}"


@dataclass(frozen=True)
class Chan(GoType):
    direction: str  # "both", "send" or "recv"
    elem: GoType

    def __str__(self) -> str:
        prefix = {"both": "chan ", "send": "chan<- ", "recv": "<-chan "}[self.direction]
        return f"{prefix}{self.elem}"


@dataclass(frozen=True)
class Signature(GoType):
    """A function type: ordered parameter and result types."""

    params: tuple[GoType, ...]
    results: tuple[GoType, ...]
    variadic: bool = False

    def __str__(self) -> str:
        params = [str(p) for p in self.params]
        if self.variadic and params:
            params[-1] = "..." + params[-1][2:]
        text = f"func({', '.join(params)})"
        if len(self.results) == 1:
            return f"{text} {self.results[0]}"
        if self.results:
            return f"{text} ({', '.join(str(r) for r in self.results)})"
        return text


@dataclass(frozen=True)
class Interface(GoType):
    """Interface type keyed by its sorted explicit method set."""

    methods: tuple[tuple[str, GoType], ...] = ()
    embedded: tuple[GoType, ...] = ()

    def __str__(self) -> str:
        if not self.methods and not self.embedded:
            return "interface{}"
        names = [name for name, _ in self.methods] + [str(e) for e in self.embedded]
        return "interface{" + "; ".join(names) + "}"


@dataclass(frozen=True)
class Struct(GoType):
    fields: tuple[tuple[str, GoType, bool], ...] = ()

    def __str__(self) -> str:
        return "struct{" + "; ".join(f"{n} {t}" for n, t, _ in self.fields) + "}"


@dataclass(frozen=True, eq=False)
class Opaque(GoType):
    """A type the resolver does not model. Identical only to itself."""

    text: str

    def __str__(self) -> str:
        return f"<opaque {self.text}>"


def predeclared(name: str) -> GoType | None:
    """Return the universe-scope type for ``name``, if it is one."""
    if name == "any":
        return Interface()
    name = _ALIASES.get(name, name)
    if name in PREDECLARED:
        return Basic(name)
    return None


def identical(a: GoType | None, b: GoType | None) -> bool:
    """Go type identity. An unknown type is never identical to anything."""
    if a is None or b is None:
        return False
    return a == b


def is_nilable(t: GoType) -> bool:
    if isinstance(t, Basic):
        return t.name == "error"
    return isinstance(t, (Pointer, Slice, Map, Chan, Signature, Interface))
