"""Queryable semantic model built from a syntax tree."""

import weakref
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from designproof.parsers.syntax import Span, SyntaxNode

INSTANTIATED = "instantiated"
REQUIRED = "required"
EXTENDED = "extended"

PROPERTY_DECORATORS = frozenset({"property", "cached_property", "setter", "deleter"})


@dataclass(frozen=True)
class DependencyEdge:
    """A dependency from a type onto another type name."""

    kind: str  # instantiated, required, extended
    target: str


@dataclass(frozen=True)
class AttributeInfo:
    """A data member exposed by a type."""

    name: str
    visibility: str  # public, protected, private, magic
    accessor: str  # attribute, property, setter
    line: int


@dataclass(frozen=True)
class MethodInfo:
    """A method (or module-level function) and its body metrics."""

    name: str
    span: Span
    param_count: int
    conditional_count: int = 0
    external_call_count: int = 0
    self_access_count: int = 0
    max_chain_depth: int = 0
    is_class_level: bool = False
    is_abstract: bool = False
    is_variadic: bool = False
    raises_unconditionally: bool = False
    visibility: str = "public"
    body_signature: str = ""
    body_size: int = 0
    return_type: str = "unknown"
    decorators: tuple[str, ...] = ()
    body_ref: Optional[weakref.ref] = field(default=None, repr=False, compare=False)

    @property
    def body(self) -> Optional[SyntaxNode]:
        """Body node, if the owning tree is still alive."""
        return self.body_ref() if self.body_ref is not None else None

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

    @property
    def is_property(self) -> bool:
        return any(d.rsplit(".", 1)[-1] in PROPERTY_DECORATORS for d in self.decorators)


@dataclass(frozen=True)
class TypeInfo:
    """A class (or module acting as a namespace) in the analyzed unit."""

    name: str
    qualified_name: str
    kind: str  # class, module
    span: Span
    methods: tuple[MethodInfo, ...] = ()
    attributes: tuple[AttributeInfo, ...] = ()
    dependencies: frozenset[DependencyEdge] = frozenset()
    bases: tuple[str, ...] = ()
    is_abstract: bool = False

    @property
    def is_class(self) -> bool:
        return self.kind == "class"

    @property
    def method_count(self) -> int:
        return len(self.methods)

    @property
    def public_methods(self) -> list[MethodInfo]:
        return [m for m in self.methods if m.is_public and not m.is_property]

    @property
    def class_level_methods(self) -> list[MethodInfo]:
        return [m for m in self.methods if m.is_class_level]

    @property
    def instance_methods(self) -> list[MethodInfo]:
        return [m for m in self.methods if not m.is_class_level]

    @property
    def conditional_count(self) -> int:
        return sum(m.conditional_count for m in self.methods)

    @property
    def public_attributes(self) -> list[AttributeInfo]:
        return [a for a in self.attributes if a.visibility == "public"]

    @property
    def visibility_ratio(self) -> float:
        """Public members over all non-magic members."""
        members = [m.visibility for m in self.methods if not m.is_property]
        members += [a.visibility for a in self.attributes]
        members = [v for v in members if v != "magic"]
        if not members:
            return 0.0
        return sum(1 for v in members if v == "public") / len(members)

    def dependency_targets(self, kind: str) -> set[str]:
        return {edge.target for edge in self.dependencies if edge.kind == kind}

    def get_method(self, name: str) -> Optional[MethodInfo]:
        for method in self.methods:
            if method.name == name:
                return method
        return None


@dataclass(frozen=True)
class SemanticModel:
    """Mapping of qualified type name to ``TypeInfo``, immutable once built."""

    types: Mapping[str, TypeInfo]
    unit_name: str = "<module>"
    skipped_regions: tuple[Span, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))

    def __iter__(self) -> Iterator[TypeInfo]:
        return iter(self.types.values())

    def __len__(self) -> int:
        return len(self.types)

    def get(self, qualified_name: str) -> Optional[TypeInfo]:
        return self.types.get(qualified_name)

    def classes(self) -> list[TypeInfo]:
        return [t for t in self.types.values() if t.is_class]

    def methods(self) -> Iterator[tuple[TypeInfo, MethodInfo]]:
        for type_info in self.types.values():
            for method in type_info.methods:
                yield type_info, method

    def resolve(self, name: str) -> Optional[TypeInfo]:
        """Find a type by qualified name, falling back to its short name."""
        if name in self.types:
            return self.types[name]
        short = name.rsplit(".", 1)[-1]
        for type_info in self.types.values():
            if type_info.name == short:
                return type_info
        return None

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped_regions)
