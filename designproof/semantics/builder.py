"""Semantic model builder.

Walks a generic syntax tree once, depth first, keeping a stack of the
types being defined and the method currently open, and accumulates:
- Types with their methods, attributes, bases and dependency edges
- Per-method conditional, external-call and call-chain metrics
- A normalized structural signature of every method body
"""

import builtins
import hashlib
import logging
import re
import weakref
from dataclasses import dataclass, field
from typing import Optional

from designproof.parsers.syntax import Span, SyntaxNode
from designproof.semantics.model import (
    EXTENDED,
    INSTANTIATED,
    REQUIRED,
    AttributeInfo,
    DependencyEdge,
    MethodInfo,
    SemanticModel,
    TypeInfo,
)
from designproof.semantics.type_inference import TypeInferenceStrategy, UnknownTypeStrategy

logger = logging.getLogger(__name__)

BUILTIN_NAMES = frozenset(dir(builtins))
RECEIVER_NAMES = frozenset({"self", "cls"})
ABSTRACT_BASES = frozenset({"ABC", "Protocol"})

LITERAL_KINDS = frozenset(
    {"string", "concatenated_string", "integer", "float", "true", "false", "none"}
)
PRIMITIVE_KINDS = LITERAL_KINDS | frozenset(
    {
        "list",
        "dictionary",
        "tuple",
        "set",
        "list_comprehension",
        "dictionary_comprehension",
        "set_comprehension",
    }
)
PARAMETER_SEPARATORS = frozenset({"keyword_separator", "positional_separator", "comment"})
SIMPLE_TYPE_RE = re.compile(r"^[A-Za-z_][\w.]*$")


def visibility_of(name: str) -> str:
    """Visibility from Python naming conventions."""
    if name.startswith("__") and name.endswith("__"):
        return "magic"
    if name.startswith("__"):
        return "private"
    if name.startswith("_"):
        return "protected"
    return "public"


def is_type_name(name: str) -> bool:
    """PascalCase names that are not builtins are treated as project types."""
    short = name.rsplit(".", 1)[-1]
    return (
        bool(short)
        and short[0].isupper()
        and any(c.islower() for c in short)
        and short not in BUILTIN_NAMES
    )


def dotted_name(node: Optional[SyntaxNode]) -> Optional[str]:
    """``a.b.c`` for identifier/attribute chains, else None."""
    parts: list[str] = []
    while node is not None:
        if node.kind == "identifier":
            if node.text is None:
                return None
            parts.append(node.text)
            return ".".join(reversed(parts))
        if node.kind == "attribute":
            attr = node.child_by_field("attribute")
            if attr is None or attr.text is None:
                return None
            parts.append(attr.text)
            node = node.child_by_field("object")
        elif node.kind == "call":
            node = node.child_by_field("function")
        else:
            return None
    return None


def chain_depth(node: Optional[SyntaxNode]) -> int:
    """Number of consecutive dotted hops in an expression.

    A hop off ``self``/``cls`` is free; anything other than a call or an
    attribute breaks the chain.
    """
    depth = 0
    while node is not None:
        if node.kind == "call":
            node = node.child_by_field("function")
        elif node.kind == "attribute":
            obj = node.child_by_field("object")
            if obj is None:
                return depth
            if obj.kind == "identifier" and obj.text in RECEIVER_NAMES:
                return depth
            depth += 1
            node = obj
        else:
            return depth
    return depth


def normalize_body(body: SyntaxNode) -> tuple[str, int]:
    """Structural fingerprint of a body with identifiers and literals abstracted.

    Returns:
        Tuple of (signature hash, number of nodes in the normalized body)
    """
    tokens: list[str] = []
    size = 0
    stack: list[object] = [body]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            tokens.append(item)
            continue
        node = item
        if node.kind == "comment":
            continue
        size += 1
        if node.kind == "identifier":
            tokens.append("ID")
            continue
        if node.kind in LITERAL_KINDS:
            tokens.append("LIT")
            continue
        if node.is_leaf:
            tokens.append(node.kind)
            continue
        tokens.append(f"{node.kind}(")
        stack.append(")")
        stack.extend(reversed(node.children))
    digest = hashlib.sha1(" ".join(tokens).encode("utf-8")).hexdigest()
    return digest, size


def _is_docstring(statement: SyntaxNode) -> bool:
    return (
        statement.kind == "expression_statement"
        and len(statement.children) == 1
        and statement.children[0].kind in ("string", "concatenated_string")
    )


def _body_statements(body: SyntaxNode) -> list[SyntaxNode]:
    statements = [child for child in body.children if child.kind != "comment"]
    if statements and _is_docstring(statements[0]):
        statements = statements[1:]
    return statements


@dataclass
class _TypeContext:
    name: str
    qualified_name: str
    kind: str
    span: Span
    bases: list[str] = field(default_factory=list)
    methods: list[MethodInfo] = field(default_factory=list)
    attributes: dict[str, AttributeInfo] = field(default_factory=dict)
    dependencies: set[DependencyEdge] = field(default_factory=set)
    is_abstract: bool = False

    def add_attribute(self, name: str, accessor: str, line: int) -> None:
        existing = self.attributes.get(name)
        if existing is not None and existing.accessor in ("property", "setter") and accessor == "attribute":
            return
        self.attributes[name] = AttributeInfo(
            name=name, visibility=visibility_of(name), accessor=accessor, line=line
        )

    def freeze(self) -> TypeInfo:
        is_abstract = self.is_abstract or any(m.is_abstract for m in self.methods)
        return TypeInfo(
            name=self.name,
            qualified_name=self.qualified_name,
            kind=self.kind,
            span=self.span,
            methods=tuple(self.methods),
            attributes=tuple(self.attributes.values()),
            dependencies=frozenset(self.dependencies),
            bases=tuple(self.bases),
            is_abstract=is_abstract,
        )


@dataclass
class _MethodContext:
    conditional_count: int = 0
    external_call_count: int = 0
    self_access_count: int = 0
    max_chain_depth: int = 0
    primitive_locals: set[str] = field(default_factory=set)


class SemanticModelBuilder:
    """Builds a ``SemanticModel`` from a generic syntax tree."""

    def __init__(self, type_strategy: TypeInferenceStrategy | None = None):
        self.type_strategy = type_strategy or UnknownTypeStrategy()

    def build(self, tree: SyntaxNode, unit_name: str = "<module>") -> SemanticModel:
        """
        Build the semantic model for one source unit.

        Error regions in the tree are skipped and recorded; the rest of
        the unit is still modelled.

        Args:
            tree: Root node produced by the parser
            unit_name: Name given to the module-level namespace type

        Returns:
            SemanticModel keyed by qualified type name
        """
        walk = _ModelWalk(self.type_strategy, unit_name, tree.span)
        walk.visit(tree)
        model = walk.finish()
        if model.is_partial:
            logger.warning(
                f"Built partial model for {unit_name}: "
                f"{len(model.skipped_regions)} region(s) skipped"
            )
        return model


class _ModelWalk:
    """State of one depth-first walk over a tree."""

    def __init__(self, type_strategy: TypeInferenceStrategy, unit_name: str, span: Span):
        self.type_strategy = type_strategy
        self.unit_name = unit_name
        module = _TypeContext(name=unit_name, qualified_name=unit_name, kind="module", span=span)
        self.type_stack: list[_TypeContext] = [module]
        self.order: list[_TypeContext] = [module]
        self.closed: dict[int, TypeInfo] = {}
        self.method: Optional[_MethodContext] = None
        self.skipped: list[Span] = []

    # =========================================================================
    # Traversal
    # =========================================================================

    def visit(self, node: SyntaxNode) -> None:
        # Expressions are walked with an explicit stack; only definitions recurse
        stack = [node]
        while stack:
            node = stack.pop()
            if node.is_error:
                self.skipped.append(node.span)
            elif node.kind == "class_definition":
                self.visit_class(node)
            elif node.kind == "function_definition":
                self.visit_function(node, [])
            elif node.kind == "decorated_definition":
                self.visit_decorated(node)
            else:
                self.inspect(node)
                stack.extend(reversed(node.children))

    def visit_decorated(self, node: SyntaxNode) -> None:
        decorators = []
        for decorator in node.children_of_kind("decorator"):
            expression = decorator.children[0] if decorator.children else None
            name = dotted_name(expression)
            if name:
                decorators.append(name)
            self.visit(decorator)

        definition = node.child_by_field("definition")
        if definition is None:
            return
        if definition.kind == "class_definition":
            self.visit_class(definition)
        elif definition.kind == "function_definition":
            self.visit_function(definition, decorators)
        else:
            self.visit(definition)

    def visit_class(self, node: SyntaxNode) -> None:
        name_node = node.child_by_field("name")
        name = name_node.text if name_node is not None and name_node.text else "unknown"
        parent = self.type_stack[-1]
        qualified = f"{parent.qualified_name}.{name}" if parent.kind == "class" else name

        context = _TypeContext(name=name, qualified_name=qualified, kind="class", span=node.span)
        superclasses = node.child_by_field("superclasses")
        if superclasses is not None:
            for argument in superclasses.children:
                if argument.kind == "keyword_argument":
                    value = dotted_name(argument.child_by_field("value"))
                    if value and value.rsplit(".", 1)[-1] == "ABCMeta":
                        context.is_abstract = True
                    continue
                base = dotted_name(argument)
                if base is None or base == "object":
                    continue
                context.bases.append(base)
                context.dependencies.add(DependencyEdge(EXTENDED, base))
                if base.rsplit(".", 1)[-1] in ABSTRACT_BASES:
                    context.is_abstract = True

        self.type_stack.append(context)
        self.order.append(context)
        outer_method, self.method = self.method, None
        try:
            body = node.child_by_field("body")
            if body is not None:
                for statement in body.children:
                    self.collect_class_attributes(context, statement)
                    self.visit(statement)
        finally:
            self.method = outer_method
            self.type_stack.pop()
        self.closed[id(context)] = context.freeze()

    def visit_function(self, node: SyntaxNode, decorators: list[str]) -> None:
        if self.method is not None:
            # Nested function: part of the enclosing method body
            for child in node.children:
                self.visit(child)
            return

        owner = self.type_stack[-1]
        name_node = node.child_by_field("name")
        name = name_node.text if name_node is not None and name_node.text else "unknown"
        short_decorators = {d.rsplit(".", 1)[-1] for d in decorators}
        is_static = "staticmethod" in short_decorators
        is_class_level = owner.kind == "class" and (is_static or "classmethod" in short_decorators)

        params = self.parameters(node)
        if owner.kind == "class" and not is_static and params:
            params = params[1:]
        is_variadic = any(
            sub.kind in ("list_splat_pattern", "dictionary_splat_pattern")
            for param in params
            for sub in param.walk()
        )
        if owner.kind == "class" and name == "__init__":
            self.collect_required_types(owner, params)

        if owner.kind == "class":
            if short_decorators & {"property", "cached_property"}:
                owner.add_attribute(name, "property", node.span.start_line)
            elif "setter" in short_decorators:
                owner.add_attribute(name, "setter", node.span.start_line)

        context = _MethodContext()
        body = node.child_by_field("body")
        self.method = context
        try:
            for child in node.children:
                if child.field in ("name", "parameters", "return_type"):
                    continue
                self.visit(child)
        finally:
            self.method = None

        signature, size = "", 0
        raises = False
        if body is not None:
            statements = _body_statements(body)
            raises = bool(statements) and statements[0].kind == "raise_statement"
            trimmed = SyntaxNode(kind=body.kind, span=body.span, children=tuple(statements))
            signature, size = normalize_body(trimmed)

        owner.methods.append(
            MethodInfo(
                name=name,
                span=node.span,
                param_count=len(params),
                conditional_count=context.conditional_count,
                external_call_count=context.external_call_count,
                self_access_count=context.self_access_count,
                max_chain_depth=context.max_chain_depth,
                is_class_level=is_class_level,
                is_abstract="abstractmethod" in short_decorators,
                is_variadic=is_variadic,
                raises_unconditionally=raises,
                visibility=visibility_of(name),
                body_signature=signature,
                body_size=size,
                return_type=self.type_strategy.infer_type(node),
                decorators=tuple(decorators),
                body_ref=weakref.ref(body) if body is not None else None,
            )
        )

    # =========================================================================
    # Accounting
    # =========================================================================

    def inspect(self, node: SyntaxNode) -> None:
        owner = self.type_stack[-1]
        kind = node.kind

        if kind == "call":
            self.inspect_call(owner, node)
        elif kind in ("import_statement", "import_from_statement"):
            self.inspect_import(owner, node)

        method = self.method
        if method is None:
            return

        if kind == "if_statement":
            method.conditional_count += 1 + len(node.children_of_kind("elif_clause", "else_clause"))
        elif kind in ("match_statement", "conditional_expression"):
            method.conditional_count += 1
        elif kind == "attribute":
            obj = node.child_by_field("object")
            if obj is not None and obj.kind == "identifier" and obj.text in RECEIVER_NAMES:
                method.self_access_count += 1
            method.max_chain_depth = max(method.max_chain_depth, chain_depth(node))
        elif kind == "assignment":
            self.inspect_assignment(owner, method, node)

    def inspect_call(self, owner: _TypeContext, node: SyntaxNode) -> None:
        function = node.child_by_field("function")
        if function is None:
            return

        name = dotted_name(function) if function.kind in ("identifier", "attribute") else None
        if name and is_type_name(name):
            owner.dependencies.add(DependencyEdge(INSTANTIATED, name))

        method = self.method
        if method is None or function.kind != "attribute":
            return
        receiver = function.child_by_field("object")
        if receiver is None or receiver.kind in PRIMITIVE_KINDS:
            return
        if receiver.kind == "identifier" and (
            receiver.text in RECEIVER_NAMES or receiver.text in method.primitive_locals
        ):
            return
        if receiver.kind == "call" and dotted_name(receiver) == "super":
            return
        method.external_call_count += 1

    def inspect_import(self, owner: _TypeContext, node: SyntaxNode) -> None:
        if node.kind == "import_from_statement":
            module = node.child_by_field("module_name")
            if module is not None and module.text:
                owner.dependencies.add(DependencyEdge(REQUIRED, module.text))
            return
        for child in node.children:
            target = child.child_by_field("name") if child.kind == "aliased_import" else child
            if target is not None and target.kind == "dotted_name" and target.text:
                owner.dependencies.add(DependencyEdge(REQUIRED, target.text))

    def inspect_assignment(self, owner: _TypeContext, method: _MethodContext, node: SyntaxNode) -> None:
        left = node.child_by_field("left")
        right = node.child_by_field("right")
        if left is None:
            return
        if left.kind == "identifier" and left.text:
            if right is not None and right.kind in PRIMITIVE_KINDS:
                method.primitive_locals.add(left.text)
            else:
                method.primitive_locals.discard(left.text)
        elif left.kind == "attribute" and owner.kind == "class":
            obj = left.child_by_field("object")
            attr = left.child_by_field("attribute")
            if obj is not None and obj.text == "self" and attr is not None and attr.text:
                owner.add_attribute(attr.text, "attribute", node.span.start_line)

    def collect_class_attributes(self, owner: _TypeContext, statement: SyntaxNode) -> None:
        if statement.kind != "expression_statement":
            return
        for assignment in statement.children_of_kind("assignment"):
            left = assignment.child_by_field("left")
            if left is not None and left.kind == "identifier" and left.text:
                owner.add_attribute(left.text, "attribute", assignment.span.start_line)

    def collect_required_types(self, owner: _TypeContext, params: list[SyntaxNode]) -> None:
        for param in params:
            annotation = param.child_by_field("type")
            text = annotation.text if annotation is not None else None
            if text and SIMPLE_TYPE_RE.match(text) and is_type_name(text):
                owner.dependencies.add(DependencyEdge(REQUIRED, text))

    @staticmethod
    def parameters(node: SyntaxNode) -> list[SyntaxNode]:
        parameters = node.child_by_field("parameters")
        if parameters is None:
            return []
        return [p for p in parameters.children if p.kind not in PARAMETER_SEPARATORS]

    def finish(self) -> SemanticModel:
        module = self.type_stack[0]
        self.closed[id(module)] = module.freeze()

        types: dict[str, TypeInfo] = {}
        for context in self.order:
            type_info = self.closed[id(context)]
            if type_info.kind == "module" and not type_info.methods:
                continue
            types[type_info.qualified_name] = type_info

        return SemanticModel(
            types=types,
            unit_name=self.unit_name,
            skipped_regions=tuple(self.skipped),
        )
