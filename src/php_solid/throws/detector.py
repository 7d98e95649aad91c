"""
Actual-throws analysis: which exception types can escape a method body.

The detector scans a method's AST for ``throw`` expressions and follows the
calls whose target is statically known:

- ``$this->helper()`` (intra-instance, resolved on the analyzed class),
- ``ClassName::method()`` / ``self::`` / ``static::`` / ``parent::`` (static),
- ``(new ClassName())->method()`` (new-instance),
- ``$var->method()`` where ``$var`` is a typed parameter or was assigned
  ``new ClassName()`` in the same method (typed-variable).

Each (class, method) pair is visited at most once per top-level query, so
call cycles terminate. Anything computed at runtime (dynamic method names,
properties, return values) is not followed.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tree_sitter import Node

from php_solid.logging import get_logger
from php_solid.logging_tags import THROWS
from php_solid.models.ast_models import ClassDescriptor, ClassKind, MethodDescriptor, NameScope
from php_solid.models.types import Named, Nullable, SelfType, StaticType, UnionType
from php_solid.resolver import TypeResolver
from php_solid.throws.declared import dedupe, extract_declared_throws
from php_solid.tree_sitter_helpers import (
    CLASS_NAME_NODES,
    THROW_NODES,
    created_class_name,
    find_ancestor,
    node_text,
    throw_operand,
    unwrap_parens,
    walk,
)

logger = get_logger(__name__)

MEMBER_CALL_NODES = {"member_call_expression", "nullsafe_member_call_expression"}

# Code inside these nodes does not run as part of the enclosing method.
NESTED_SCOPES = frozenset({
    "function_definition",
    "class_declaration",
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
    "declaration_list",
    "anonymous_class",
})


class CallKind(str, Enum):
    INTRA = "intra-instance"
    STATIC = "static"
    NEW_INSTANCE = "new-instance"
    TYPED_VARIABLE = "typed-variable"


@dataclass(frozen=True)
class CallEdge:
    """A call site whose callee is statically known. Lives only during traversal."""
    callee_class: str  # canonical class name
    method: str
    kind: CallKind
    line: int


def _merge(found: dict, exception: str, chain: tuple):
    """Adds ``chain`` under ``exception``; names are compared case-insensitively."""
    for existing in found:
        if existing.lower() == exception.lower():
            exception = existing
            break
    chains = found.setdefault(exception, [])
    if chain not in chains:
        chains.append(chain)


class ThrowsDetector:
    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver
        self.indexer = resolver.indexer
        self._traces: dict[tuple[str, str], dict[str, list[tuple]]] = {}

    # -- Public API -----------------------------------------------------------

    def declared_throws(self, method: MethodDescriptor) -> list[str]:
        """``@throws`` types of a method, resolved in the scope of its declaring class."""
        scope = self._scope(method, None)
        return dedupe(
            self.resolver.resolve(name, scope)
            for name in extract_declared_throws(method.doc_comment)
        )

    def actual_throws(self, method: MethodDescriptor,
                      context: Optional[ClassDescriptor] = None) -> list[str]:
        """Canonical exception types the method body can propagate, first-seen order."""
        return list(self.trace(method, context))

    def trace(self, method: MethodDescriptor,
              context: Optional[ClassDescriptor] = None) -> dict[str, list[tuple]]:
        """
        Maps each exception type the method can propagate to the call chains
        that lead to it. A chain is a tuple of ``Class::method`` steps, from
        ``method`` down to the method containing the ``throw``.

        ``context`` is the class ``$this`` refers to; it defaults to the
        declaring class.
        """
        if context is None:
            context = self.indexer.get_class(method.owner)
        key = (method.qualified_name.lower(), context.name.lower() if context else "")
        if key not in self._traces:
            self._traces[key] = self._analyze(method, context, set())
        return {exc: list(chains) for exc, chains in self._traces[key].items()}

    # -- Traversal ------------------------------------------------------------

    def _analyze(self, method: MethodDescriptor, context: Optional[ClassDescriptor],
                 visited: set) -> dict[str, list[tuple]]:
        visit_key = method.qualified_name.lower()
        if visit_key in visited:
            logger.debug(f"{THROWS} {method.qualified_name} already visited; skipping")
            return {}
        visited.add(visit_key)

        found: dict[str, list[tuple]] = {}
        body = method.body
        if body is None:
            return found

        step = method.qualified_name
        scope = self._scope(method, context)
        local_types = self._local_types(method, body, scope)

        edges: list[CallEdge] = []
        for node in walk(body, skip=NESTED_SCOPES):
            if node.type in THROW_NODES:
                for exception in self._thrown_types(node, body, scope):
                    _merge(found, exception, (step,))
            elif node.type in MEMBER_CALL_NODES:
                edges.extend(self._member_call_edges(node, context, scope, local_types))
            elif node.type == "scoped_call_expression":
                edges.extend(self._static_call_edges(node, scope))

        followed: set[tuple[str, str]] = set()
        for edge in edges:
            edge_key = (edge.callee_class.lower(), edge.method.lower())
            if edge_key in followed:
                continue
            followed.add(edge_key)

            callee_class = self.indexer.get_class(edge.callee_class)
            if callee_class is None:
                logger.debug(f"{THROWS} {step}: {edge.callee_class} is not indexed; not following")
                continue
            callee = self.resolver.find_method(callee_class, edge.method)
            if callee is None or callee.body is None:
                continue

            callee_context = callee_class
            if context is not None and self.resolver.is_descendant(context.name, callee_class.name):
                callee_context = context
            logger.debug(
                f"{THROWS} {step} -> {callee.qualified_name} ({edge.kind.value}, line {edge.line})"
            )
            for exception, chains in self._analyze(callee, callee_context, visited).items():
                for chain in chains:
                    _merge(found, exception, (step,) + chain)

        return found

    # -- AST helpers ----------------------------------------------------------

    def _scope(self, method: MethodDescriptor, context: Optional[ClassDescriptor]) -> NameScope:
        """
        Names inside a method resolve against its declaring file. ``self`` is
        the declaring class, except for trait methods, where it is the class
        using the trait.
        """
        owner = self.indexer.get_class(method.owner)
        if owner is None:
            return NameScope("", {}, method.owner)
        if owner.kind is ClassKind.TRAIT and context is not None:
            parent = self.resolver.parent_of(context)
            return NameScope(owner.namespace, owner.imports, context.name,
                             f"\\{parent}" if parent else None)
        return owner.scope

    def _thrown_types(self, throw_node: Node, body: Node, scope: NameScope) -> list[str]:
        expr = throw_operand(throw_node)
        if expr is None:
            return []

        if expr.type == "object_creation_expression":
            created = created_class_name(expr)
            return [self.resolver.resolve(created, scope)] if created else []

        if expr.type == "variable_name":
            variable = node_text(expr)
            catch = find_ancestor(
                throw_node,
                lambda n: n.type == "catch_clause" and self._catch_variable(n) == variable,
                stop=body,
            )
            if catch is not None:
                return [self.resolver.resolve(t, scope) for t in self._catch_types(catch)]

        # Any other shape (method call result, variable not bound by a catch) is unresolved.
        return []

    def _catch_variable(self, catch: Node) -> Optional[str]:
        name = catch.child_by_field_name("name")
        if name is not None:
            return node_text(name)
        for child in catch.named_children:
            if child.type == "variable_name":
                return node_text(child)
        return None

    def _catch_types(self, catch: Node) -> list[str]:
        type_node = catch.child_by_field_name("type")
        if type_node is not None:
            text = node_text(type_node)
        else:
            text = "|".join(
                node_text(c) for c in catch.named_children
                if c.type in ("named_type", "name", "qualified_name")
            )
        return [t.strip() for t in text.split("|") if t.strip()]

    def _class_names_of(self, type_expr, scope: NameScope) -> list[str]:
        """Class-like members of a parameter type (nullable and union members included)."""
        if type_expr is None:
            return []
        if isinstance(type_expr, Nullable):
            return self._class_names_of(type_expr.inner, scope)
        if isinstance(type_expr, UnionType):
            names = []
            for member in type_expr.members:
                names.extend(self._class_names_of(member, scope))
            return names
        if isinstance(type_expr, (SelfType, StaticType)):
            return [scope.class_name] if scope.class_name else []
        if isinstance(type_expr, Named) and not type_expr.is_scalar:
            return [self.resolver.resolve(type_expr.name, scope)]
        return []

    def _local_types(self, method: MethodDescriptor, body: Node,
                     scope: NameScope) -> dict[str, list[str]]:
        """
        Statically known classes of variables: typed parameters plus
        ``$var = new ClassName()`` assignments anywhere in the body.
        """
        types: dict[str, list[str]] = {}
        for param in method.parameters:
            names = self._class_names_of(param.type, scope)
            if names:
                types[f"${param.name}"] = names

        for node in walk(body, skip=NESTED_SCOPES):
            if node.type != "assignment_expression":
                continue
            left = node.child_by_field_name("left")
            right = unwrap_parens(node.child_by_field_name("right"))
            if left is None or left.type != "variable_name" or right is None:
                continue
            if right.type != "object_creation_expression":
                continue
            created = created_class_name(right)
            if created:
                names = types.setdefault(node_text(left), [])
                resolved = self.resolver.resolve(created, scope)
                if resolved not in names:
                    names.append(resolved)
        return types

    def _member_call_edges(self, node: Node, context: Optional[ClassDescriptor],
                           scope: NameScope, local_types: dict[str, list[str]]) -> list[CallEdge]:
        name_node = node.child_by_field_name("name")
        if name_node is None or name_node.type != "name":
            return []  # $obj->$method()
        method_name = node_text(name_node)
        line = node.start_point[0] + 1
        receiver = unwrap_parens(node.child_by_field_name("object"))
        if receiver is None:
            return []

        if receiver.type == "variable_name":
            variable = node_text(receiver)
            if variable == "$this":
                owner = context.name if context is not None else scope.class_name
                return [CallEdge(owner, method_name, CallKind.INTRA, line)] if owner else []
            return [
                CallEdge(cls, method_name, CallKind.TYPED_VARIABLE, line)
                for cls in local_types.get(variable, [])
            ]

        if receiver.type == "object_creation_expression":
            created = created_class_name(receiver)
            if created:
                return [CallEdge(self.resolver.resolve(created, scope), method_name,
                                 CallKind.NEW_INSTANCE, line)]
        return []

    def _static_call_edges(self, node: Node, scope: NameScope) -> list[CallEdge]:
        name_node = node.child_by_field_name("name")
        scope_node = node.child_by_field_name("scope")
        if name_node is None or name_node.type != "name" or scope_node is None:
            return []
        if scope_node.type not in CLASS_NAME_NODES:
            return []  # $class::method()
        callee = self.resolver.resolve(node_text(scope_node), scope)
        return [CallEdge(callee, node_text(name_node), CallKind.STATIC, node.start_point[0] + 1)]
