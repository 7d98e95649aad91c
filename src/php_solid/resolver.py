"""
Name resolution and nominal subtyping over the static class index.

The resolver answers two kinds of questions without running any PHP:

* which canonical class a short name written inside a class refers to
  (``use`` imports, current namespace, global fallback), and
* whether one type is a subtype of another, walking ``extends`` /
  ``implements`` edges from the index and the built-in hierarchy table.

Unknown classes are never subtypes of anything but themselves.
"""
from typing import Iterable, Optional

from php_solid import builtins
from php_solid.indexer import PhpIndexer
from php_solid.logging import get_logger
from php_solid.logging_tags import RESOLVE
from php_solid.models.ast_models import ClassDescriptor, ClassKind, MethodDescriptor, NameScope
from php_solid.models.types import (
    SCALAR_TYPES,
    IntersectionType,
    MixedType,
    Named,
    Nullable,
    ParentType,
    SelfType,
    StaticType,
    TypeExpression,
    UnionType,
    VoidType,
)

logger = get_logger(__name__)

GLOBAL_SCOPE = NameScope(namespace="", imports={})


def _same(a: str, b: str) -> bool:
    return a.lower() == b.lower()


class TypeResolver:
    def __init__(self, indexer: PhpIndexer):
        self.indexer = indexer
        self._ancestors: dict[str, list[str]] = {}

    # -- Names ----------------------------------------------------------------

    def resolve(self, name: str, scope: Optional[NameScope] = None) -> str:
        """
        Resolves a class name written in ``scope`` to its canonical name
        (no leading backslash).

        1. a qualified name is canonical (its first segment is expanded when
           it is an import alias),
        2. an import alias resolves to its target,
        3. a class declared in the current namespace resolves there,
        4. anything else falls back to the global namespace.
        """
        scope = scope or GLOBAL_SCOPE
        fully_qualified = name.startswith("\\")
        name = name.strip().lstrip("\\")
        lowered = name.lower()

        if lowered in SCALAR_TYPES:
            return lowered
        if lowered in ("self", "static") and scope.class_name:
            return scope.class_name
        if lowered == "parent" and scope.parent_ref:
            return self._resolve_plain(scope.parent_ref, scope)

        if fully_qualified:
            return name
        return self._resolve_plain(name, scope)

    def _resolve_plain(self, name: str, scope: NameScope) -> str:
        if name.startswith("\\"):
            return name.lstrip("\\")
        if "\\" in name:
            head, rest = name.split("\\", 1)
            target = self._import(head, scope)
            return f"{target}\\{rest}" if target else name
        target = self._import(name, scope)
        if target:
            return target
        if scope.namespace:
            candidate = f"{scope.namespace}\\{name}"
            if self.indexer.has_class(candidate):
                return self.indexer.get_class(candidate).name
        known = self.indexer.get_class(name)
        if known is not None:
            return known.name
        return builtins.builtin_name(name) or name

    def _import(self, alias: str, scope: NameScope) -> Optional[str]:
        for key, target in scope.imports.items():
            if _same(key, alias):
                return target
        return None

    def lookup(self, name: str, scope: Optional[NameScope] = None) -> Optional[ClassDescriptor]:
        """The indexed declaration a name refers to, or None."""
        return self.indexer.get_class(self.resolve(name, scope))

    def descriptor(self, name: str) -> Optional[ClassDescriptor]:
        """The indexed declaration of a canonical name, else the built-in interface of that name."""
        found = self.indexer.get_class(name)
        if found is not None:
            return found
        return builtins.builtin_interface(name)

    # -- Hierarchy ------------------------------------------------------------

    def parent_of(self, descriptor: ClassDescriptor) -> Optional[str]:
        if not descriptor.parent_ref:
            return None
        return self.resolve(descriptor.parent_ref, descriptor.scope)

    def direct_supertypes(self, name: str) -> list[str]:
        descriptor = self.indexer.get_class(name)
        if descriptor is None:
            return builtins.builtin_supertypes(name)
        supers = []
        parent = self.parent_of(descriptor)
        if parent:
            supers.append(parent)
        supers.extend(self.resolve(ref, descriptor.scope) for ref in descriptor.interface_refs)
        if descriptor.kind is ClassKind.ENUM:
            supers.append("UnitEnum")
        return supers

    def ancestors(self, name: str) -> list[str]:
        """
        All supertypes of ``name`` (parents first, then interfaces), transitively.
        Cycles in broken hierarchies are cut at the first repetition.
        """
        key = name.lstrip("\\").lower()
        if key in self._ancestors:
            return self._ancestors[key]

        result: list[str] = []
        seen = {key}
        queue = list(self.direct_supertypes(name))
        while queue:
            current = queue.pop(0)
            current_key = current.lower()
            if current_key in seen:
                continue
            seen.add(current_key)
            result.append(current)
            queue.extend(self.direct_supertypes(current))

        self._ancestors[key] = result
        return result

    def is_known(self, name: str) -> bool:
        return self.indexer.has_class(name) or builtins.builtin_name(name) is not None

    def is_descendant(self, candidate: str, ancestor: str) -> bool:
        """Identity or nominal descent, both on canonical names."""
        if _same(candidate, ancestor):
            return True
        return any(_same(a, ancestor) for a in self.ancestors(candidate))

    def is_subtype(self, candidate: str, allowed: Iterable[str],
                   scope: Optional[NameScope] = None) -> bool:
        """
        True iff ``candidate`` equals, or descends from, a member of ``allowed``.
        All names are resolved in ``scope`` first (canonical names pass through).
        """
        canonical = self.resolve(candidate, scope)
        return any(self.is_descendant(canonical, self.resolve(a, scope)) for a in allowed)

    def interfaces_of(self, descriptor: ClassDescriptor) -> list[ClassDescriptor]:
        """
        Every interface the class-like implements, indexed or built in, directly or through
        its parents and extended interfaces, in discovery order.
        """
        found = []
        for name in self.ancestors(descriptor.name):
            ancestor = self.descriptor(name)
            if ancestor is not None and ancestor.is_interface:
                found.append(ancestor)
        return found

    def find_method(self, descriptor: ClassDescriptor, name: str) -> Optional[MethodDescriptor]:
        """
        The declaration a call to ``name`` on ``descriptor`` lands on: own
        methods, then used traits, then ancestors in order.
        """
        method = self._own_or_trait_method(descriptor, name, set())
        if method is not None:
            return method
        for ancestor_name in self.ancestors(descriptor.name):
            ancestor = self.descriptor(ancestor_name)
            if ancestor is None:
                continue
            method = self._own_or_trait_method(ancestor, name, set())
            if method is not None:
                return method
        return None

    def _own_or_trait_method(self, descriptor: ClassDescriptor, name: str,
                             seen: set) -> Optional[MethodDescriptor]:
        if descriptor.name.lower() in seen:
            return None
        seen.add(descriptor.name.lower())
        method = descriptor.method(name)
        if method is not None:
            return method
        for trait_ref in descriptor.trait_refs:
            trait = self.lookup(trait_ref, descriptor.scope)
            if trait is not None:
                method = self._own_or_trait_method(trait, name, seen)
                if method is not None:
                    return method
        return None

    def own_methods(self, descriptor: ClassDescriptor) -> dict[str, MethodDescriptor]:
        """Methods the class defines itself: declared ones plus those pulled in from traits."""
        methods = dict(descriptor.methods)
        for trait_ref in descriptor.trait_refs:
            trait = self.lookup(trait_ref, descriptor.scope)
            if trait is None:
                logger.debug(f"{RESOLVE} trait {trait_ref} used by {descriptor.name} is not indexed")
                continue
            for key, method in self.own_methods(trait).items():
                methods.setdefault(key, method)
        return methods

    def methods_of(self, descriptor: ClassDescriptor) -> list[MethodDescriptor]:
        """All methods visible on a class-like, inherited ones included; first declaration wins."""
        methods = self.own_methods(descriptor)
        for ancestor_name in self.ancestors(descriptor.name):
            ancestor = self.descriptor(ancestor_name)
            if ancestor is None:
                continue
            for key, method in self.own_methods(ancestor).items():
                methods.setdefault(key, method)
        return list(methods.values())

    # -- Type expressions -----------------------------------------------------

    def canonicalize(self, type_expr: Optional[TypeExpression],
                     scope: NameScope) -> Optional[TypeExpression]:
        """
        Resolves every class name in a type expression; ``self``/``static``
        become the declaring class and ``parent`` its immediate ancestor.
        ``parent`` without an ancestor stays a ParentType (unresolvable).
        """
        if type_expr is None:
            return None
        if isinstance(type_expr, Named):
            return Named(self.resolve(type_expr.name, scope))
        if isinstance(type_expr, (SelfType, StaticType)):
            return Named(scope.class_name) if scope.class_name else type_expr
        if isinstance(type_expr, ParentType):
            if scope.parent_ref:
                return Named(self._resolve_plain(scope.parent_ref, scope))
            return type_expr
        if isinstance(type_expr, Nullable):
            return UnionType((self.canonicalize(type_expr.inner, scope), Named("null")))
        if isinstance(type_expr, UnionType):
            return UnionType(tuple(self.canonicalize(m, scope) for m in type_expr.members))
        if isinstance(type_expr, IntersectionType):
            return IntersectionType(tuple(self.canonicalize(m, scope) for m in type_expr.members))
        return type_expr

    def is_type_subtype(self, candidate: Optional[TypeExpression], target: Optional[TypeExpression],
                        candidate_scope: NameScope, target_scope: NameScope) -> bool:
        """
        Structural subtype check between two declared types, each written in
        its own scope. Absent types are handled by the callers.
        """
        return self._subtype(
            self.canonicalize(candidate, candidate_scope),
            self.canonicalize(target, target_scope),
        )

    def _subtype(self, candidate: TypeExpression, target: TypeExpression) -> bool:
        if candidate == target:
            return True
        if isinstance(candidate, UnionType):
            return all(self._subtype(m, target) for m in candidate.members)
        if isinstance(candidate, Named) and candidate.name == "never":
            return True
        if isinstance(target, MixedType):
            return not isinstance(candidate, VoidType)
        if isinstance(candidate, (VoidType, MixedType)) or isinstance(target, VoidType):
            return False
        if isinstance(target, UnionType):
            return any(self._subtype(candidate, m) for m in target.members)
        if isinstance(target, IntersectionType):
            return all(self._subtype(candidate, m) for m in target.members)
        if isinstance(candidate, IntersectionType):
            return any(self._subtype(m, target) for m in candidate.members)
        if isinstance(candidate, Named) and isinstance(target, Named):
            return self._named_subtype(candidate.name, target.name)
        # Unresolvable parent/self references fail closed.
        return False

    def _named_subtype(self, candidate: str, target: str) -> bool:
        if _same(candidate, target):
            return True
        c, t = candidate.lower(), target.lower()
        if c in SCALAR_TYPES:
            if t == "bool":
                return c in ("true", "false")
            if t == "iterable":
                return c == "array"
            return False
        # candidate is a class-like from here on
        if not self.is_known(candidate):
            logger.debug(f"{RESOLVE} {candidate} is not indexed; not a subtype of {target}")
            return False
        if t == "object":
            return True
        if t == "iterable":
            return self.is_descendant(candidate, "Traversable")
        if t == "callable":
            return self.is_descendant(candidate, "Closure")
        if t in SCALAR_TYPES:
            return False
        return self.is_descendant(candidate, target)
