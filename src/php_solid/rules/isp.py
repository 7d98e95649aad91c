"""
ISP rules: signs that an interface forces more on a class than it needs.
"""
from typing import Optional

from php_solid.logging import get_logger
from php_solid.logging_tags import ISP
from php_solid.models.ast_models import ClassDescriptor, MethodDescriptor
from php_solid.models.violations import IspViolation
from php_solid.resolver import TypeResolver
from php_solid.tree_sitter_helpers import (
    created_class_name,
    node_text,
    statements,
    throw_operand,
)

logger = get_logger(__name__)


def implemented_methods(resolver: TypeResolver, cls: ClassDescriptor,
                        interface: ClassDescriptor) -> list[MethodDescriptor]:
    """
    The class's own, concrete implementations of the interface's methods.
    Methods inherited from a parent are not the class's choice and are skipped.
    """
    own = resolver.own_methods(cls)
    found = []
    for interface_method in resolver.methods_of(interface):
        method = own.get(interface_method.name.lower())
        if method is None or method.is_abstract or method.body is None:
            continue
        found.append(method)
    return found


def _short_name(name: str) -> str:
    return name.lstrip("\\").rsplit("\\", 1)[-1]


def _return_value(stmt) -> Optional[str]:
    """Normalized text of a ``return`` value; "" for a bare ``return;``."""
    values = statements(stmt)
    if not values:
        return ""
    return "".join(node_text(values[0]).split()).lower()


class EmptyMethodRule:
    """
    Flags interface methods whose implementation is empty, only throws
    ``BadMethodCallException`` (or a subclass), or only returns nothing/null.

    More generic exceptions such as RuntimeException are not stub markers:
    real implementations throw them all the time.
    """

    NOT_IMPLEMENTED_EXCEPTIONS = ("BadMethodCallException",)

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def check(self, cls: ClassDescriptor, interface: ClassDescriptor) -> list[IspViolation]:
        violations = []
        for method in implemented_methods(self.resolver, cls, interface):
            stub = self.detect_stub(method, cls)
            if stub is None:
                continue
            violations.append(IspViolation(
                class_name=cls.name,
                interface_name=interface.name,
                reason=f"Method {method.name}() is {stub} — interface may be too wide for this class.",
            ))
        return violations

    def detect_stub(self, method: MethodDescriptor, cls: ClassDescriptor) -> Optional[str]:
        """Describes the kind of stub, or None for a real implementation."""
        body = statements(method.body)
        if not body:
            return "empty (no statements)"
        if len(body) > 1:
            return None

        stmt = body[0]
        thrown = throw_operand(stmt)
        if thrown is not None and thrown.type == "object_creation_expression":
            created = created_class_name(thrown)
            if created and self._is_not_implemented(created, method, cls):
                return f"a stub (throws {_short_name(created)})"

        if stmt.type == "return_statement":
            value = _return_value(stmt)
            if value == "":
                return "a stub (returns void/nothing)"
            if value == "null":
                return "a stub (returns null)"
        return None

    def _is_not_implemented(self, name: str, method: MethodDescriptor,
                            cls: ClassDescriptor) -> bool:
        short = _short_name(name).lower()
        if any(short == marker.lower() for marker in self.NOT_IMPLEMENTED_EXCEPTIONS):
            return True
        owner = self.resolver.indexer.get_class(method.owner) or cls
        return self.resolver.is_subtype(name, [f"\\{m}" for m in self.NOT_IMPLEMENTED_EXCEPTIONS],
                                        owner.scope)


class FatInterfaceRule:
    """
    Flags interfaces with more methods (inherited ones included) than the
    threshold. Each interface is reported once per rule instance, for the
    first class found implementing it.
    """

    DEFAULT_THRESHOLD = 5

    def __init__(self, resolver: TypeResolver, threshold: int = DEFAULT_THRESHOLD):
        if threshold < 1:
            raise ValueError(f"Fat interface threshold must be >= 1, got {threshold}")
        self.resolver = resolver
        self.threshold = threshold
        self._reported: set[str] = set()

    def check(self, cls: ClassDescriptor, interface: ClassDescriptor) -> list[IspViolation]:
        key = interface.name.lower()
        if key in self._reported:
            return []

        methods = self.resolver.methods_of(interface)
        if len(methods) <= self.threshold:
            return []

        self._reported.add(key)
        logger.debug(f"{ISP} {interface.name} has {len(methods)} methods (threshold {self.threshold})")
        return [IspViolation(
            class_name=cls.name,
            interface_name=interface.name,
            reason=(
                f"Interface has {len(methods)} methods (threshold: {self.threshold}) "
                f"— consider splitting into smaller interfaces."
            ),
            details="Methods: " + ", ".join(m.name for m in methods),
        )]


class IncompleteImplementationRule:
    """
    Flags implementations that carry an "unfinished" marker (TODO, FIXME, XXX,
    HACK, "Implement ...") AND whose body is a single trivial constant return.
    Either condition alone is not enough.
    """

    INCOMPLETE_MARKERS = ("TODO", "FIXME", "XXX", "HACK", "Implement ")
    TRIVIAL_RETURNS = frozenset({"", "true", "false", "null", "[]", "array()", "0", "1"})

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def check(self, cls: ClassDescriptor, interface: ClassDescriptor) -> list[IspViolation]:
        violations = []
        for method in implemented_methods(self.resolver, cls, interface):
            if not (self.has_incomplete_marker(method) and self.has_trivial_return(method)):
                continue
            violations.append(IspViolation(
                class_name=cls.name,
                interface_name=interface.name,
                reason=(
                    f"Method {method.name}() appears to be an incomplete implementation "
                    f"(contains TODO/FIXME and trivial return)."
                ),
            ))
        return violations

    def has_incomplete_marker(self, method: MethodDescriptor) -> bool:
        source = node_text(method.node).lower()
        return any(marker.lower() in source for marker in self.INCOMPLETE_MARKERS)

    def has_trivial_return(self, method: MethodDescriptor) -> bool:
        body = statements(method.body)
        if len(body) != 1 or body[0].type != "return_statement":
            return False
        return _return_value(body[0]) in self.TRIVIAL_RETURNS
