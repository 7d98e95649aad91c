# --- Data models for our index ----------------------------------------------
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from php_solid.models.types import TypeExpression


class ClassKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"


@dataclass(frozen=True)
class SourceLocation:
    """Where a declaration lives (1-based, inclusive line range)."""
    path: str
    start_line: int
    end_line: int


@dataclass(frozen=True)
class NameScope:
    """Everything needed to resolve a short name written inside a class."""
    namespace: str  # "" for the global namespace
    imports: dict  # alias -> canonical name, as written by `use` statements
    class_name: Optional[str] = None  # canonical name of the enclosing class
    parent_ref: Optional[str] = None  # `extends` target as written


@dataclass(frozen=True)
class Parameter:
    """One formal parameter of a method."""
    name: str  # without the leading "$"
    type: Optional[TypeExpression]
    variadic: bool = False


@dataclass(frozen=True)
class MethodDescriptor:
    """A method declaration, as written in its owning class, interface or trait."""
    owner: str  # canonical name of the declaring class-like
    name: str  # e.g. "process"
    parameters: tuple
    return_type: Optional[TypeExpression]
    doc_comment: Optional[str]  # raw /** ... */ text, if any
    location: SourceLocation
    visibility: str = "public"
    is_abstract: bool = False
    is_static: bool = False
    node: Any = field(default=None, compare=False, repr=False)  # method_declaration node

    @property
    def body(self):
        """The compound statement of the method, or None for abstract/interface methods."""
        if self.node is None:
            return None
        return self.node.child_by_field_name("body")

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}::{self.name}"


@dataclass(frozen=True)
class ClassDescriptor:
    """A class, interface, trait or enum declaration."""
    name: str  # canonical name, e.g. "App\\Service\\UserService"
    kind: ClassKind
    namespace: str
    imports: dict  # alias -> canonical name
    methods: dict  # lowercased method name -> MethodDescriptor
    location: SourceLocation
    parent_ref: Optional[str] = None  # `extends` target as written (classes only)
    interface_refs: tuple = ()  # `implements` targets, or extended interfaces for interfaces
    trait_refs: tuple = ()  # `use Trait;` targets inside the body
    is_abstract: bool = False

    @property
    def is_interface(self) -> bool:
        return self.kind is ClassKind.INTERFACE

    @property
    def scope(self) -> NameScope:
        return NameScope(self.namespace, self.imports, self.name, self.parent_ref)

    def method(self, name: str) -> Optional[MethodDescriptor]:
        """A method declared directly in this class-like (case-insensitive)."""
        return self.methods.get(name.lower())
