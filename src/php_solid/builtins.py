# --- Built-in PHP class hierarchy --------------------------------------------
"""
Core and SPL classes/interfaces that never appear in the analyzed sources.

Each entry maps a canonical name to (parent class, implemented/extended
interfaces). This replaces runtime reflection for questions such as
"is UnexpectedValueException a RuntimeException?".
"""
from typing import Optional

from php_solid.models.ast_models import ClassDescriptor, ClassKind, MethodDescriptor, Parameter, SourceLocation

BUILTIN_INTERFACES: dict[str, tuple[str, ...]] = {
    "Stringable": (),
    "Throwable": ("Stringable",),
    "Traversable": (),
    "Iterator": ("Traversable",),
    "IteratorAggregate": ("Traversable",),
    "ArrayAccess": (),
    "Countable": (),
    "JsonSerializable": (),
    "Serializable": (),
    "UnitEnum": (),
    "BackedEnum": ("UnitEnum",),
    "DateTimeInterface": (),
    "SeekableIterator": ("Iterator",),
    "OuterIterator": ("Iterator",),
}

BUILTIN_CLASSES: dict[str, tuple[Optional[str], tuple[str, ...]]] = {
    # Exceptions
    "Exception": (None, ("Throwable",)),
    "ErrorException": ("Exception", ()),
    "JsonException": ("Exception", ()),
    "LogicException": ("Exception", ()),
    "BadFunctionCallException": ("LogicException", ()),
    "BadMethodCallException": ("BadFunctionCallException", ()),
    "DomainException": ("LogicException", ()),
    "InvalidArgumentException": ("LogicException", ()),
    "LengthException": ("LogicException", ()),
    "OutOfRangeException": ("LogicException", ()),
    "RuntimeException": ("Exception", ()),
    "OutOfBoundsException": ("RuntimeException", ()),
    "OverflowException": ("RuntimeException", ()),
    "RangeException": ("RuntimeException", ()),
    "UnderflowException": ("RuntimeException", ()),
    "UnexpectedValueException": ("RuntimeException", ()),
    # Errors
    "Error": (None, ("Throwable",)),
    "ArithmeticError": ("Error", ()),
    "DivisionByZeroError": ("ArithmeticError", ()),
    "AssertionError": ("Error", ()),
    "CompileError": ("Error", ()),
    "ParseError": ("CompileError", ()),
    "TypeError": ("Error", ()),
    "ArgumentCountError": ("TypeError", ()),
    "ValueError": ("Error", ()),
    "UnhandledMatchError": ("Error", ()),
    # Common classes
    "stdClass": (None, ()),
    "Closure": (None, ()),
    "Generator": (None, ("Iterator",)),
    "ArrayObject": (None, ("IteratorAggregate", "ArrayAccess", "Serializable", "Countable")),
    "ArrayIterator": (None, ("SeekableIterator", "ArrayAccess", "Serializable", "Countable")),
    "DateTime": (None, ("DateTimeInterface",)),
    "DateTimeImmutable": (None, ("DateTimeInterface",)),
}

_LOOKUP = {name.lower(): name for name in (*BUILTIN_INTERFACES, *BUILTIN_CLASSES)}


def builtin_name(name: str) -> Optional[str]:
    """Canonical spelling of a built-in class-like, or None if not built in."""
    return _LOOKUP.get(name.lstrip("\\").lower())


def builtin_supertypes(name: str) -> list[str]:
    """Direct supertypes (parent first, then interfaces) of a built-in class-like."""
    canonical = builtin_name(name)
    if canonical is None:
        return []
    if canonical in BUILTIN_INTERFACES:
        return list(BUILTIN_INTERFACES[canonical])
    parent, interfaces = BUILTIN_CLASSES[canonical]
    return ([parent] if parent else []) + list(interfaces)


# Method and parameter names of the built-in interfaces. Untyped, no @throws.
BUILTIN_INTERFACE_METHODS: dict[str, tuple[tuple[str, tuple[str, ...]], ...]] = {
    "Stringable": (("__toString", ()),),
    "Countable": (("count", ()),),
    "ArrayAccess": (
        ("offsetExists", ("offset",)),
        ("offsetGet", ("offset",)),
        ("offsetSet", ("offset", "value")),
        ("offsetUnset", ("offset",)),
    ),
    "Iterator": (
        ("current", ()),
        ("next", ()),
        ("key", ()),
        ("valid", ()),
        ("rewind", ()),
    ),
    "IteratorAggregate": (("getIterator", ()),),
    "JsonSerializable": (("jsonSerialize", ()),),
    "Serializable": (("serialize", ()), ("unserialize", ("data",))),
    "SeekableIterator": (("seek", ("offset",)),),
    "OuterIterator": (("getInnerIterator", ()),),
}

BUILTIN_LOCATION = SourceLocation("<builtin>", 0, 0)

_DESCRIPTORS: dict[str, ClassDescriptor] = {}


def builtin_interface(name: str) -> Optional[ClassDescriptor]:
    """
    A synthesized declaration for a built-in interface, so its methods act as
    contract methods like those of indexed interfaces. None for anything else.
    """
    canonical = builtin_name(name)
    if canonical is None or canonical not in BUILTIN_INTERFACES:
        return None
    if canonical not in _DESCRIPTORS:
        methods = {
            method.lower(): MethodDescriptor(
                owner=canonical,
                name=method,
                parameters=tuple(Parameter(p, None, False) for p in params),
                return_type=None,
                doc_comment=None,
                location=BUILTIN_LOCATION,
                is_abstract=True,
            )
            for method, params in BUILTIN_INTERFACE_METHODS.get(canonical, ())
        }
        _DESCRIPTORS[canonical] = ClassDescriptor(
            name=canonical,
            kind=ClassKind.INTERFACE,
            namespace="",
            imports={},
            methods=methods,
            location=BUILTIN_LOCATION,
            interface_refs=BUILTIN_INTERFACES[canonical],
        )
    return _DESCRIPTORS[canonical]
