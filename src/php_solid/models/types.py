# --- Type expressions --------------------------------------------------------
"""
Tagged union describing a PHP type declaration.

Types are parsed from the declaration text rather than from grammar nodes, so
``?Foo``, ``A|B``, ``A&B`` and DNF forms such as ``(A&B)|null`` all go through
the same small recursive parser.
"""
from dataclasses import dataclass
from typing import Optional, Union

# Keywords that are never namespace-resolved.
SCALAR_TYPES = frozenset({
    "int", "float", "string", "bool", "array", "iterable", "callable",
    "object", "null", "false", "true", "never",
})


@dataclass(frozen=True)
class Named:
    """A class-like or scalar type. ``name`` is canonical once resolved."""
    name: str

    @property
    def is_scalar(self) -> bool:
        return self.name.lower() in SCALAR_TYPES

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Nullable:
    inner: "TypeExpression"

    def __str__(self) -> str:
        return f"?{self.inner}"


@dataclass(frozen=True)
class UnionType:
    members: tuple

    def __str__(self) -> str:
        return "|".join(_grouped(m) for m in self.members)


@dataclass(frozen=True)
class IntersectionType:
    members: tuple

    def __str__(self) -> str:
        return "&".join(str(m) for m in self.members)


@dataclass(frozen=True)
class SelfType:
    def __str__(self) -> str:
        return "self"


@dataclass(frozen=True)
class StaticType:
    def __str__(self) -> str:
        return "static"


@dataclass(frozen=True)
class ParentType:
    def __str__(self) -> str:
        return "parent"


@dataclass(frozen=True)
class VoidType:
    def __str__(self) -> str:
        return "void"


@dataclass(frozen=True)
class MixedType:
    def __str__(self) -> str:
        return "mixed"


TypeExpression = Union[
    Named, Nullable, UnionType, IntersectionType,
    SelfType, StaticType, ParentType, VoidType, MixedType,
]

_KEYWORDS = {
    "self": SelfType(),
    "static": StaticType(),
    "parent": ParentType(),
    "void": VoidType(),
    "mixed": MixedType(),
}


def _grouped(member: "TypeExpression") -> str:
    if isinstance(member, IntersectionType):
        return f"({member})"
    return str(member)


def _split_top_level(text: str, sep: str) -> list[str]:
    """Splits on ``sep`` outside parentheses."""
    parts, depth, current = [], 0, []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _strip_outer_parens(text: str) -> str:
    while text.startswith("(") and text.endswith(")"):
        depth = 0
        for i, ch in enumerate(text):
            depth += ch == "("
            depth -= ch == ")"
            if depth == 0 and i < len(text) - 1:
                return text
        text = text[1:-1].strip()
    return text


def parse_type(text: Optional[str]) -> Optional[TypeExpression]:
    """
    Parses a PHP type declaration. Returns None for an absent/empty type.

    >>> parse_type("?Foo")
    Nullable(inner=Named(name='Foo'))
    """
    if text is None:
        return None
    text = " ".join(text.split())
    if not text:
        return None
    text = _strip_outer_parens(text)

    if text.startswith("?"):
        inner = parse_type(text[1:])
        return Nullable(inner) if inner is not None else None

    union = [p.strip() for p in _split_top_level(text, "|")]
    if len(union) > 1:
        return UnionType(tuple(parse_type(p) for p in union if p))

    inter = [p.strip() for p in _split_top_level(text, "&")]
    if len(inter) > 1:
        return IntersectionType(tuple(parse_type(p) for p in inter if p))

    keyword = _KEYWORDS.get(text.lower())
    if keyword is not None:
        return keyword
    if text.lower() in SCALAR_TYPES:
        return Named(text.lower())
    return Named(text)
