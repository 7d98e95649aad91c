# --- Tree-sitter plumbing ----------------------------------------------------
from typing import Callable, Iterator, Optional

from tree_sitter import Node


def node_text(node: Optional[Node]) -> str:
    """
    Decodes the source slice covered by a node.
    Trees are always parsed from bytes, so every node carries its own text.
    """
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_lines(node: Node) -> tuple[int, int]:
    """
    Returns the 1-based (start_line, end_line) of a node, the way PHP tools
    report line ranges.
    """
    return (node.start_point[0] + 1, node.end_point[0] + 1)


def is_comment(node: Node) -> bool:
    return node.type == "comment"


def statements(block: Optional[Node]) -> list[Node]:
    """Named children of a compound statement, comments dropped."""
    if block is None:
        return []
    return [child for child in block.named_children if not is_comment(child)]


def walk(node: Node, skip: frozenset = frozenset()) -> Iterator[Node]:
    """
    Pre-order DFS over a subtree. Children of node types listed in ``skip``
    are not visited (the skipped node itself is not yielded either).
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if current is not node and current.type in skip:
            continue
        yield current
        stack.extend(reversed(current.children))


def find_ancestor(node: Node, predicate: Callable[[Node], bool],
                  stop: Optional[Node] = None) -> Optional[Node]:
    """First ancestor matching ``predicate``, never climbing past ``stop``."""
    current = node.parent
    while current is not None:
        if predicate(current):
            return current
        if stop is not None and current == stop:
            return None
        current = current.parent
    return None


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    """Strips ``parenthesized_expression`` wrappers: ``((new Foo))`` -> ``new Foo``."""
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if not is_comment(c)]
        node = inner[0] if inner else None
    return node


# --- PHP node shapes -----------------------------------------------------------

THROW_NODES = frozenset({"throw_expression", "throw_statement"})
CLASS_NAME_NODES = frozenset({"name", "qualified_name", "relative_scope"})


def created_class_name(creation: Node) -> Optional[str]:
    """Class name of ``new X(...)``; None for anonymous classes and ``new $var``."""
    named = [c for c in creation.named_children if not is_comment(c)]
    if named and named[0].type in CLASS_NAME_NODES:
        return node_text(named[0])
    return None


def throw_operand(node: Node) -> Optional[Node]:
    """The thrown expression of a throw node (or of a statement wrapping one)."""
    if node.type == "expression_statement":
        inner = [c for c in node.named_children if not is_comment(c)]
        node = inner[0] if inner else node
    if node.type not in THROW_NODES:
        return None
    named = [c for c in node.named_children if not is_comment(c)]
    return unwrap_parens(named[0]) if named else None
