import os
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tree_sitter import Language, Node, Parser, Tree

from php_solid.errors import ParseError
from php_solid.logging import get_logger
from php_solid.logging_tags import INDEX, PARSE
from php_solid.models.ast_models import (
    ClassDescriptor,
    ClassKind,
    MethodDescriptor,
    Parameter,
    SourceLocation,
)
from php_solid.models.types import parse_type
from php_solid.tree_sitter_helpers import node_lines, node_text

logger = get_logger(__name__)


# --- Tree-sitter language loading -------------------------------------------

def load_php_language() -> Language:
    """
    Loads the Tree-sitter PHP grammar bundled with the ``tree-sitter-php`` wheel.
    ``language_php`` is the variant that expects the ``<?php`` open tag, as real
    source files have.
    """
    import tree_sitter_php
    return Language(tree_sitter_php.language_php())


CLASS_LIKE_NODES = {
    "class_declaration": ClassKind.CLASS,
    "interface_declaration": ClassKind.INTERFACE,
    "trait_declaration": ClassKind.TRAIT,
    "enum_declaration": ClassKind.ENUM,
}

# Statements that may wrap a conditional class declaration.
_CONTAINER_NODES = {"compound_statement", "if_statement", "else_clause", "else_if_clause"}

_PARAMETER_NODES = {"simple_parameter", "variadic_parameter", "property_promotion_parameter"}

_ALIAS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)


def parse_use_declaration(text: str) -> dict[str, str]:
    """
    Parses the text of a namespace-level ``use`` statement into alias -> target.

    Handles comma lists, ``as`` aliases and group use (``use A\\{B, C as D};``).
    ``use function`` and ``use const`` import no class names and yield nothing.
    """
    body = text.strip().rstrip(";").strip()
    body = re.sub(r"^use\s+", "", body, flags=re.IGNORECASE)
    if re.match(r"(function|const)\s", body, re.IGNORECASE):
        return {}

    if "{" in body:
        prefix, group = body.split("{", 1)
        prefix = prefix.strip().strip("\\")
        entries = [f"{prefix}\\{e.strip()}" for e in group.rstrip("}").split(",") if e.strip()]
    else:
        entries = [e.strip() for e in body.split(",") if e.strip()]

    imports: dict[str, str] = {}
    for entry in entries:
        # group entries may carry their own kind: use A\{function f, B}
        tail = entry.rsplit("\\", 1)[-1]
        if re.match(r"(function|const)\s", tail, re.IGNORECASE):
            continue
        parts = _ALIAS_RE.split(entry, maxsplit=1)
        target = parts[0].strip().lstrip("\\")
        alias = parts[1].strip() if len(parts) > 1 else target.rsplit("\\", 1)[-1]
        if target:
            imports[alias] = target
    return imports


@dataclass
class SourceFile:
    """One parsed file: its tree and the class-likes declared in it."""
    path: str
    tree: Tree
    classes: list = field(default_factory=list)  # [ClassDescriptor]


# --- The Indexer -------------------------------------------------------------

class PhpIndexer:
    """
    Walks Tree-sitter PHP ASTs to build the static class index:
    files -> namespaces -> class-likes -> methods.

    Each file is parsed once; every class-like it declares is registered under
    its canonical (namespace-qualified) name.
    """

    def __init__(self):
        self.language = load_php_language()
        self.parser = Parser(self.language)

        # In-memory index
        self.namespaces: set[str] = set()
        self.files: dict[str, SourceFile] = {}  # absolute path -> SourceFile
        self._classes: dict[str, ClassDescriptor] = {}  # lowercased canonical name -> descriptor
        self._failed: dict[str, ParseError] = {}

    def parse(self, source: str) -> Tree:
        """
        Parses a single source string into a Tree-sitter tree.
        """
        return self.parser.parse(source.encode("utf-8"))

    def parse_file(self, path: str) -> SourceFile:
        """
        Returns the cached parse of ``path``, parsing it on first use.

        Raises ParseError if the file cannot be read or contains syntax errors;
        the failure is cached too, so a bad file is only reported once.
        """
        key = os.path.abspath(path)
        cached = self.files.get(key)
        if cached is not None:
            logger.debug(f"{PARSE} cache hit {key}")
            return cached
        if key in self._failed:
            raise self._failed[key]

        try:
            with open(key, "r", encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            error = ParseError(key, f"unreadable source ({e})")
            self._failed[key] = error
            raise error from e

        return self.index_source(source, key)

    def index_file(self, path: str) -> list[ClassDescriptor]:
        """
        Parses (or reuses) a file and returns the class-likes it declares.
        """
        return list(self.parse_file(path).classes)

    def index_source(self, source: str, file_path: Optional[str] = None) -> SourceFile:
        """
        Parses & indexes PHP source. ``file_path`` is the cache key.
        """
        key = os.path.abspath(file_path) if file_path else "<memory>"
        if key in self.files:
            return self.files[key]

        tree = self.parse(source)
        if tree.root_node.has_error:
            line = self._first_error_line(tree.root_node)
            error = ParseError(key, f"syntax error near line {line}")
            self._failed[key] = error
            raise error

        unit = SourceFile(path=key, tree=tree)
        for namespace, nodes in self._namespace_blocks(tree.root_node):
            if namespace:
                self.namespaces.add(namespace)
            imports: dict[str, str] = {}
            class_nodes: list[Node] = []
            self._collect_block(nodes, imports, class_nodes)
            for class_node in class_nodes:
                descriptor = self._index_class(class_node, namespace, imports, key)
                if descriptor is not None:
                    unit.classes.append(descriptor)
                    self._register(descriptor)

        self.files[key] = unit
        logger.debug(f"{PARSE} parsed {key}: {len(unit.classes)} class-like(s)")
        return unit

    # -- Registry -------------------------------------------------------------

    def _register(self, descriptor: ClassDescriptor):
        key = descriptor.name.lower()
        if key in self._classes:
            logger.debug(
                f"{INDEX} {descriptor.name} already declared in "
                f"{self._classes[key].location.path}; keeping the first declaration"
            )
            return
        self._classes[key] = descriptor

    def get_class(self, name: str) -> Optional[ClassDescriptor]:
        return self._classes.get(name.lstrip("\\").lower())

    def has_class(self, name: str) -> bool:
        return self.get_class(name) is not None

    def classes(self) -> list[ClassDescriptor]:
        return list(self._classes.values())

    # -- AST helpers ----------------------------------------------------------

    def _first_error_line(self, root: Node) -> int:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
            stack.extend(reversed(node.children))
        return root.start_point[0] + 1

    def _namespace_blocks(self, root: Node) -> list[tuple[str, list[Node]]]:
        """
        Splits the program into (namespace, statements) blocks. Handles both
        ``namespace Foo;`` (applies to the following siblings) and bracketed
        ``namespace Foo { ... }`` syntax.
        """
        blocks: list[tuple[str, list[Node]]] = []
        current_ns, current = "", []
        for child in root.named_children:
            if child.type != "namespace_definition":
                current.append(child)
                continue
            name = node_text(child.child_by_field_name("name")).strip("\\")
            body = child.child_by_field_name("body")
            if body is not None:
                blocks.append((name, list(body.named_children)))
                continue
            blocks.append((current_ns, current))
            current_ns, current = name, []
        blocks.append((current_ns, current))
        return [(ns, nodes) for ns, nodes in blocks if nodes]

    def _collect_block(self, nodes: Iterable[Node], imports: dict[str, str],
                       class_nodes: list[Node]):
        for node in nodes:
            if node.type == "namespace_use_declaration":
                imports.update(parse_use_declaration(node_text(node)))
            elif node.type in CLASS_LIKE_NODES:
                class_nodes.append(node)
            elif node.type in _CONTAINER_NODES:
                self._collect_block(node.named_children, imports, class_nodes)

    def _fqcn(self, namespace: str, simple: str) -> str:
        """Builds a canonical class name from namespace + simple name."""
        return f"{namespace}\\{simple}" if namespace else simple

    def _clause_names(self, clause: Node) -> tuple[str, ...]:
        return tuple(
            node_text(c) for c in clause.named_children
            if c.type in ("name", "qualified_name")
        )

    def _index_class(self, node: Node, namespace: str, imports: dict[str, str],
                     path: str) -> Optional[ClassDescriptor]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        kind = CLASS_LIKE_NODES[node.type]
        fqcn = self._fqcn(namespace, node_text(name_node))

        parent_ref = None
        interface_refs: tuple[str, ...] = ()
        is_abstract = False
        for child in node.children:
            if child.type == "base_clause":
                names = self._clause_names(child)
                if kind is ClassKind.INTERFACE:
                    interface_refs += names  # interfaces "extend" other interfaces
                elif names:
                    parent_ref = names[0]
            elif child.type == "class_interface_clause":
                interface_refs += self._clause_names(child)
            elif child.type == "abstract_modifier" or node_text(child).lower() == "abstract":
                is_abstract = True

        methods: dict[str, MethodDescriptor] = {}
        trait_refs: list[str] = []
        body = node.child_by_field_name("body")
        for member in (body.named_children if body is not None else []):
            if member.type == "method_declaration":
                method = self._index_method(member, fqcn, kind, path)
                methods.setdefault(method.name.lower(), method)
            elif member.type == "use_declaration":
                trait_refs.extend(self._trait_names(member))

        start, end = node_lines(node)
        logger.debug(f"{INDEX} {kind.value} {fqcn} ({len(methods)} methods) @ {path}:{start}")
        return ClassDescriptor(
            name=fqcn,
            kind=kind,
            namespace=namespace,
            imports=dict(imports),
            methods=methods,
            location=SourceLocation(path, start, end),
            parent_ref=parent_ref,
            interface_refs=interface_refs,
            trait_refs=tuple(trait_refs),
            is_abstract=is_abstract,
        )

    def _trait_names(self, node: Node) -> list[str]:
        """``use A, B;`` or ``use A, B { ... }`` inside a class body."""
        text = node_text(node)
        text = re.sub(r"^use\s+", "", text.strip(), flags=re.IGNORECASE)
        text = text.split("{", 1)[0].rstrip(";")
        return [t.strip() for t in text.split(",") if t.strip()]

    def _return_type_node(self, node: Node) -> Optional[Node]:
        ret = node.child_by_field_name("return_type")
        if ret is not None:
            return ret
        # Older grammars: the type is the named node right after ":"
        seen_colon = False
        for child in node.children:
            if child.type == ":":
                seen_colon = True
            elif seen_colon and child.is_named and child.type != "comment":
                return child if child.type != "compound_statement" else None
        return None

    def _doc_comment(self, node: Node) -> Optional[str]:
        prev = node.prev_named_sibling
        if prev is not None and prev.type == "comment":
            text = node_text(prev)
            if text.startswith("/**"):
                return text
        return None

    def _index_method(self, node: Node, owner: str, kind: ClassKind,
                      path: str) -> MethodDescriptor:
        """
        Pulls out a method's name, modifiers, parameters, return type and
        docblock. The node itself is kept so the body can be analyzed later.
        """
        name_node = node.child_by_field_name("name")
        method_name = node_text(name_node) if name_node else "<anonymous>"

        modifiers = {
            node_text(c).lower() for c in node.children if c.type.endswith("_modifier")
        }
        visibility = next(
            (v for v in ("private", "protected", "public") if any(m.startswith(v) for m in modifiers)),
            "public",
        )

        parameters = []
        params_node = node.child_by_field_name("parameters")
        for p in (params_node.named_children if params_node is not None else []):
            if p.type not in _PARAMETER_NODES:
                continue
            p_name = node_text(p.child_by_field_name("name")).lstrip("&.").lstrip("$")
            p_type = p.child_by_field_name("type")
            parameters.append(Parameter(
                name=p_name,
                type=parse_type(node_text(p_type)) if p_type is not None else None,
                variadic=p.type == "variadic_parameter",
            ))

        ret_node = self._return_type_node(node)
        start, end = node_lines(node)
        return MethodDescriptor(
            owner=owner,
            name=method_name,
            parameters=tuple(parameters),
            return_type=parse_type(node_text(ret_node)) if ret_node is not None else None,
            doc_comment=self._doc_comment(node),
            location=SourceLocation(path, start, end),
            visibility=visibility,
            is_abstract="abstract" in modifiers or kind is ClassKind.INTERFACE,
            is_static="static" in modifiers,
            node=node,
        )
