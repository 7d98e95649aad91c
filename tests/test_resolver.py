import pytest

from php_solid.builtins import builtin_supertypes
from php_solid.models.ast_models import NameScope
from php_solid.models.types import parse_type
from php_solid.resolver import GLOBAL_SCOPE


@pytest.fixture
def session(analyze):
    return analyze("""
        <?php
        namespace App\\Model;

        use App\\Errors as Err;
        use Other\\Thing as Alias;

        interface Shape {}
        interface Named extends Shape {}
        class Base implements Named {}
        class Circle extends Base {}
        class Square extends Base {}
        class NotFound extends \\RuntimeException {}
        class Items implements \\IteratorAggregate
        {
            public function getIterator(): \\Iterator {}
        }
        enum Suit { case Hearts; }
    """, name="model.php")


@pytest.fixture
def resolver(session):
    return session.resolver


@pytest.fixture
def scope(session):
    return session.indexer.get_class("App\\Model\\Circle").scope


def test_resolution_order(resolver, scope):
    # Import alias
    assert resolver.resolve("Alias", scope) == "Other\\Thing"
    # Qualified name whose first segment is an alias
    assert resolver.resolve("Err\\Missing", scope) == "App\\Errors\\Missing"
    # Qualified name without alias is taken as written
    assert resolver.resolve("Vendor\\Lib", scope) == "Vendor\\Lib"
    # Declared in the current namespace
    assert resolver.resolve("square", scope) == "App\\Model\\Square"
    # Fully qualified
    assert resolver.resolve("\\Foo\\Bar", scope) == "Foo\\Bar"
    # Global fallback, with the canonical spelling of built-ins
    assert resolver.resolve("runtimeexception", scope) == "RuntimeException"
    assert resolver.resolve("Unknown", scope) == "Unknown"


def test_keywords(resolver, scope):
    assert resolver.resolve("INT", scope) == "int"
    assert resolver.resolve("self", scope) == "App\\Model\\Circle"
    assert resolver.resolve("static", scope) == "App\\Model\\Circle"
    assert resolver.resolve("parent", scope) == "App\\Model\\Base"


def test_global_scope_resolves_against_global_classes(resolver):
    assert resolver.resolve("Exception", GLOBAL_SCOPE) == "Exception"
    assert resolver.resolve("Circle", GLOBAL_SCOPE) == "Circle"


def test_ancestors_and_interfaces(resolver, session):
    assert resolver.ancestors("App\\Model\\Circle") == [
        "App\\Model\\Base", "App\\Model\\Named", "App\\Model\\Shape",
    ]
    circle = session.indexer.get_class("App\\Model\\Circle")
    assert [i.name for i in resolver.interfaces_of(circle)] == ["App\\Model\\Named", "App\\Model\\Shape"]
    assert "UnitEnum" in resolver.ancestors("App\\Model\\Suit")


def test_builtin_hierarchy():
    assert builtin_supertypes("UnexpectedValueException") == ["RuntimeException"]
    assert builtin_supertypes("nope") == []


def test_is_subtype(resolver, scope):
    assert resolver.is_subtype("Circle", ["Shape"], scope)
    assert resolver.is_subtype("Circle", ["circle"], scope)
    assert not resolver.is_subtype("Shape", ["Circle"], scope)
    assert not resolver.is_subtype("Circle", ["Square"], scope)
    assert resolver.is_subtype("NotFound", ["\\Exception"], scope)
    assert resolver.is_subtype("NotFound", ["\\Throwable"], scope)
    assert resolver.is_subtype("\\UnexpectedValueException", ["\\RuntimeException"])
    assert not resolver.is_subtype("\\RuntimeException", ["\\LogicException"])
    # Unknown classes only match themselves
    assert resolver.is_subtype("Ghost", ["Ghost"], scope)
    assert not resolver.is_subtype("Ghost", ["Shape"], scope)


def _sub(resolver, scope, candidate, target):
    return resolver.is_type_subtype(parse_type(candidate), parse_type(target), scope, scope)


@pytest.mark.parametrize("candidate,target", [
    ("Circle", "Shape"),
    ("Circle", "?Shape"),
    ("null", "?Shape"),
    ("?Circle", "Shape|null"),
    ("Circle|Square", "Base"),
    ("Circle", "object"),
    ("array", "iterable"),
    ("Items", "iterable"),
    ("true", "bool"),
    ("never", "Circle"),
    ("int", "mixed"),
    ("Circle", "mixed"),
    ("void", "void"),
    ("self", "Base"),
    ("static", "Circle"),
    ("parent", "Base"),
    ("Circle&Named", "Base"),
    ("Circle", "Base&Named"),
    ("\\Closure", "callable"),
])
def test_type_subtype_holds(resolver, scope, candidate, target):
    assert _sub(resolver, scope, candidate, target)


@pytest.mark.parametrize("candidate,target", [
    ("Shape", "Circle"),
    ("?Circle", "Circle"),
    ("Circle|Shape", "Base"),
    ("int", "string"),
    ("bool", "true"),
    ("iterable", "array"),
    ("void", "mixed"),
    ("mixed", "int"),
    ("int", "void"),
    ("void", "int"),
    ("Ghost", "object"),
    ("Ghost", "Shape"),
    ("Circle", "Square&Named"),
])
def test_type_subtype_fails(resolver, scope, candidate, target):
    assert not _sub(resolver, scope, candidate, target)


def test_types_resolve_in_their_own_scopes(analyze):
    session = analyze("""
        <?php
        namespace A { class Item {} }
        namespace B { class Item {} }
    """)
    resolver = session.resolver
    a = NameScope("A", {})
    b = NameScope("B", {})
    assert resolver.is_type_subtype(parse_type("Item"), parse_type("Item"), a, a)
    assert not resolver.is_type_subtype(parse_type("Item"), parse_type("Item"), a, b)


def test_find_method_through_traits_and_parents(analyze):
    session = analyze("""
        <?php
        trait Helper
        {
            public function help() {}
        }
        class Base
        {
            use Helper;
            public function run() {}
        }
        class Child extends Base
        {
            public function own() {}
        }
    """)
    resolver = session.resolver
    child = session.indexer.get_class("Child")
    assert resolver.find_method(child, "own").owner == "Child"
    assert resolver.find_method(child, "RUN").owner == "Base"
    assert resolver.find_method(child, "help").owner == "Helper"
    assert resolver.find_method(child, "missing") is None
    assert set(resolver.own_methods(session.indexer.get_class("Base"))) == {"run", "help"}
    assert [m.name for m in resolver.methods_of(child)] == ["own", "run", "help"]


def test_cyclic_hierarchy_terminates(analyze):
    session = analyze("""
        <?php
        interface A extends B {}
        interface B extends A {}
    """)
    assert session.resolver.ancestors("A") == ["B"]


def test_qualified_name_expands_a_leading_import_alias(analyze):
    session = analyze("""
        <?php
        namespace App;

        use Vendor\\Http as Http;

        class Client {}
    """)
    scope = session.indexer.get_class("App\\Client").scope
    resolver = session.resolver

    assert resolver.resolve("Http\\Exception\\Timeout", scope) == "Vendor\\Http\\Exception\\Timeout"
    assert resolver.resolve("http\\Request", scope) == "Vendor\\Http\\Request"
    # No alias for the first segment: canonical as written, not namespace-relative
    assert resolver.resolve("Sub\\Thing", scope) == "Sub\\Thing"
    assert resolver.resolve("\\Http\\Request", scope) == "Http\\Request"


def test_builtin_interfaces_contribute_methods(resolver, session):
    items = session.indexer.get_class("App\\Model\\Items")
    assert [i.name for i in resolver.interfaces_of(items)] == ["IteratorAggregate", "Traversable"]
    assert [m.name for m in resolver.methods_of(items)] == ["getIterator"]

    countable = resolver.descriptor("\\countable")
    assert countable.is_interface
    assert [m.name for m in resolver.methods_of(countable)] == ["count"]
    assert countable.method("count").is_abstract
    assert countable.method("count").doc_comment is None

    seekable = resolver.descriptor("SeekableIterator")
    assert [m.name for m in resolver.methods_of(seekable)] == [
        "seek", "current", "next", "key", "valid", "rewind",
    ]
    assert resolver.descriptor("RuntimeException") is None
    assert resolver.descriptor("App\\Model\\Circle") is session.indexer.get_class("App\\Model\\Circle")
