import pytest

from php_solid.errors import ClassNotFoundError
from php_solid.rules.isp import FatInterfaceRule
from php_solid.session import AnalysisSession


@pytest.fixture
def examples(fixtures_dir):
    def _examples(isp_threshold: int = 5) -> AnalysisSession:
        session = AnalysisSession(isp_threshold=isp_threshold)
        session.index_file(str(fixtures_dir / "isp_examples.php"))
        return session
    return _examples


def test_compliant_classes_pass(examples):
    session = examples()
    for name in ["HumanWorker", "CompliantClass", "FlakyPrinter", "RealChecker"]:
        assert session.check_isp(name) == [], name


def test_empty_methods(examples):
    violations = examples().check_isp("RobotWorker")

    assert [v.reason for v in violations] == [
        "Method eat() is empty (no statements) — interface may be too wide for this class.",
        "Method sleep() is empty (no statements) — interface may be too wide for this class.",
    ]
    assert {v.interface_name for v in violations} == {"WorkerInterface"}
    assert str(violations[0]).startswith("RobotWorker -> WorkerInterface: Method eat()")


def test_bad_method_call_stubs(examples):
    violations = examples().check_isp("SimplePrinter")

    assert [v.reason for v in violations] == [
        "Method scanDocument() is a stub (throws BadMethodCallException) — interface may be too wide for this class.",
        "Method faxDocument() is a stub (throws UnsupportedOperation) — interface may be too wide for this class.",
    ]


def test_void_and_null_returns(examples):
    violations = examples().check_isp("ReadOnlyRepository")

    assert len(violations) == 2
    assert "save() is a stub (returns void/nothing)" in violations[0].reason
    assert "delete() is a stub (returns null)" in violations[1].reason


@pytest.mark.parametrize("threshold,expected", [(5, 1), (6, 0), (10, 0)])
def test_fat_interface_threshold(examples, threshold, expected):
    violations = examples(threshold).check_isp("FatImplementation")

    assert len(violations) == expected
    if expected:
        assert violations[0].reason == (
            "Interface has 6 methods (threshold: 5) — consider splitting into smaller interfaces."
        )
        assert violations[0].details == "Methods: method1, method2, method3, method4, method5, method6"


def test_fat_interface_is_reported_once_per_run(examples):
    session = examples()

    assert len(session.check_isp("FatImplementation")) == 1
    assert session.check_isp("OtherFatImplementation") == []
    assert session.check_isp("FatImplementation") == []


def test_fat_interface_threshold_must_be_positive(examples):
    session = examples()
    with pytest.raises(ValueError):
        FatInterfaceRule(session.resolver, threshold=0)


def test_incomplete_implementation_needs_marker_and_trivial_return(examples):
    session = examples()

    violations = session.check_isp("MockChecker")
    assert len(violations) == 1
    assert violations[0].reason == (
        "Method check() appears to be an incomplete implementation "
        "(contains TODO/FIXME and trivial return)."
    )
    # Trivial return without a marker, and a marker without a trivial return.
    assert session.check_isp("RealChecker") == []
    assert session.check_isp("WipChecker") == []


def test_inherited_implementations_are_not_blamed(analyze):
    session = analyze("""
        <?php
        interface Cache
        {
            public function get(string $key): mixed;
            public function clear(): void;
        }

        abstract class BaseCache implements Cache
        {
            public function clear(): void {}
        }

        class FileCache extends BaseCache
        {
            public function get(string $key): mixed
            {
                return file_get_contents($key);
            }
        }
    """)
    assert session.check_isp("FileCache") == []
    assert len(session.check_isp("BaseCache")) == 1


def test_interfaces_are_found_through_parents_and_extension(analyze):
    session = analyze("""
        <?php
        interface Readable
        {
            public function read(): string;
        }

        interface Stream extends Readable
        {
            public function close(): void;
        }

        class Base implements Stream
        {
            public function read(): string { return "data"; }
            public function close(): void { fclose($this->handle); }
        }

        class Child extends Base
        {
            public function read(): string
            {
                return null;
            }
        }
    """)
    violations = session.check_isp("Child")

    assert [v.interface_name for v in violations] == ["Stream", "Readable"]
    assert all("read() is a stub (returns null)" in v.reason for v in violations)


def test_comment_only_body_is_empty(analyze):
    session = analyze("""
        <?php
        interface Listener
        {
            public function onEvent(): void;
        }

        class Noop implements Listener
        {
            public function onEvent(): void
            {
                /* intentionally left blank */
                // really
            }
        }
    """)
    violations = session.check_isp("Noop")
    assert len(violations) == 1
    assert "empty (no statements)" in violations[0].reason


def test_unknown_class(examples):
    with pytest.raises(ClassNotFoundError):
        examples().check_isp("Ghost")


def test_builtin_interface_methods_count_and_are_checked(analyze):
    session = analyze("""
        <?php
        interface Repo extends \\Countable, \\ArrayAccess
        {
            public function find(int $id): ?object;
            public function save(object $entity): void;
        }

        class ArrayRepo implements Repo
        {
            public function find(int $id): ?object { return $this->items[$id] ?? null; }
            public function save(object $entity): void { $this->items[] = $entity; }
            public function count(): int { return count($this->items); }
            public function offsetExists(mixed $offset): bool { return isset($this->items[$offset]); }
            public function offsetGet(mixed $offset): mixed { return $this->items[$offset]; }
            public function offsetSet(mixed $offset, mixed $value): void {}
            public function offsetUnset(mixed $offset): void {}
        }
    """, isp_threshold=5)
    violations = session.check_isp("ArrayRepo")

    fat = [v for v in violations if "methods (threshold" in v.reason]
    assert [v.interface_name for v in fat] == ["Repo"]
    assert fat[0].reason.startswith("Interface has 7 methods (threshold: 5)")
    assert fat[0].details == (
        "Methods: find, save, count, offsetExists, offsetGet, offsetSet, offsetUnset"
    )

    empty = [(v.interface_name, v.reason.split(" is ")[0]) for v in violations
             if "empty (no statements)" in v.reason]
    assert empty == [
        ("Repo", "Method offsetSet()"),
        ("Repo", "Method offsetUnset()"),
        ("ArrayAccess", "Method offsetSet()"),
        ("ArrayAccess", "Method offsetUnset()"),
    ]
    assert len(violations) == 5
