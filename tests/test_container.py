import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import pytest

from wireroot.container import Container
from wireroot.domain import ResolverStrategy
from wireroot.errors import (
    BindingNotFound,
    ConstructionFailure,
    DependencyError,
    TypeMismatch,
)
from wireroot.factory import Factory


class Printer:
    def print(self, line):
        pass


class MockPrinter(Printer):
    def __init__(self):
        self.printed = []

    def print(self, line):
        self.printed.append(line)


class Greeter(Protocol):
    def greet(self, name: str) -> str: ...


@runtime_checkable
class Closeable(Protocol):
    def close(self): ...


class Clock(ABC):
    @abstractmethod
    def now(self) -> int: ...


class FixedClock(Clock):
    def now(self) -> int:
        return 42


class Connection:
    def close(self):
        pass


class EnglishGreeter:
    def greet(self, name: str) -> str:
        return f"Hello {name}"


class Database:
    def __init__(self, url: str = "sqlite://"):
        self.url = url


@pytest.fixture
def container() -> Container:
    return Container()


def test_resolve_by_type(container):
    container.register(Factory.of(Database))

    assert isinstance(container.resolve(Database), Database)


def test_resolve_returns_same_instance(container):
    container.register(Factory.of(Database))
    container.register(Factory.of(Database, name="eager", strategy=ResolverStrategy.EAGER))

    assert container.resolve(Database) is container.resolve(Database)
    assert container.resolve(name="eager") is container.resolve(name="eager")


def test_named_bindings_of_same_type_coexist(container):
    container.register(Factory.of(Database))
    container.register(Factory.of(lambda: Database("postgres://replica"), name="replica"))

    primary = container.resolve(Database)
    replica = container.resolve(Database, name="replica")

    assert primary is not replica
    assert primary.url == "sqlite://"
    assert replica.url == "postgres://replica"


def test_later_registration_wins(container):
    container.register(Factory.of(lambda: "first", name="thing"))
    container.register(Factory.of(lambda: "second", name="thing"))

    assert container.resolve(str, name="thing") == "second"


def test_replacing_discards_cached_instance(container):
    container.register(Factory.of(lambda: Database("a"), name="db"))
    first = container.resolve(name="db")

    container.register(Factory.of(lambda: Database("b"), name="db"))

    assert container.resolve(name="db") is not first
    assert container.resolve(name="db").url == "b"


def test_eager_factory_constructs_on_registration(container):
    constructed = []

    def make_database() -> Database:
        constructed.append("db")
        return Database()

    container.register(Factory.of(make_database, strategy=ResolverStrategy.EAGER))

    assert constructed == ["db"]
    container.resolve(Database)
    container.resolve(Database)
    assert constructed == ["db"]


def test_lazy_factory_constructs_on_first_resolution(container):
    constructed = []

    def make_database() -> Database:
        constructed.append("db")
        return Database()

    container.register(Factory.of(make_database))
    assert constructed == []

    container.resolve(Database)
    container.resolve(Database)
    assert constructed == ["db"]


def test_lazy_factory_never_resolved_is_never_constructed(container):
    container.register(Factory.of(lambda: pytest.fail("constructed"), name="unused"))

    assert "unused" in container


def test_eager_construction_targets_the_registered_name(container):
    container.register(Factory.of(lambda: Database("default"), component_type=Database))
    container.register(
        Factory.of(lambda: Database("eager"), name="eager", strategy=ResolverStrategy.EAGER)
    )

    assert container.registered_factories()[1].is_cached
    assert not container.registered_factories()[0].is_cached


def test_unregistered_name_raises(container):
    with pytest.raises(BindingNotFound, match="No factory registered for 'Database'") as e:
        container.resolve(Database)

    assert e.value.name == "Database"


def test_strict_container_exits_on_unregistered_name(caplog):
    container = Container(strict=True)

    with pytest.raises(SystemExit):
        container.resolve(name="missing")

    assert "Dependency 'missing' not resolved" in caplog.text


def test_resolve_needs_type_or_name(container):
    with pytest.raises(DependencyError, match="Either a component type or a name"):
        container.resolve()


def test_type_mismatch_raises(container):
    container.register(Factory.of(lambda: "not a printer", name="printer"))

    with pytest.raises(TypeMismatch, match="does not satisfy requested type") as e:
        container.resolve(Printer, name="printer")

    assert e.value.actual is str
    assert e.value.expected is Printer


def test_type_mismatch_on_cached_instance(container):
    container.register(Factory.of(lambda: 42, name="answer"))

    assert container.resolve(name="answer") == 42
    with pytest.raises(TypeMismatch):
        container.resolve(str, name="answer")


def test_subclass_satisfies_requested_type(container):
    container.register(Factory.of(MockPrinter, name="printer"))

    assert isinstance(container.resolve(Printer, name="printer"), MockPrinter)


def test_generic_types_are_checked_by_origin(container):
    def make_greeter() -> Callable[[str], str]:
        return lambda name: f"Hello {name}"

    container.register(Factory.of(make_greeter))
    container.register(Factory.of(lambda: [1, 2], name="numbers"))
    container.register(Factory.of(lambda: None, name="nothing"))

    assert container.resolve(Callable[[str], str])("Arthur") == "Hello Arthur"
    assert container.resolve(list[int], name="numbers") == [1, 2]
    assert container.resolve(Optional[int], name="nothing") is None
    assert container.resolve(Any, name="numbers") == [1, 2]
    with pytest.raises(TypeMismatch):
        container.resolve(dict[str, int], name="numbers")


def test_construction_failure_on_resolution(container):
    def make_database() -> Database:
        raise ConnectionError("unreachable")

    container.register(Factory.of(make_database))

    with pytest.raises(ConstructionFailure, match="Construction of 'Database' failed") as e:
        container.resolve(Database)

    assert isinstance(e.value.__cause__, ConnectionError)
    assert not container.registered_factories()[0].is_cached


def test_construction_failure_on_eager_registration(container):
    def make_database() -> Database:
        raise ConnectionError("unreachable")

    with pytest.raises(ConstructionFailure):
        container.register(Factory.of(make_database, strategy=ResolverStrategy.EAGER))

    assert "Database" in container


def test_resolve_all_returns_matching_instances(container):
    container.register(Factory.of(MockPrinter))
    container.register(Factory.of(Database))

    printers = container.resolve_all(Printer)

    assert len(printers) == 1
    assert printers[0] is container.resolve(MockPrinter)


def test_resolve_all_constructs_and_caches_everything(container):
    container.register(Factory.of(MockPrinter))
    container.register(Factory.of(Database))

    container.resolve_all(Printer)

    assert all(f.is_cached for f in container.registered_factories())


def test_resolve_all_in_registration_order(container):
    container.register(Factory.of(lambda: "b", name="b"))
    container.register(Factory.of(lambda: "a", name="a"))
    container.register(Factory.of(lambda: 1, name="one"))

    assert container.resolve_all(str) == ["b", "a"]
    assert container.resolve_all() == ["b", "a", 1]


def test_resolve_all_with_no_matches_is_empty(container):
    container.register(Factory.of(Database))

    assert container.resolve_all(Printer) == []


def test_lookup_by_key(container):
    container.register(Factory.of(Database))
    container.register(Factory.of(lambda: "foo", name="foo"))

    assert container["foo"] == "foo"
    assert container[Database] is container.resolve(Database)


def test_clear_drops_registrations(container):
    container.register(Factory.of(Database))
    container.clear()

    assert len(container) == 0
    with pytest.raises(BindingNotFound):
        container.resolve(Database)


def test_concurrent_first_resolution_constructs_once(container):
    constructed = []
    lock = threading.Lock()

    def make_database() -> Database:
        with lock:
            constructed.append("db")
        time.sleep(0.05)
        return Database()

    container.register(Factory.of(make_database))

    with ThreadPoolExecutor(max_workers=8) as pool:
        instances = list(pool.map(lambda _: container.resolve(Database), range(16)))

    assert constructed == ["db"]
    assert all(instance is instances[0] for instance in instances)


def test_slow_construction_does_not_block_other_components(container):
    started = threading.Event()
    release = threading.Event()

    def make_database() -> Database:
        started.set()
        release.wait(timeout=5)
        return Database()

    container.register(Factory.of(make_database))
    container.register(Factory.of(MockPrinter))

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(container.resolve, Database)
        assert started.wait(timeout=5)

        assert isinstance(container.resolve(MockPrinter), MockPrinter)

        release.set()
        assert isinstance(pending.result(timeout=5), Database)


def test_factory_may_resolve_other_components(container):
    container.register(Factory.of(lambda: Database("postgres://"), component_type=Database))
    container.register(
        Factory.of(lambda: container.resolve(Database).url, name="url", strategy=ResolverStrategy.EAGER)
    )

    assert container.resolve(str, name="url") == "postgres://"


def test_resolve_by_abstract_base_class(container):
    container.register(Factory.of(FixedClock, component_type=Clock))

    clock = container.resolve(Clock)

    assert isinstance(clock, FixedClock)
    assert clock.now() == 42
    assert container.resolve_all(Clock) == [clock]


def test_resolve_by_protocol(container):
    container.register(Factory.of(EnglishGreeter, component_type=Greeter))

    greeter = container.resolve(Greeter)

    assert greeter.greet("Arthur") == "Hello Arthur"
    assert container.resolve_all(Greeter) == [greeter]


def test_runtime_checkable_protocol_is_checked(container):
    container.register(Factory.of(EnglishGreeter, name="greeter"))
    container.register(Factory.of(Connection))

    assert container.resolve_all(Closeable) == [container.resolve(Connection)]
    with pytest.raises(TypeMismatch):
        container.resolve(Closeable, name="greeter")
