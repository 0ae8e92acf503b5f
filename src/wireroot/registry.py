"""Registration and introspection utilities for component factories."""

import inspect
import logging
import threading
from typing import Callable, Iterator, Optional

from wireroot.domain import ResolverStrategy
from wireroot.errors import DependencyError
from wireroot.factory import Factory, inferred_name

__all__ = [
    "Factory",
    "Registry",
    "inferred_name",
]

logger = logging.getLogger(__name__)


class Registry:
    """Registry of factories keyed by component name.

    A plain registry is a staging area: it holds factories but never constructs
    anything. Its factories take effect once merged into a
    :class:`~wireroot.container.Container`.

    Registering a factory under a name that is already taken replaces the
    earlier factory (and whatever it had cached). Factories are enumerated in
    the order they were registered; a replacement counts as a new registration.

    Example:
        >>> registry = Registry()
        >>>
        >>> @registry.provides()
        >>> def make_database() -> Database:
        ...     return Database()
        >>>
        >>> registry.describe()
        'Database'
    """

    def __init__(self):
        self._factories: dict[str, Factory] = {}
        self._lock = threading.Lock()

    def register(self, factory: Factory):
        """Register a factory explicitly.

        Args:
            factory: The Factory to be registered.
        """
        with self._lock:
            if self._factories.pop(factory.name, None) is not None:
                logger.debug("Replacing factory '%s'", factory.name)
            self._factories[factory.name] = factory
        logger.debug("Registered factory '%s' (%s)", factory.name, factory.strategy.value)

    def registered_factories(self) -> list[Factory]:
        """Retrieve all factories, in registration order."""
        with self._lock:
            return list(self._factories.values())

    def provides(
        self,
        name: Optional[str] = None,
        strategy: ResolverStrategy = ResolverStrategy.LAZY,
    ) -> Callable:
        """Decorator to register a class or zero-argument function as a factory.

        Args:
            name: Optional name to assign; defaults to the class name, the
                function's return type, or the function name with any 'make_'
                prefix removed.
            strategy: Construction strategy for the component.

        Returns:
            A decorator that registers its target and returns it unchanged.

        Example:
            @registry.provides(strategy=ResolverStrategy.EAGER)
            def make_thing() -> Thing:
                return Thing()
        """

        def decorator(obj):
            if not (inspect.isclass(obj) or inspect.isfunction(obj)):
                raise DependencyError(f"{obj} is not a class or function")

            self.register(Factory.of(obj, name, strategy))
            return obj

        return decorator

    def merge_into(self, target: "Registry"):
        """Register every factory of this registry into another, in order.

        When the target is a container, eager factories are constructed as
        they are merged.

        Args:
            target: The registry (typically a container) receiving the factories.
        """
        for factory in self.registered_factories():
            target.register(factory)

    def describe(self) -> str:
        """Comma-separated list of the registered names, for logging."""
        with self._lock:
            return ", ".join(self._factories)

    def _lookup(self, name: str) -> Optional[Factory]:
        with self._lock:
            return self._factories.get(name)

    def _clear(self):
        with self._lock:
            self._factories.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._factories))

    def __len__(self) -> int:
        return len(self._factories)
