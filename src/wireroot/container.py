"""
Resolution of registered factories into component instances.

A :class:`Container` is a :class:`~wireroot.registry.Registry` that can also
resolve: given a type or a name it finds the matching factory, constructs the
component on first request, and caches it so that every later request for the
same name returns the same object.

Eager factories are constructed as soon as they are registered into a
container; lazy ones when first resolved. Either way the instance is cached.
"""

import logging
import types
from typing import Annotated, Any, Literal, Optional, TypeVar, Union, get_args, get_origin

from wireroot.domain import ComponentKey, ResolverStrategy
from wireroot.errors import BindingNotFound, DependencyError, TypeMismatch
from wireroot.factory import Factory, inferred_name
from wireroot.registry import Registry

__all__ = ["Container"]

logger = logging.getLogger(__name__)


class Container(Registry):
    """
    A registry whose factories can be resolved into cached component instances.

    Lookups take the container's lock only long enough to find the factory;
    construction happens under the factory's own lock, so a slow constructor
    blocks only callers waiting on that same component.

    Attributes:
        strict: If True, a request for an unregistered name logs a critical
            error and raises SystemExit instead of BindingNotFound.

    Example:
        >>> container = Container()
        >>> container.register(Factory.of(Database))
        >>> container.resolve(Database) is container[Database]
        True
    """

    def __init__(self, strict: bool = False):
        super().__init__()
        self.strict = strict

    def register(self, factory: Factory):
        """Register a factory, constructing its component now if it is eager.

        Args:
            factory: The Factory to be registered.

        Raises:
            ConstructionFailure: If an eager factory fails to construct. The
                factory remains registered, with nothing cached.
        """
        super().register(factory)
        if factory.strategy is ResolverStrategy.EAGER:
            factory.instance()

    def resolve(self, target: Optional[Any] = None, name: Optional[str] = None) -> Any:
        """Return the component registered for a type or name.

        The component is constructed on first request and cached; subsequent
        requests return the same instance.

        Args:
            target: The requested type. Used to infer the name if none is given,
                and to check the resolved instance.
            name: Explicit name to look up.

        Returns:
            The cached component instance.

        Raises:
            DependencyError: If neither a type nor a name is given.
            BindingNotFound: If nothing is registered under the name.
            TypeMismatch: If the instance does not satisfy the requested type.
            ConstructionFailure: If the factory fails to construct the instance.
        """
        if name is None:
            if target is None:
                raise DependencyError("Either a component type or a name is required")
            name = inferred_name(target)

        factory = self._lookup(name)
        if factory is None:
            self._missing(name)

        instance = factory.instance()
        if target is not None and not _satisfies(instance, target):
            raise TypeMismatch(name, target, type(instance))
        return instance

    def resolve_all(self, target: Optional[Any] = None) -> list[Any]:
        """Return every component satisfying a type, in registration order.

        Every registered factory is constructed (if it has not been already),
        including those whose instances turn out not to match.

        Args:
            target: The requested type. If None, all components are returned.

        Returns:
            The matching instances. Components of other types are left out.

        Raises:
            ConstructionFailure: If any factory fails to construct.
        """
        matching = []
        for factory in self.registered_factories():
            instance = factory.instance()
            if target is None or _satisfies(instance, target):
                matching.append(instance)
            else:
                logger.debug("Skipping '%s': not an instance of %s", factory.name, target)
        return matching

    def clear(self):
        """Drop every registration.

        Factories keep whatever they have cached; they are simply no longer
        reachable from this container.
        """
        self._clear()
        logger.debug("Cleared container")

    def _missing(self, name: str):
        if self.strict:
            logger.critical("Dependency '%s' not resolved", name)
            raise SystemExit(f"Dependency '{name}' not resolved")
        raise BindingNotFound(name)

    def __getitem__(self, key: ComponentKey) -> Any:
        if isinstance(key, str):
            return self.resolve(name=key)
        return self.resolve(key)


def _satisfies(instance: Any, expected: Any) -> bool:
    """Check an instance against a requested type.

    Plain classes are checked with isinstance. Subscripted generics are checked
    against their origin (so ``list[int]`` only checks for a list), unions
    against any of their members. Anything that cannot be checked at runtime,
    such as ``Any``, a TypeVar or a Protocol that is not runtime-checkable, is
    accepted.

    Example:
        >>> _satisfies("foo", str)                    # True
        >>> _satisfies(len, Callable[[str], int])     # True
        >>> _satisfies(None, Optional[int])           # True
        >>> _satisfies(1, str)                        # False
    """
    if expected is Any or isinstance(expected, TypeVar):
        return True

    origin = get_origin(expected)
    if origin is Union or origin is types.UnionType:
        return any(_satisfies(instance, member) for member in get_args(expected))
    if origin is Annotated:
        return _satisfies(instance, get_args(expected)[0])
    if origin is Literal:
        return instance in get_args(expected)
    if origin is not None:
        expected = origin

    if expected is None:
        return instance is None
    if _is_static_protocol(expected):
        return True
    if isinstance(expected, type):
        return isinstance(instance, expected)
    return True


def _is_static_protocol(expected: Any) -> bool:
    return getattr(expected, "_is_protocol", False) and not getattr(
        expected, "_is_runtime_protocol", False
    )
