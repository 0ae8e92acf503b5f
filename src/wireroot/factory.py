"""Factories binding a component name to the function that constructs it."""

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, get_origin, get_type_hints

from wireroot.domain import ResolverStrategy
from wireroot.errors import ConstructionFailure, DependencyError

__all__ = ["Factory", "inferred_name"]

logger = logging.getLogger(__name__)

_EMPTY = object()


def inferred_name(target: Any) -> str:
    """Derive a component name from a type, class or provider function.

    Classes are named by their class name. Functions and methods are named
    after their return annotation when they have one, otherwise by their own
    name with any 'make_' prefix removed. Subscripted generics and other
    typing constructs are named by their string representation.

    Args:
        target: The type, class or function to derive a name from.

    Returns:
        The derived name. The same target always yields the same name.

    Raises:
        DependencyError: If the target is an unannotated lambda, or some other
            callable (such as a partial) with no stable name.

    Example:
        >>> inferred_name(Database)                 # Returns "Database"
        >>> inferred_name(make_database)            # Returns "database"
        >>> inferred_name(Callable[[str], str])     # Returns "typing.Callable[[str], str]"
    """
    if get_origin(target) is not None:
        return str(target)

    if inspect.isclass(target):
        return target.__name__

    if _is_routine(target):
        return_type = _return_type(target)
        if return_type is not None:
            return inferred_name(return_type)
        if target.__name__ == "<lambda>":
            raise DependencyError(
                "Cannot infer a name for an unannotated lambda; "
                "supply a name or a component type"
            )
        if target.__name__.startswith("make_"):
            return target.__name__[5:]
        return target.__name__

    if type(target).__module__ in ("typing", "types") or not callable(target):
        return str(target)

    raise DependencyError(
        f"Cannot infer a name for {target!r}; supply a name or a component type"
    )


def _is_routine(target: Any) -> bool:
    return inspect.isfunction(target) or inspect.ismethod(target)


def _return_type(func: Callable) -> Optional[Any]:
    return get_type_hints(func).get("return", None)


class _CacheSlot:
    """Holds a factory's constructed instance, and the lock guarding its construction."""

    def __init__(self):
        self.lock = threading.RLock()
        self.value = _EMPTY


@dataclass(frozen=True)
class Factory:
    """Binds a component name to a zero-argument construction function.

    The binding itself is immutable; only the cache slot changes, being filled
    on the first successful construction. Every subsequent call to
    :meth:`instance` returns that same object.

    Attributes:
        name: Name the component is registered and looked up under.
        func: Zero-argument callable constructing the component.
        strategy: Whether the component is constructed when registered into a
            container (EAGER) or when first resolved (LAZY).
        provided_type: The type the component is declared to be, if known.

    Example:
        >>> factory = Factory.of(Database)
        >>> factory.name
        'Database'
        >>> factory.instance() is factory.instance()
        True
    """

    name: str
    func: Callable[[], Any]
    strategy: ResolverStrategy = ResolverStrategy.LAZY
    provided_type: Optional[Any] = None
    _slot: _CacheSlot = field(
        default_factory=_CacheSlot, init=False, repr=False, compare=False
    )

    @staticmethod
    def of(
        func: Callable[[], Any],
        name: Optional[str] = None,
        strategy: ResolverStrategy = ResolverStrategy.LAZY,
        component_type: Optional[Any] = None,
    ) -> "Factory":
        """Create a factory, inferring its name and type where not given.

        Args:
            func: A class, or a zero-argument function, constructing the component.
            name: Explicit name; overrides any inferred name.
            strategy: Construction strategy.
            component_type: Declared type of the component. Defaults to the class
                itself, or the function's return annotation.

        Returns:
            The new factory.

        Raises:
            DependencyError: If func is not callable, or no name can be inferred.
        """
        if not callable(func):
            raise DependencyError(f"{func!r} is not a class or function")

        if component_type is None:
            if inspect.isclass(func):
                component_type = func
            elif _is_routine(func):
                component_type = _return_type(func)

        if name is None:
            name = inferred_name(component_type if component_type is not None else func)

        return Factory(name, func, strategy, component_type)

    @property
    def is_cached(self) -> bool:
        return self._slot.value is not _EMPTY

    def instance(self) -> Any:
        """Return the cached component, constructing it first if necessary.

        Construction happens at most once, even when called concurrently.

        Raises:
            ConstructionFailure: If the construction function raises. Nothing is
                cached, so a later call will try again.
        """
        slot = self._slot
        if slot.value is not _EMPTY:
            return slot.value

        with slot.lock:
            if slot.value is _EMPTY:
                logger.debug("Constructing '%s'", self.name)
                try:
                    value = self.func()
                except Exception as e:
                    raise ConstructionFailure(self.name) from e
                slot.value = value
            return slot.value

    def __str__(self) -> str:
        return self.name
