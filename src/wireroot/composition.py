"""High level entry points for composing registries into the root container.

:class:`Dependencies` collects factories and modules, in order, into a single
staging :class:`~wireroot.registry.Registry`; :meth:`Dependencies.build` then
merges it into a container (the root, by default). Eager factories are
constructed during the merge, in the order they were declared.

Example:
    >>> class PersistenceModule(Module):
    ...     def dependencies(self):
    ...         return Dependencies(
    ...             Factory.of(make_database, strategy=ResolverStrategy.EAGER),
    ...             Factory.of(UserRepository),
    ...         )
    >>>
    >>> Dependencies(PersistenceModule(), Factory.of(Clock)).build()
    >>> resolve(UserRepository)
"""

import logging
from typing import Any, Callable, Optional, Union

from wireroot.container import Container
from wireroot.domain import ResolverStrategy
from wireroot.errors import DependencyError
from wireroot.factory import Factory
from wireroot.registry import Registry
from wireroot.root import get_root

__all__ = ["Module", "Dependencies", "DependencyItem", "build"]

logger = logging.getLogger(__name__)


class Module:
    """A named set of factories, added to a registry as a unit.

    Either pass the module's items to the constructor, or subclass and override
    :meth:`dependencies`. Subclasses need not call ``Module.__init__``.
    """

    _name: Optional[str] = None
    _items: tuple = ()

    def __init__(self, *items: "DependencyItem", name: Optional[str] = None):
        self._name = name
        self._items = items

    @property
    def name(self) -> str:
        """The module's name, for logging. Defaults to the class name."""
        return self._name or type(self).__name__

    def dependencies(self) -> Union["Dependencies", Registry]:
        return Dependencies(*self._items)


DependencyItem = Union[Factory, Module, "Dependencies", Registry]
"""Anything that can be added to :class:`Dependencies`."""


class Dependencies:
    """Builder flattening factories and modules into one staging registry.

    Items are added in order; a later factory replaces an earlier one with the
    same name.

    Attributes:
        registry: The staging registry holding everything added so far.
    """

    def __init__(self, *items: DependencyItem):
        self.registry = Registry()
        for item in items:
            self.add(item)

    def add(self, item: DependencyItem) -> "Dependencies":
        """Add a factory, module, builder or registry.

        Raises:
            DependencyError: If the item is none of those.
        """
        if isinstance(item, Factory):
            self.registry.register(item)
        elif isinstance(item, Module):
            logger.debug("Adding module '%s'", item.name)
            self.add(item.dependencies())
        elif isinstance(item, Dependencies):
            item.registry.merge_into(self.registry)
        elif isinstance(item, Registry):
            item.merge_into(self.registry)
        else:
            raise DependencyError(f"{item!r} is not a Factory, Module or registry")
        return self

    def factory(
        self,
        func: Callable[[], Any],
        name: Optional[str] = None,
        strategy: ResolverStrategy = ResolverStrategy.LAZY,
        component_type: Optional[Any] = None,
    ) -> "Dependencies":
        """Add a factory built with :meth:`Factory.of`."""
        return self.add(Factory.of(func, name, strategy, component_type))

    def build(self, container: Optional[Container] = None) -> Container:
        """Merge everything added into a container. See :func:`build`."""
        return build(self.registry, container)


def build(registry: Registry, container: Optional[Container] = None) -> Container:
    """Merge a registry into a container, constructing eager components.

    Args:
        registry: The staging registry to merge.
        container: The container to merge into. Defaults to the root container.

    Returns:
        The container merged into.

    Raises:
        ConstructionFailure: If an eager factory fails to construct. Factories
            merged before it remain registered.
    """
    if container is None:
        container = get_root()
    registry.merge_into(container)
    logger.info("[FACTORIES]: %s", container.describe())
    return container
