"""Domain types shared by registries and containers."""

from enum import Enum
from typing import Union

__all__ = ["ResolverStrategy", "ComponentKey"]


class ResolverStrategy(Enum):
    """When a factory first constructs its instance.

    Both strategies cache the instance once constructed; the strategy only
    controls whether construction happens on registration into a container
    (``EAGER``) or on first resolution (``LAZY``).
    """

    LAZY = "lazy"
    EAGER = "eager"


ComponentKey = Union[str, type]
"""Type alias for keys used to look up components in a Container.

Components can be retrieved either by their string name or by their type.
When using a type as a key, it's converted to its inferred name for lookup.

Example:
    >>> container["database"]     # Lookup by name
    >>> container[Database]       # Lookup by type (converted to "Database")
"""
