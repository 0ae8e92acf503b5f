"""The process-wide root container.

Application code resolves components through a single root container. The root
is created on first use, but can be replaced with an explicitly constructed
container (for example a strict one, or a fresh one per test) and torn down
with :func:`reset_root`.
"""

import logging
import threading
from typing import Any, Optional

from wireroot.container import Container

__all__ = ["get_root", "set_root", "reset_root", "resolve", "resolve_all"]

logger = logging.getLogger(__name__)

_root: Optional[Container] = None
_root_lock = threading.Lock()


def get_root() -> Container:
    """Return the root container, creating a default one if none is set."""
    global _root
    with _root_lock:
        if _root is None:
            _root = Container()
            logger.debug("Created default root container")
        return _root


def set_root(container: Container) -> Container:
    """Install a container as the root, returning it."""
    global _root
    with _root_lock:
        _root = container
    return container


def reset_root():
    """Clear and discard the root container. The next use creates a fresh one."""
    global _root
    with _root_lock:
        root, _root = _root, None
    if root is not None:
        root.clear()


def resolve(target: Optional[Any] = None, name: Optional[str] = None) -> Any:
    """Resolve a component from the root container. See :meth:`Container.resolve`."""
    return get_root().resolve(target, name)


def resolve_all(target: Optional[Any] = None) -> list[Any]:
    """Resolve every matching component from the root container. See :meth:`Container.resolve_all`."""
    return get_root().resolve_all(target)
