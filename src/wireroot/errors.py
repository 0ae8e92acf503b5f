__all__ = [
    "DependencyError",
    "BindingNotFound",
    "TypeMismatch",
    "ConstructionFailure",
]


class DependencyError(Exception):
    """Raised when a dependency cannot be registered or resolved."""

    pass


class BindingNotFound(DependencyError):
    """Raised when no factory is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"No factory registered for '{name}'")
        self.name = name


class TypeMismatch(DependencyError):
    """Raised when a resolved instance does not satisfy the requested type."""

    def __init__(self, name: str, expected: type, actual: type):
        super().__init__(
            f"Component '{name}' is of type {actual.__name__}, "
            f"which does not satisfy requested type {expected}"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class ConstructionFailure(DependencyError):
    """Raised when a factory's construction function fails.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, name: str):
        super().__init__(f"Construction of '{name}' failed")
        self.name = name
