"""Wireroot dependency resolution.

Wireroot maps a component name, or a type from which the name is inferred, to a
factory that constructs the component. Factories are declared in staging
registries, composed with modules, and merged into a single root container;
components are then resolved from the root and cached, so every request for a
name returns the same instance.

Key Features:
    - Names inferred from types, with explicit names for multiple instances of a type
    - Lazy construction on first resolution, or eager construction on registration
    - Process-wide singleton caching, safe under concurrent first resolution
    - Module composition through a plain builder
    - Runtime type checks on resolution

Basic Usage:
    >>> from wireroot.composition import Dependencies
    >>> from wireroot.factory import Factory
    >>> from wireroot.root import resolve
    >>>
    >>> Dependencies(
    ...     Factory.of(Database),
    ...     Factory.of(lambda: Database(replica=True), name="replica"),
    ... ).build()
    >>>
    >>> db = resolve(Database)
    >>> replica = resolve(Database, name="replica")

The library consists of several modules:
    - factory: Factories and name inference
    - registry: Staging registries and decorator-based registration
    - container: Resolution of factories into cached instances
    - root: The process-wide root container
    - composition: Modules and the builder merging them into the root
    - domain: Construction strategies and lookup keys
    - errors: Library-specific exceptions
"""
