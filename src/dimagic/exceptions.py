from __future__ import annotations

from collections.abc import Sequence


class DIMagicError(Exception):
    """Represent a base class for all dimagic-specific failures.

    Catch this type when you want to handle any resolution failure without
    matching each concrete exception class individually.
    """


class InvalidArgumentError(DIMagicError, TypeError):
    """Signal that a value passed to the engine is not usable as a callable.

    Raised by ``parse_parameter_names`` and ``Injector.inject`` when the target
    is not callable.
    """

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Expected a callable, got {type(value).__name__}: {value!r}")


class IllegalDependencyNameError(DIMagicError):
    """Signal a dependency name that collides with an intrinsic object member.

    Names such as ``__init__`` or ``__class__`` would shadow Python object
    internals once resolved values are attached to objects, so they are
    rejected before any lookup happens.

    Typical fix is renaming the parameter.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Illegal dependency name {name!r}: collides with an intrinsic member")


class DependencyNotFoundError(DIMagicError):
    """Signal that no strategy could resolve a dependency name.

    Raised when the name is not registered, is not a standard-library module,
    is not importable as an installed package and is not found on any of the
    injector's search paths.

    Typical fixes include registering the value with ``Injector.add``, adding
    a search path with ``Injector.add_search_path``, or marking the parameter
    optional with the trailing optional suffix.
    """

    def __init__(self, name: str, search_paths: Sequence[object] = ()) -> None:
        self.name = name
        self.search_paths = tuple(search_paths)
        super().__init__(
            f"Missing dependency {name!r} (search paths: {[str(p) for p in self.search_paths]})",
        )


class CircularDependencyError(DIMagicError):
    """Signal a name requested again while it is still being resolved.

    The message always contains the word ``circular`` and the chain of names
    that led back to the repeated one.
    """

    def __init__(self, name: str, stack: Sequence[str]) -> None:
        self.name = name
        self.stack = list(stack)
        chain = " -> ".join([*self.stack, name])
        super().__init__(f"Detected circular dependency on {name!r}: {chain}")


class FactoryError(DIMagicError):
    """Signal that a callback-style factory reported an error.

    The error passed to the continuation is available as ``error`` and as the
    exception ``__cause__``.
    """

    def __init__(self, name: str, error: object) -> None:
        self.name = name
        self.error = error
        super().__init__(f"Factory for dependency {name!r} failed: {error}")


class AsyncDependencyInSyncContextError(DIMagicError):
    """Signal a coroutine factory resolved without a running event loop.

    Typical fix is switching to ``await injector.ainject(...)``.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Dependency {name!r} is provided by a coroutine factory and needs a running "
            "event loop; use 'await injector.ainject(...)'",
        )
