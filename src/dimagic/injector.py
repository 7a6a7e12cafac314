from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from dimagic._internal.futures import map_result
from dimagic.config import InjectorSettings
from dimagic.dependency import Dependency
from dimagic.graph import GraphTracker, active_tracker
from dimagic.locator import ModuleCache
from dimagic.parameters import call_with_arguments, parse_parameter_names
from dimagic.resolver import Resolver

T = TypeVar("T")
ListenerF = TypeVar("ListenerF", bound=Callable[[Dependency], Any])

logger = logging.getLogger(__name__)


class InjectorEvent(str, Enum):
    """Events emitted by an injector."""

    NEW_DEPENDENCY = "new dependency"
    """A dependency was created for a previously unseen name; payload is the ``Dependency``."""


class Injector:
    """Resolve callable parameters by name and invoke the callable.

    Every parameter name of the target is a dependency name. Names resolve to
    the injector itself (``_injector``), to values registered with ``add``, to
    standard-library modules, to installed packages, or to modules found on
    the search paths. A module's value is its ``export`` attribute, or the
    module itself when it has none; exported callables are factories whose
    result becomes the value, invoked at most once.

    Resolved dependencies are cached per injector until ``remove`` is called.
    """

    def __init__(
        self,
        settings: InjectorSettings | None = None,
        *,
        search_paths: Iterable[Path | str] = (),
        module_cache: ModuleCache | None = None,
    ) -> None:
        """Initialize an injector.

        Args:
            settings: Defaults for flags, reserved names and search paths.
                Read from ``DIMAGIC_*`` environment variables when omitted.
            search_paths: Extra local search paths, searched after the ones
                from ``settings``.
            module_cache: Cache of loaded modules and factory results. Pass
                the same cache to several injectors to share factory results
                between them.

        Examples:
            .. code-block:: python

                injector = Injector(search_paths=["./lib"])
                injector.auto_inject_local_factories = False

                shared = ModuleCache()
                first = Injector(module_cache=shared)
                second = Injector(module_cache=shared)

        """
        self.settings = settings if settings is not None else InjectorSettings()
        self.auto_inject_external_factories = self.settings.auto_inject_external_factories
        self.auto_inject_local_factories = self.settings.auto_inject_local_factories

        self._search_paths: list[Path] = []
        for path in [*self.settings.search_paths, *search_paths]:
            self.add_search_path(path)

        self._module_cache = module_cache if module_cache is not None else ModuleCache()
        self._dependencies: dict[str, Dependency] = {}
        self._listeners: dict[InjectorEvent, list[Callable[[Dependency], Any]]] = {
            event: [] for event in InjectorEvent
        }
        self._resolver = Resolver(self)

    # region Configuration
    @property
    def search_paths(self) -> list[Path]:
        """Local search paths in lookup order."""
        return list(self._search_paths)

    @property
    def module_cache(self) -> ModuleCache:
        return self._module_cache

    def add_search_path(self, path: Path | str) -> None:
        """Append a directory to the local search paths.

        Paths are searched in insertion order; the first match wins. Adding a
        path twice keeps its original position.
        """
        resolved = Path(path).resolve()
        if resolved not in self._search_paths:
            self._search_paths.append(resolved)
            logger.debug("Added search path %s", resolved)

    # endregion Configuration

    # region Injection
    def inject(self, target: Callable[..., T]) -> T | Future[T]:
        """Invoke ``target`` with its parameters resolved by name.

        Parameters are resolved left to right and the first failure stops the
        resolution. When every dependency settles synchronously the target's
        return value is returned and failures are raised directly. When a
        callback-style or coroutine factory suspends, a
        ``concurrent.futures.Future`` is returned instead; it settles with the
        target's return value or with the resolution failure.

        Args:
            target: Callable whose parameter names are dependency names.

        Returns:
            The target's return value, or a future of it if resolution
            suspended.

        Raises:
            InvalidArgumentError: If ``target`` is not callable.
            IllegalDependencyNameError: If a parameter name is reserved.
            DependencyNotFoundError: If a required dependency cannot be found.
            CircularDependencyError: If a dependency requires itself.
            FactoryError: If a callback-style factory reports an error.

        Examples:
            .. code-block:: python

                def handler(json, settings, logger_):
                    return settings["debug"]

                injector.inject(handler)

        """
        return self._inject(target, self._tracker())

    def _inject(self, target: Callable[..., T], tracker: GraphTracker) -> T | Future[T]:
        names = parse_parameter_names(target)
        values_future = self._resolver.resolve_many(names, tracker)
        if values_future.done():
            return call_with_arguments(target, dict(zip(names, values_future.result(), strict=True)))

        logger.debug("Resolution for %r suspended, returning a future", target)
        return map_result(
            values_future,
            lambda values: call_with_arguments(target, dict(zip(names, values, strict=True))),
        )

    async def ainject(self, target: Callable[..., Any]) -> Any:
        """Invoke ``target`` once all of its dependencies settle.

        Unlike ``inject`` this always waits for suspended factories and is the
        only way to resolve coroutine factories. If ``target`` returns an
        awaitable, its result is awaited too.

        Raises:
            Same errors as ``inject``.

        """
        return await self._ainject(target, self._tracker())

    async def _ainject(self, target: Callable[..., Any], tracker: GraphTracker) -> Any:
        names = parse_parameter_names(target)
        values = await asyncio.wrap_future(self._resolver.resolve_many(names, tracker))
        result = call_with_arguments(target, dict(zip(names, values, strict=True)))
        if inspect.isawaitable(result):
            return await result
        return result

    def _tracker(self) -> GraphTracker:
        # injections made from inside a factory join that factory's stack
        tracker = active_tracker()
        return tracker if tracker is not None else GraphTracker()

    def tracked(self, tracker: GraphTracker) -> TrackedInjector:
        """Return a view of this injector whose injections join ``tracker``."""
        return TrackedInjector(self, tracker)

    # endregion Injection

    # region Dependencies
    def add(self, dependency: Dependency) -> None:
        """Register a dependency explicitly, replacing any existing one.

        A dependency with a value is injected as-is. A dependency with only a
        ``location_key`` is loaded from that location when first resolved.
        """
        replaced = self._dependencies.get(dependency.name)
        self._dependencies[dependency.name] = dependency
        logger.debug("Registered dependency %r (replaced: %s)", dependency.name, replaced is not None)
        if replaced is None:
            self._emit(InjectorEvent.NEW_DEPENDENCY, dependency)

    def remove(self, name: str) -> Dependency | None:
        """Forget a dependency and evict its module and factory result.

        The next resolution of ``name`` starts from scratch and invokes the
        factory again.
        """
        dependency = self._dependencies.pop(name, None)
        if dependency is None:
            return None
        if dependency.location_key is not None:
            self._module_cache.evict(dependency.location_key)
        logger.debug("Removed dependency %r", name)
        return dependency

    def get_dependency(self, name: str) -> Dependency | None:
        """Return the dependency cached under ``name`` without resolving it."""
        return self._dependencies.get(name)

    def commit_dependency(self, dependency: Dependency) -> Dependency:
        """Store a freshly resolved dependency and announce it.

        A registered placeholder for the same name receives the value instead
        of being replaced. Returns the dependency now cached under the name.
        """
        existing = self._dependencies.get(dependency.name)
        if existing is not None:
            if not existing.is_resolved:
                existing.value = dependency.value
                existing.location_key = dependency.location_key
            return existing

        self._dependencies[dependency.name] = dependency
        self._emit(InjectorEvent.NEW_DEPENDENCY, dependency)
        return dependency

    # endregion Dependencies

    # region Events
    def on(self, event: InjectorEvent | str) -> Callable[[ListenerF], ListenerF]:
        """Register the decorated function as a listener for ``event``.

        Examples:
            .. code-block:: python

                @injector.on("new dependency")
                def track(dependency: Dependency) -> None:
                    created.append(dependency.name)

        """

        def decorator(listener: ListenerF) -> ListenerF:
            self.add_listener(event, listener)
            return listener

        return decorator

    def add_listener(self, event: InjectorEvent | str, listener: Callable[[Dependency], Any]) -> None:
        self._listeners[InjectorEvent(event)].append(listener)

    def remove_listener(self, event: InjectorEvent | str, listener: Callable[[Dependency], Any]) -> None:
        listeners = self._listeners[InjectorEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    def _emit(self, event: InjectorEvent, dependency: Dependency) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(dependency)
            except Exception:
                logger.exception("Listener %r failed for %r event", listener, event.value)

    # endregion Events


class TrackedInjector:
    """The injector as handed to a factory under the reserved self name.

    While the factory is still being resolved, injections made through this
    view join its resolution chain, so a factory that requests itself again
    is reported as circular. This holds also from threads, which do not
    inherit context variables. Every other attribute is read from and
    written to the injector itself.
    """

    __slots__ = ("_injector", "_tracker")

    def __init__(self, injector: Injector, tracker: GraphTracker) -> None:
        object.__setattr__(self, "_injector", injector)
        object.__setattr__(self, "_tracker", tracker)

    def inject(self, target: Callable[..., T]) -> T | Future[T]:
        return self._injector._inject(target, self._current_tracker())  # noqa: SLF001

    async def ainject(self, target: Callable[..., Any]) -> Any:
        return await self._injector._ainject(target, self._current_tracker())  # noqa: SLF001

    def _current_tracker(self) -> GraphTracker:
        # an empty tracker means the factory settled; later calls start afresh
        if len(self._tracker):
            return self._tracker
        return self._injector._tracker()  # noqa: SLF001

    def __getattr__(self, name: str) -> Any:
        return getattr(self._injector, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._injector, name, value)

    def __repr__(self) -> str:
        return f"TrackedInjector({self._injector!r})"


__all__ = ["Injector", "InjectorEvent", "TrackedInjector"]
