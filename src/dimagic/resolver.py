from __future__ import annotations

import functools
import logging
from collections.abc import Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from dimagic._internal.futures import failed, finally_, map_result, settled
from dimagic.dependency import Dependency, Origin
from dimagic.exceptions import (
    CircularDependencyError,
    DependencyNotFoundError,
    IllegalDependencyNameError,
)
from dimagic.invoker import Invoker
from dimagic.locator import Located, load_location, locate

if TYPE_CHECKING:
    from dimagic.graph import GraphTracker, ResolutionFrame
    from dimagic.injector import Injector

logger = logging.getLogger(__name__)

_DUNDER_MIN_LENGTH = 5
RESERVED_NAMES: frozenset[str] = frozenset(dir(object))
"""Intrinsic members of every Python object; never valid dependency names."""


def is_illegal_name(name: str) -> bool:
    """Return whether ``name`` collides with an intrinsic object member."""
    is_dunder = (
        len(name) >= _DUNDER_MIN_LENGTH and name.startswith("__") and name.endswith("__")
    )
    return is_dunder or name in RESERVED_NAMES


class Resolver:
    """Resolve dependency names for one injector.

    Strategies are tried in order, first match wins: the injector itself,
    the illegal-name check, the dependency cache, explicit registrations,
    standard-library modules, installed packages, the search paths and finally
    the optional-name fallback.
    """

    def __init__(self, injector: Injector) -> None:
        self._injector = injector
        self._invoker = Invoker(injector, self)

    def resolve(self, name: str, tracker: GraphTracker) -> Future[Dependency]:
        """Return a future of the dependency bound to ``name``.

        The future is already settled unless a factory on the way suspends.
        """
        try:
            return self._resolve(name, tracker)
        except Exception as error:  # noqa: BLE001
            return failed(error)

    def resolve_many(self, names: Sequence[str], tracker: GraphTracker) -> Future[list[Any]]:
        """Resolve ``names`` left to right and return a future of their values.

        A name is attempted only after the previous one settled; the first
        failure fails the whole batch and skips the remaining names.
        """
        values: list[Any] = []
        outcome: Future[list[Any]] = Future()

        def collect(done: Future[Dependency]) -> bool:
            error = done.exception()
            if error is not None:
                outcome.set_exception(error)
                return False
            values.append(done.result().value)
            return True

        def advance(index: int) -> None:
            while index < len(names):
                future = self.resolve(names[index], tracker)
                if not future.done():
                    future.add_done_callback(functools.partial(resume, index))
                    return
                if not collect(future):
                    return
                index += 1
            outcome.set_result(values)

        def resume(index: int, done: Future[Dependency]) -> None:
            try:
                if collect(done):
                    advance(index + 1)
            except Exception as error:  # noqa: BLE001
                if not outcome.done():
                    outcome.set_exception(error)

        advance(0)
        return outcome

    def _resolve(self, name: str, tracker: GraphTracker) -> Future[Dependency]:
        injector = self._injector
        settings = injector.settings

        if name == settings.self_name:
            # factories get a view that keeps their injections in this chain
            value = injector.tracked(tracker) if len(tracker) else injector
            return settled(Dependency(name, value=value))

        if is_illegal_name(name):
            raise IllegalDependencyNameError(name)

        existing = injector.get_dependency(name)
        if existing is not None and existing.is_resolved:
            logger.debug("Dependency %r served from cache", name)
            return settled(existing)

        if existing is not None:
            return self._resolve_registered(existing, tracker)

        frame = tracker.enter(name)
        try:
            located = locate(name, injector.search_paths, injector.module_cache)
        except BaseException:
            tracker.leave(frame)
            raise

        if located is None:
            tracker.leave(frame)
            if name.endswith(settings.optional_suffix):
                logger.debug("Optional dependency %r not found, injecting None", name)
                return settled(Dependency(name, value=None))
            raise DependencyNotFoundError(name, injector.search_paths)

        logger.debug("Located %r as %s %r", name, located.origin.value, located.location_key)
        return self._materialize(name, located, located.origin, tracker, frame)

    def _resolve_registered(self, dependency: Dependency, tracker: GraphTracker) -> Future[Dependency]:
        if dependency.location_key is None:
            raise DependencyNotFoundError(dependency.name, self._injector.search_paths)

        frame = tracker.enter(dependency.name, dependency.origin)
        try:
            located = load_location(dependency.location_key, self._injector.module_cache)
        except BaseException:
            tracker.leave(frame)
            raise
        return self._materialize(dependency.name, located, dependency.origin, tracker, frame)

    def _materialize(
        self,
        name: str,
        located: Located,
        origin: Origin,
        tracker: GraphTracker,
        frame: ResolutionFrame,
    ) -> Future[Dependency]:
        try:
            bound = tracker.bind(frame, located.location_key)
        except CircularDependencyError:
            tracker.leave(frame)
            raise

        value_future = finally_(
            self._invoker.materialize(name, located, tracker, origin),
            lambda: tracker.leave(bound),
        )
        return map_result(
            value_future,
            lambda value: self._injector.commit_dependency(
                Dependency(name, value=value, origin=origin, location_key=located.location_key),
            ),
        )


__all__ = ["RESERVED_NAMES", "Resolver", "is_illegal_name"]
