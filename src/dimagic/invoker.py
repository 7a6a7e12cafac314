"""Turn located exports into dependency values.

An export is either the value itself or a factory whose result is the value.
Factories come in three styles:

- direct: ``def export(a, b)``, the return value is the dependency;
- callback-style: ``def export(a, callback)``, the factory reports its result
  through ``callback(error, result)``, during the call or later;
- coroutine: ``async def export(a)``, awaited on the running event loop.

Factory results are written back to the ``Located`` entry so every later
resolution of the same module reuses them.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from dimagic._internal.futures import failed, relay, settled, then
from dimagic.dependency import Origin
from dimagic.exceptions import AsyncDependencyInSyncContextError, FactoryError
from dimagic.graph import tracking
from dimagic.markers import is_marked_always_inject, is_marked_dont_inject
from dimagic.parameters import call_with_arguments, parse_parameter_names

if TYPE_CHECKING:
    from dimagic.graph import GraphTracker
    from dimagic.injector import Injector
    from dimagic.locator import Located
    from dimagic.resolver import Resolver

logger = logging.getLogger(__name__)


class Invoker:
    """Materialize located exports, invoking factories at most once per module."""

    def __init__(self, injector: Injector, resolver: Resolver) -> None:
        self._injector = injector
        self._resolver = resolver

    def materialize(
        self,
        name: str,
        located: Located,
        tracker: GraphTracker,
        origin: Origin | None = None,
    ) -> Future[Any]:
        """Return a future of the final value of ``located`` for dependency ``name``.

        ``origin`` is the origin of the dependency being resolved; it decides
        which auto-inject flag applies and defaults to ``located.origin``.
        Factories of modules registered by location key are invoked
        regardless of the auto-inject flags.
        """
        if located.settled:
            logger.debug("Reusing factory result of %r for %r", located.location_key, name)
            return settled(located.value)

        if located.pending is not None:
            logger.debug("Waiting on pending factory of %r for %r", located.location_key, name)
            shared: Future[Any] = Future()
            relay(located.pending, shared)
            return shared

        if origin is None or located.origin is Origin.BUILTIN:
            origin = located.origin
        export = located.export
        if not self.should_invoke(export, origin):
            return settled(export)

        outcome: Future[Any] = Future()
        located.pending = outcome
        try:
            invocation = self._invoke(name, export, tracker)
        except Exception as error:  # noqa: BLE001
            invocation = failed(error)

        def commit(done: Future[Any]) -> None:
            located.pending = None
            error = done.exception()
            if error is None:
                located.value = done.result()
                located.settled = True
                logger.debug("Cached factory result of %r", located.location_key)
            relay(done, outcome)

        invocation.add_done_callback(commit)
        return outcome

    def should_invoke(self, export: Any, origin: Origin) -> bool:
        """Decide whether ``export`` is a factory to call or the value itself."""
        if not callable(export) or inspect.isclass(export):
            return False
        if origin is Origin.BUILTIN:
            return False
        if is_marked_always_inject(export):
            return True
        if not self._auto_inject_enabled(origin):
            return False
        return not is_marked_dont_inject(export)

    def _auto_inject_enabled(self, origin: Origin) -> bool:
        if origin is Origin.EXTERNAL:
            return self._injector.auto_inject_external_factories
        if origin is Origin.LOCAL:
            return self._injector.auto_inject_local_factories
        return True

    def _invoke(self, name: str, factory: Callable[..., Any], tracker: GraphTracker) -> Future[Any]:
        parameter_names = parse_parameter_names(factory)
        callback_name = self._injector.settings.callback_name
        is_coroutine = inspect.iscoroutinefunction(factory)
        is_callback_style = (
            not is_coroutine and bool(parameter_names) and parameter_names[-1] == callback_name
        )
        dependency_names = parameter_names[:-1] if is_callback_style else parameter_names

        if is_coroutine:
            # fail before any dependency is resolved or a coroutine is created
            _running_loop(name)

        def call(values: list[Any]) -> Future[Any]:
            arguments = dict(zip(dependency_names, values, strict=True))
            if is_callback_style:
                return self._call_with_callback(name, factory, arguments, callback_name, tracker)
            if is_coroutine:
                return self._call_coroutine(name, factory, arguments, tracker)
            logger.debug("Invoking factory for %r", name)
            with tracking(tracker):
                return settled(call_with_arguments(factory, arguments))

        return then(self._resolver.resolve_many(dependency_names, tracker), call)

    def _call_with_callback(
        self,
        name: str,
        factory: Callable[..., Any],
        arguments: dict[str, Any],
        callback_name: str,
        tracker: GraphTracker,
    ) -> Future[Any]:
        outcome: Future[Any] = Future()

        def callback(error: object = None, result: Any = None) -> None:
            if outcome.done():
                logger.debug("Ignoring repeated callback for %r", name)
                return
            if error is not None:
                factory_error = FactoryError(name, error)
                if isinstance(error, BaseException):
                    factory_error.__cause__ = error
                outcome.set_exception(factory_error)
                return
            outcome.set_result(result)

        logger.debug("Invoking callback-style factory for %r", name)
        try:
            with tracking(tracker):
                call_with_arguments(factory, {**arguments, callback_name: callback})
        except Exception as error:
            if outcome.done():
                raise
            outcome.set_exception(error)
        return outcome

    def _call_coroutine(
        self,
        name: str,
        factory: Callable[..., Any],
        arguments: dict[str, Any],
        tracker: GraphTracker,
    ) -> Future[Any]:
        loop = _running_loop(name)
        logger.debug("Scheduling coroutine factory for %r", name)
        with tracking(tracker):
            task = loop.create_task(call_with_arguments(factory, arguments))
        outcome: Future[Any] = Future()

        def on_done(done: asyncio.Task[Any]) -> None:
            if done.cancelled():
                outcome.set_exception(asyncio.CancelledError())
                return
            error = done.exception()
            if error is not None:
                outcome.set_exception(error)
            else:
                outcome.set_result(done.result())

        task.add_done_callback(on_done)
        return outcome


def _running_loop(name: str) -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise AsyncDependencyInSyncContextError(name) from None


__all__ = ["Invoker"]
