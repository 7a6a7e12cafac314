from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)


def settled(value: T) -> Future[T]:
    """Return a future already completed with ``value``."""
    future: Future[T] = Future()
    future.set_result(value)
    return future


def failed(error: BaseException) -> Future[Any]:
    """Return a future already completed with ``error``."""
    future: Future[Any] = Future()
    future.set_exception(error)
    return future


def relay(source: Future[T], target: Future[T]) -> None:
    """Complete ``target`` with the outcome of ``source`` once it settles."""

    def copy(done: Future[T]) -> None:
        if target.done():
            logger.debug("Dropping outcome for an already settled future")
            return
        error = done.exception()
        if error is not None:
            target.set_exception(error)
        else:
            target.set_result(done.result())

    source.add_done_callback(copy)


def then(source: Future[T], step: Callable[[T], Future[U]]) -> Future[U]:
    """Chain ``step`` after ``source``.

    ``step`` runs in the thread that settles ``source``, immediately when
    ``source`` is already done. Failures of ``source`` skip ``step``; an
    exception raised by ``step`` fails the returned future.
    """
    target: Future[U] = Future()

    def on_done(done: Future[T]) -> None:
        error = done.exception()
        if error is not None:
            target.set_exception(error)
            return
        try:
            following = step(done.result())
        except Exception as step_error:  # noqa: BLE001
            target.set_exception(step_error)
            return
        relay(following, target)

    source.add_done_callback(on_done)
    return target


def map_result(source: Future[T], transform: Callable[[T], U]) -> Future[U]:
    """Chain a plain function after ``source``."""
    return then(source, lambda value: settled(transform(value)))


def finally_(source: Future[T], callback: Callable[[], None]) -> Future[T]:
    """Run ``callback`` once ``source`` settles, before anyone else sees the outcome."""
    target: Future[T] = Future()

    def on_done(done: Future[T]) -> None:
        try:
            callback()
        except Exception as callback_error:  # noqa: BLE001
            target.set_exception(callback_error)
            return
        relay(done, target)

    source.add_done_callback(on_done)
    return target


__all__ = ["failed", "finally_", "map_result", "relay", "settled", "then"]
