from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

DO_NOT_AUTO_INJECT_ATTR = "do_not_auto_inject"
ALWAYS_AUTO_INJECT_ATTR = "always_auto_inject"


def dont_inject(factory: F) -> F:
    """Mark an exported callable so the injector hands it out uninvoked.

    The marker only matters while auto-injection is enabled for the callable's
    origin; with auto-injection disabled every callable is handed out as-is.

    Examples:
        .. code-block:: python

            @dont_inject
            def export():
                return 123

    """
    setattr(factory, DO_NOT_AUTO_INJECT_ATTR, True)
    return factory


def always_inject(factory: F) -> F:
    """Mark an exported callable so the injector invokes it as a factory.

    Invocation happens even when auto-injection is disabled for the
    callable's origin.
    """
    setattr(factory, ALWAYS_AUTO_INJECT_ATTR, True)
    return factory


def is_marked_dont_inject(value: object) -> bool:
    return getattr(value, DO_NOT_AUTO_INJECT_ATTR, False) is True


def is_marked_always_inject(value: object) -> bool:
    return getattr(value, ALWAYS_AUTO_INJECT_ATTR, False) is True


__all__ = [
    "ALWAYS_AUTO_INJECT_ATTR",
    "DO_NOT_AUTO_INJECT_ATTR",
    "always_inject",
    "dont_inject",
    "is_marked_always_inject",
    "is_marked_dont_inject",
]
