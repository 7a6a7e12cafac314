from __future__ import annotations

import inspect
import weakref
from collections.abc import Callable, Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from dimagic.exceptions import InvalidArgumentError

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(slots=True)
class ParameterNamesInspector:
    """Extract dependency names from callable signatures.

    Results are cached per callable without keeping it alive; callables that
    cannot be weakly referenced are inspected every time. ``*args`` and
    ``**kwargs`` never name a dependency and are skipped.
    """

    _cache: weakref.WeakKeyDictionary[Any, tuple[str, ...]] = field(
        default_factory=weakref.WeakKeyDictionary,
    )

    def parameter_names(self, callable_obj: Callable[..., Any]) -> list[str]:
        if not callable(callable_obj):
            raise InvalidArgumentError(callable_obj)

        cached = None
        with suppress(TypeError):
            cached = self._cache.get(callable_obj)
        if cached is not None:
            return list(cached)

        try:
            signature = inspect.signature(callable_obj)
        except (TypeError, ValueError) as error:
            raise InvalidArgumentError(callable_obj) from error

        names = tuple(
            parameter.name
            for parameter in signature.parameters.values()
            if parameter.kind not in _VARIADIC_KINDS
        )
        with suppress(TypeError):
            self._cache[callable_obj] = names
        return list(names)


_DEFAULT_INSPECTOR = ParameterNamesInspector()


def parse_parameter_names(callable_obj: Callable[..., Any]) -> list[str]:
    """Return the declared parameter names of a callable, in order.

    Args:
        callable_obj: Function, bound method or other callable to inspect.

    Returns:
        The parameter names, an empty list for zero-parameter callables.

    Raises:
        InvalidArgumentError: If ``callable_obj`` is not callable or has no
            inspectable signature.

    """
    return _DEFAULT_INSPECTOR.parameter_names(callable_obj)


def call_with_arguments(
    callable_obj: Callable[..., Any],
    arguments: Mapping[str, Any],
) -> Any:
    """Call ``callable_obj`` with values matched to its parameters by name.

    Keyword-only parameters are passed by keyword, every other parameter
    positionally in declaration order.
    """
    signature = inspect.signature(callable_obj)
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for name, value in arguments.items():
        if signature.parameters[name].kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[name] = value
        else:
            args.append(value)
    return callable_obj(*args, **kwargs)


__all__ = ["ParameterNamesInspector", "call_with_arguments", "parse_parameter_names"]
