from __future__ import annotations

import functools
import gc
import weakref
from typing import Any

import pytest

from dimagic.exceptions import InvalidArgumentError
from dimagic.parameters import ParameterNamesInspector, call_with_arguments, parse_parameter_names


class TestParseParameterNames:
    def test_plain_function(self) -> None:
        def function(dummy, dummy2, callback):  # noqa: ANN001, ANN202
            pass

        assert parse_parameter_names(function) == ["dummy", "dummy2", "callback"]

    def test_zero_parameters(self) -> None:
        assert parse_parameter_names(lambda: None) == []

    def test_lambda(self) -> None:
        assert parse_parameter_names(lambda a, b: None) == ["a", "b"]

    def test_async_function(self) -> None:
        async def function(a: int, b: int) -> None:
            pass

        assert parse_parameter_names(function) == ["a", "b"]

    def test_default_values_are_ignored(self) -> None:
        def function(a: int = 1, *, b: str = "x") -> None:
            pass

        assert parse_parameter_names(function) == ["a", "b"]

    def test_variadic_parameters_are_skipped(self) -> None:
        def function(a: int, *args: Any, b: int, **kwargs: Any) -> None:
            pass

        assert parse_parameter_names(function) == ["a", "b"]

    def test_bound_method_skips_self(self) -> None:
        class Service:
            def handle(self, dummy: int) -> int:
                return dummy

        assert parse_parameter_names(Service().handle) == ["dummy"]

    def test_callable_instance(self) -> None:
        class Handler:
            def __call__(self, request: object, json: object) -> None:
                pass

        assert parse_parameter_names(Handler()) == ["request", "json"]

    def test_partial_drops_bound_positional(self) -> None:
        def function(a: int, b: int) -> None:
            pass

        assert parse_parameter_names(functools.partial(function, 1)) == ["b"]

    def test_non_callable_raises(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_parameter_names("not callable")  # type: ignore[arg-type]

        assert exc_info.value.value == "not callable"
        assert isinstance(exc_info.value, TypeError)


def test_inspector_caches_by_callable() -> None:
    inspector = ParameterNamesInspector()

    def function(a: int) -> None:
        pass

    first = inspector.parameter_names(function)
    first.append("mutated")

    assert inspector.parameter_names(function) == ["a"]


def test_inspector_does_not_keep_callables_alive() -> None:
    inspector = ParameterNamesInspector()

    def function(a: int) -> None:
        pass

    inspector.parameter_names(function)
    reference = weakref.ref(function)
    del function
    gc.collect()

    assert reference() is None
    assert len(inspector._cache) == 0  # noqa: SLF001


def test_inspector_handles_callables_without_weak_references() -> None:
    inspector = ParameterNamesInspector()

    assert inspector.parameter_names(divmod) == ["x", "y"]
    assert inspector.parameter_names(divmod) == ["x", "y"]


def test_call_with_arguments_passes_keyword_only_by_keyword() -> None:
    def function(a: int, /, b: int, *, c: int) -> tuple[int, int, int]:
        return a, b, c

    assert call_with_arguments(function, {"a": 1, "b": 2, "c": 3}) == (1, 2, 3)
