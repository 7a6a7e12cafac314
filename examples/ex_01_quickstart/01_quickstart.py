"""Quickstart: parameter names are dependency names.

This topic demonstrates:

1. Standard-library modules injected by name.
2. Modules on a search path, with ``export`` factories invoked once.
3. The injector injecting itself under ``_injector``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import ModuleType

from dimagic import Injector, Origin

LIB = Path(__file__).parent / "lib"


def main() -> None:
    injector = Injector(search_paths=[LIB])

    def handler(
        json: ModuleType,
        app_greeter: Callable[[str], str],
        _injector: Injector,
    ) -> tuple[str, bool]:
        return json.dumps(app_greeter("world")), _injector is injector

    payload, is_self = injector.inject(handler)
    print(f"payload={payload}")  # => payload="Hello, world!"
    print(f"self_injected={is_self}")  # => self_injected=True

    greeter = injector.get_dependency("app_greeter")
    print(f"greeter_origin={greeter.origin.value}")  # => greeter_origin=local
    print(
        f"json_origin={injector.get_dependency('json').origin is Origin.BUILTIN}",
    )  # => json_origin=True

    same = injector.inject(lambda app_greeter: app_greeter) is greeter.value
    print(f"factory_invoked_once={same}")  # => factory_invoked_once=True

    print(f"camel_case={injector.inject(lambda appGreeting: appGreeting)}")  # => camel_case=Hello


if __name__ == "__main__":
    main()
