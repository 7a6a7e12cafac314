"""Resolution errors and how to react to them.

Every error derives from ``DIMagicError``. Names ending in ``_`` are
optional and resolve to ``None`` when nothing provides them.
"""

from __future__ import annotations

from pathlib import Path

from dimagic import (
    CircularDependencyError,
    DependencyNotFoundError,
    DIMagicError,
    FactoryError,
    IllegalDependencyNameError,
    Injector,
)

LIB = Path(__file__).parent / "lib"


def main() -> None:
    injector = Injector(search_paths=[LIB])

    try:
        injector.inject(lambda app_missing: app_missing)
    except DependencyNotFoundError as error:
        print(f"missing={error.name}")  # => missing=app_missing

    print(f"optional={injector.inject(lambda app_missing_: app_missing_)}")  # => optional=None

    try:
        injector.inject(lambda app_loop_a: app_loop_a)
    except CircularDependencyError as error:
        print(f"circular={' -> '.join([*error.stack, error.name])}")  # => circular=app_loop_a -> app_loop_b -> app_loop_a

    def illegal(__init__: object) -> object:
        return __init__

    try:
        injector.inject(illegal)
    except IllegalDependencyNameError as error:
        print(f"illegal={error.name}")  # => illegal=__init__

    try:
        injector.inject(lambda app_broken: app_broken)
    except FactoryError as error:
        print(f"factory_error={error.error!r}")  # => factory_error=ConnectionError('refused')

    print(
        f"common_base={issubclass(FactoryError, DIMagicError)}",
    )  # => common_base=True


if __name__ == "__main__":
    main()
