from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Origin(Enum):
    """Strategy category that produced a dependency."""

    EXPLICIT = "explicit"
    """Registered through ``Injector.add``."""

    BUILTIN = "builtin"
    """A standard-library module."""

    EXTERNAL = "external"
    """An installed package importable from ``sys.path``."""

    LOCAL = "local"
    """A module discovered on the injector's search paths."""


class _Unresolved:
    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Any = _Unresolved()
"""Placeholder value of a dependency that was registered without a value."""


@dataclass(slots=True)
class Dependency:
    """A named binding cached by an injector.

    ``location_key`` identifies the backing module: the dotted module name for
    built-in and external modules, the absolute file path for local ones.
    Dependencies added with only a ``location_key`` are loaded from that
    location on first resolution.

    Examples:
        .. code-block:: python

            injector.add(Dependency("settings", value={"debug": True}))
            injector.add(Dependency("web", location_key="http"))

    """

    name: str
    value: Any = UNRESOLVED
    origin: Origin = Origin.EXPLICIT
    location_key: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.value is not UNRESOLVED
