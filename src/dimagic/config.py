from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InjectorSettings(BaseSettings):
    """Defaults for new injectors, read from ``DIMAGIC_*`` environment variables.

    Every field maps to an upper-case variable with the ``DIMAGIC_`` prefix,
    for example ``DIMAGIC_AUTO_INJECT_LOCAL_FACTORIES=false`` or
    ``DIMAGIC_SEARCH_PATHS='["./lib"]'``.

    Examples:
        .. code-block:: python

            injector = Injector(InjectorSettings(search_paths=[Path("lib")]))

    """

    model_config = SettingsConfigDict(env_prefix="DIMAGIC_", extra="ignore")

    auto_inject_external_factories: bool = True
    """Invoke callables exported by installed packages."""

    auto_inject_local_factories: bool = True
    """Invoke callables exported by modules on the search paths."""

    search_paths: list[Path] = Field(default_factory=list)
    """Local directories searched for modules, in order."""

    self_name: str = "_injector"
    """Reserved name that resolves to the injector itself."""

    optional_suffix: str = Field(default="_", min_length=1)
    """Suffix marking a dependency name as optional."""

    callback_name: str = "callback"
    """Last parameter name that makes a factory callback-style."""


__all__ = ["InjectorSettings"]
