"""Shared pytest fixtures for dimagic tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from dimagic.config import InjectorSettings
from dimagic.injector import Injector
from dimagic.locator import ModuleCache

SEARCH_PATH = Path(__file__).parent / "fixtures" / "search_path"


@pytest.fixture()
def settings() -> InjectorSettings:
    """Settings isolated from DIMAGIC_* environment variables."""
    return InjectorSettings(
        auto_inject_external_factories=True,
        auto_inject_local_factories=True,
        search_paths=[],
    )


@pytest.fixture()
def injector(settings: InjectorSettings) -> Iterator[Injector]:
    """Injector searching the fixture modules."""
    injector = Injector(settings, search_paths=[SEARCH_PATH])
    yield injector
    injector.module_cache.clear()


@pytest.fixture()
def shared_cache() -> Iterator[ModuleCache]:
    cache = ModuleCache()
    yield cache
    cache.clear()


@pytest.fixture()
def search_path() -> Path:
    return SEARCH_PATH
