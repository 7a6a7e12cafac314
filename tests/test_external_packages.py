"""Tests for installed packages importable from ``sys.path``."""

from __future__ import annotations

import importlib
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from dimagic.config import InjectorSettings
from dimagic.dependency import Origin
from dimagic.exceptions import DependencyNotFoundError
from dimagic.injector import Injector


@pytest.fixture()
def site_packages(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Directory on ``sys.path`` standing in for installed packages."""
    directory = tmp_path / "site-packages"
    directory.mkdir()
    monkeypatch.syspath_prepend(str(directory))
    before = set(sys.modules)
    yield directory
    for name in set(sys.modules) - before:
        del sys.modules[name]


def _package(site_packages: Path, name: str, source: str) -> None:
    package = site_packages / name
    package.mkdir()
    (package / "__init__.py").write_text(source)
    importlib.invalidate_caches()


def test_external_factory_is_invoked(site_packages: Path) -> None:
    _package(site_packages, "dimagic_ext_factory", "def export(json):\n    return json.dumps([1])\n")
    injector = Injector(InjectorSettings())

    assert injector.inject(lambda dimagic_ext_factory: dimagic_ext_factory) == "[1]"
    assert injector.get_dependency("dimagic_ext_factory").origin is Origin.EXTERNAL  # type: ignore[union-attr]


def test_external_factory_not_invoked_when_disabled(site_packages: Path) -> None:
    _package(site_packages, "dimagic_ext_disabled", "def export():\n    return 'invoked'\n")
    injector = Injector(InjectorSettings(auto_inject_external_factories=False))

    export = injector.inject(lambda dimagic_ext_disabled: dimagic_ext_disabled)

    assert callable(export)
    assert export() == "invoked"


def test_external_flag_does_not_affect_local_factories(
    site_packages: Path,
    search_path: Path,
) -> None:
    injector = Injector(
        InjectorSettings(auto_inject_external_factories=False),
        search_paths=[search_path],
    )

    assert injector.inject(lambda dummy2: dummy2) == 1
    injector.module_cache.clear()


def test_external_package_without_export_is_the_module(site_packages: Path) -> None:
    _package(site_packages, "dimagic_ext_plain", "VALUE = 'module'\n")
    injector = Injector(InjectorSettings())

    module = injector.inject(lambda dimagic_ext_plain: dimagic_ext_plain)

    assert module is sys.modules["dimagic_ext_plain"]
    assert module.VALUE == "module"


def test_external_always_inject_marker(site_packages: Path) -> None:
    _package(
        site_packages,
        "dimagic_ext_always",
        "from dimagic import always_inject\n\n\n@always_inject\ndef export():\n    return 'always'\n",
    )
    injector = Injector(InjectorSettings(auto_inject_external_factories=False))

    assert injector.inject(lambda dimagic_ext_always: dimagic_ext_always) == "always"


def test_search_path_modules_are_not_external(site_packages: Path) -> None:
    (site_packages / "dimagic_ext_shared.py").write_text("export = 'local'\n")
    importlib.invalidate_caches()
    injector = Injector(InjectorSettings(), search_paths=[site_packages])

    assert injector.inject(lambda dimagic_ext_shared: dimagic_ext_shared) == "local"
    assert injector.get_dependency("dimagic_ext_shared").origin is Origin.LOCAL  # type: ignore[union-attr]
    injector.module_cache.clear()


def test_namespace_directories_are_not_external(site_packages: Path) -> None:
    (site_packages / "dimagic_ext_namespace").mkdir()
    importlib.invalidate_caches()
    injector = Injector(InjectorSettings())

    with pytest.raises(DependencyNotFoundError):
        injector.inject(lambda dimagic_ext_namespace: dimagic_ext_namespace)
