"""Turn dependency names into loaded modules.

A name is looked up, in order, among standard-library modules, installed
packages importable from ``sys.path`` and ``.py`` files or packages on the
injector's search paths. Every loaded module is kept in a ``ModuleCache``
together with its exported value and, once materialized, the factory result.

The exported value of a module is its module-level ``export`` attribute, or
the module object itself when it defines none.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import re
import sys
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any

from dimagic.dependency import Origin

logger = logging.getLogger(__name__)

EXPORT_ATTR = "export"

STDLIB_MODULE_NAMES: frozenset[str] = frozenset(sys.stdlib_module_names) | frozenset(
    sys.builtin_module_names,
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_LOCAL_MODULE_PREFIX = "_dimagic_local_"


@dataclass(slots=True, eq=False)
class Located:
    """A loaded module backing one or more dependency names.

    ``settled`` and ``value`` hold the materialized result of the export;
    ``pending`` holds the future of a factory invocation still in flight.
    """

    origin: Origin
    location_key: str
    module: ModuleType
    export: Any
    settled: bool = False
    value: Any = None
    pending: Future[Any] | None = None


@dataclass(slots=True)
class ModuleCache:
    """Loaded modules and factory results keyed by location key.

    Each injector owns one by default. Passing the same cache to several
    injectors makes them share loaded modules and factory results, so every
    factory is invoked at most once across all of them.
    """

    _entries: dict[str, Located] = field(default_factory=dict)

    def __contains__(self, location_key: object) -> bool:
        return location_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, location_key: str) -> Located | None:
        return self._entries.get(location_key)

    def load(
        self,
        location_key: str,
        origin: Origin,
        loader: Callable[[], ModuleType],
    ) -> Located:
        """Return the cached entry for ``location_key``, loading it if needed."""
        entry = self._entries.get(location_key)
        if entry is not None:
            return entry

        module = loader()
        entry = Located(
            origin=origin,
            location_key=location_key,
            module=module,
            export=getattr(module, EXPORT_ATTR, module),
        )
        self._entries[location_key] = entry
        logger.debug("Loaded %s module %r", origin.value, location_key)
        return entry

    def evict(self, location_key: str) -> Located | None:
        """Forget a module and its factory result.

        Local modules are also dropped from ``sys.modules`` so the next load
        executes the file again.
        """
        entry = self._entries.pop(location_key, None)
        if entry is None:
            return None
        if entry.origin is Origin.LOCAL:
            module_name = entry.module.__name__
            if sys.modules.get(module_name) is entry.module:
                del sys.modules[module_name]
        logger.debug("Evicted %s module %r", entry.origin.value, location_key)
        return entry

    def clear(self) -> None:
        for location_key in list(self._entries):
            self.evict(location_key)


def candidate_module_names(name: str) -> list[str]:
    """Return module names to try for a dependency name.

    The name itself comes first, followed by its snake_case spelling when it is
    written in camelCase (``findPort`` also tries ``find_port``).
    """
    candidates = [name]
    snake = _CAMEL_BOUNDARY.sub("_", name).lower()
    if snake != name:
        candidates.append(snake)
    return candidates


def is_builtin_name(module_name: str) -> bool:
    return module_name in STDLIB_MODULE_NAMES


def locate(
    name: str,
    search_paths: Iterable[Path | str],
    cache: ModuleCache | None = None,
) -> Located | None:
    """Find and load the module backing a dependency name.

    Args:
        name: Dependency name to look up.
        search_paths: Local directories, searched in order.
        cache: Cache that receives the loaded module. A throwaway cache is used
            when omitted.

    Returns:
        The loaded entry, or ``None`` when nothing matches.

    """
    cache = cache if cache is not None else ModuleCache()
    paths = [Path(path) for path in search_paths]
    candidates = candidate_module_names(name)

    for module_name in candidates:
        if is_builtin_name(module_name):
            return cache.load(module_name, Origin.BUILTIN, _importer(module_name))

    for module_name in candidates:
        if _is_external(module_name, paths):
            return cache.load(module_name, Origin.EXTERNAL, _importer(module_name))

    for path in paths:
        for module_name in candidates:
            file_path = _find_local_file(path, module_name)
            if file_path is not None:
                return cache.load(
                    str(file_path),
                    Origin.LOCAL,
                    _file_loader(module_name, file_path),
                )

    return None


def load_location(
    location_key: str,
    cache: ModuleCache | None = None,
) -> Located:
    """Load a module by its location key.

    File paths load as local modules, every other key is imported by module
    name.

    Raises:
        ImportError: If the location cannot be loaded.

    """
    cache = cache if cache is not None else ModuleCache()
    entry = cache.get(location_key)
    if entry is not None:
        return entry

    file_path = Path(location_key)
    if file_path.suffix == ".py" and file_path.is_file():
        resolved = file_path.resolve()
        module_name = resolved.parent.name if resolved.name == "__init__.py" else resolved.stem
        return cache.load(str(resolved), Origin.LOCAL, _file_loader(module_name, resolved))

    origin = Origin.BUILTIN if is_builtin_name(location_key.partition(".")[0]) else Origin.EXTERNAL
    return cache.load(location_key, origin, _importer(location_key))


def _importer(module_name: str) -> Callable[[], ModuleType]:
    def load() -> ModuleType:
        return importlib.import_module(module_name)

    return load


def _file_loader(module_name: str, file_path: Path) -> Callable[[], ModuleType]:
    def load() -> ModuleType:
        digest = hashlib.sha1(str(file_path).encode(), usedforsecurity=False).hexdigest()[:12]
        qualified_name = f"{_LOCAL_MODULE_PREFIX}{module_name}_{digest}"
        submodule_search_locations = (
            [str(file_path.parent)] if file_path.name == "__init__.py" else None
        )
        spec = importlib.util.spec_from_file_location(
            qualified_name,
            file_path,
            submodule_search_locations=submodule_search_locations,
        )
        if spec is None or spec.loader is None:
            msg = f"Cannot load module {module_name!r} from {file_path}"
            raise ImportError(msg, name=module_name, path=str(file_path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[qualified_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(qualified_name, None)
            raise
        return module

    return load


def _find_local_file(search_path: Path, module_name: str) -> Path | None:
    module_file = search_path / f"{module_name}.py"
    if module_file.is_file():
        return module_file.resolve()
    package_file = search_path / module_name / "__init__.py"
    if package_file.is_file():
        return package_file.resolve()
    return None


def _is_external(module_name: str, search_paths: list[Path]) -> bool:
    if module_name in sys.modules and not module_name.startswith(_LOCAL_MODULE_PREFIX):
        spec = getattr(sys.modules[module_name], "__spec__", None)
    else:
        try:
            spec = importlib.util.find_spec(module_name)
        except (ImportError, ValueError):
            return False
    # namespace packages are plain directories, never dependencies
    if spec is None or spec.origin in (None, "namespace"):
        return False

    origin = spec.origin
    if origin not in ("built-in", "frozen"):
        module_path = Path(origin).resolve()
        for search_path in search_paths:
            if module_path.is_relative_to(search_path.resolve()):
                return False
    return True


__all__ = [
    "EXPORT_ATTR",
    "STDLIB_MODULE_NAMES",
    "Located",
    "ModuleCache",
    "candidate_module_names",
    "is_builtin_name",
    "load_location",
    "locate",
]
