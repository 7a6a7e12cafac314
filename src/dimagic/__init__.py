from dimagic.config import InjectorSettings
from dimagic.dependency import UNRESOLVED, Dependency, Origin
from dimagic.exceptions import (
    AsyncDependencyInSyncContextError,
    CircularDependencyError,
    DependencyNotFoundError,
    DIMagicError,
    FactoryError,
    IllegalDependencyNameError,
    InvalidArgumentError,
)
from dimagic.injector import Injector, InjectorEvent, TrackedInjector
from dimagic.locator import ModuleCache
from dimagic.markers import always_inject, dont_inject
from dimagic.parameters import parse_parameter_names

__all__ = [
    "UNRESOLVED",
    "AsyncDependencyInSyncContextError",
    "CircularDependencyError",
    "DIMagicError",
    "Dependency",
    "DependencyNotFoundError",
    "FactoryError",
    "IllegalDependencyNameError",
    "Injector",
    "InjectorEvent",
    "InjectorSettings",
    "InvalidArgumentError",
    "ModuleCache",
    "Origin",
    "TrackedInjector",
    "always_inject",
    "dont_inject",
    "parse_parameter_names",
]
