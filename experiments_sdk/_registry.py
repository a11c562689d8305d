"""
experiments_sdk._registry
───────────────────────────
Extension registry: the single source of truth for which rule-engine
extensions exist and how each one is built.

Adding a new extension:
  1. Implement a factory ``(options, services) -> extension``
  2. Call ``register_extension(name, factory)`` at import time
  3. Add the module to EXTENSION_MODULES so ``load_extensions()`` imports it

Hosts build extensions by name with ``create_extension(name, options, services)``.
"""
from __future__ import annotations

import importlib
from typing import Any, Callable

from experiments_sdk.tier0_core.errors import ConfigurationError

ExtensionFactory = Callable[[Any, Any], Any]

# Modules whose import registers one or more extension factories.
EXTENSION_MODULES: list[str] = [
    "experiments_sdk.plugin",
]

_factories: dict[str, ExtensionFactory] = {}


def register_extension(name: str, factory: ExtensionFactory) -> None:
    """Register *factory* under *name*, replacing any previous registration."""
    _factories[name] = factory


def get_extension_factory(name: str) -> ExtensionFactory:
    load_extensions()
    try:
        return _factories[name]
    except KeyError:
        raise ConfigurationError(
            user_message=f"Unknown extension {name!r}. Registered: {sorted(_factories)}"
        ) from None


def create_extension(name: str, options: Any, services: Any) -> Any:
    """Build the named extension from raw *options* and host *services*."""
    return get_extension_factory(name)(options, services)


def registered_extensions() -> list[str]:
    load_extensions()
    return sorted(_factories)


def load_extensions() -> None:
    """Import every module listed in EXTENSION_MODULES (idempotent)."""
    for module in EXTENSION_MODULES:
        importlib.import_module(module)


__all__ = [
    "ExtensionFactory",
    "register_extension",
    "get_extension_factory",
    "create_extension",
    "registered_extensions",
]
