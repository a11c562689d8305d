"""
experiments_sdk.plugin
────────────────────────
Registers the "experiments" extension with the extension registry.

Imported by ``experiments_sdk._registry.load_extensions()``; hosts then call

    create_extension("experiments", raw_definitions, services)
"""
from __future__ import annotations

from experiments_sdk._registry import register_extension
from experiments_sdk.tier3_platform.extension import (
    EXTENSION_NAME,
    create_experiments_extension,
)

register_extension(EXTENSION_NAME, create_experiments_extension)
