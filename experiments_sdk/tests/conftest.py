"""
experiments_sdk test configuration.

All tests run with in-memory storage and the mock tracker by default; no
external services required.
"""
from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

# ── Force mock backends for all tests ─────────────────────────────────────
# These must be set before any experiments_sdk config is read.

os.environ.setdefault("EXPERIMENTS_ENV", "test")
os.environ.setdefault("EXPERIMENTS_STORAGE_BACKEND", "memory")
os.environ.setdefault("EXPERIMENTS_TRACKING_BACKEND", "mock")
os.environ.setdefault("EXPERIMENTS_LOG_LEVEL", "DEBUG")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset all cached singletons between tests so each test gets fresh
    config, storage tiers, tracker and sampler with no state bleed.
    """
    import experiments_sdk.tier0_core.config as _config
    import experiments_sdk.tier0_core.tasks as _tasks
    import experiments_sdk.tier1_runtime.sampling as _sampling
    import experiments_sdk.tier2_reliability.storage as _storage
    import experiments_sdk.tier3_platform.tracking as _tracking

    orig_sampler = _sampling.get_sampler()

    yield

    _config._reset_config()
    _tasks._reset_background_tasks()
    _storage._reset_storage()
    _tracking._reset_tracker()
    _sampling.set_sampler(orig_sampler)


@pytest.fixture
def browser_storage():
    from experiments_sdk.tier2_reliability.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def tab_storage():
    from experiments_sdk.tier2_reliability.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def tracker():
    from experiments_sdk.tier3_platform.tracking import MockTracker
    return MockTracker()


@pytest.fixture
def logger():
    """A logger double; assert on .debug / .error calls."""
    return MagicMock(name="logger")


@pytest.fixture
def tasks():
    from experiments_sdk.tier0_core.tasks import BackgroundTasks
    return BackgroundTasks()


@pytest.fixture
def make_extension(tracker, browser_storage, tab_storage, logger, tasks):
    """Build an ExperimentsExtension over the shared test collaborators."""
    from experiments_sdk.tier3_platform.experiments import load_definitions
    from experiments_sdk.tier3_platform.extension import ExperimentsExtension

    def _make(definitions: dict, sampler=None) -> ExperimentsExtension:
        return ExperimentsExtension(
            load_definitions(definitions),
            tracker,
            browser_storage,
            tab_storage,
            logger,
            sampler=sampler,
            tasks=tasks,
        )

    return _make
