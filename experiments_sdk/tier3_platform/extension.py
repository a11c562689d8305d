"""
experiments_sdk.tier3_platform.extension
──────────────────────────────────────────
Rule-engine extension that contributes experiment variables and predicates.

The installer validates raw definitions before anything is constructed, so
ExperimentsExtension only ever sees well-formed experiments.

Usage:
    extension = create_experiments_extension(
        {"hero": {"type": "ab", "groups": ["control", "new"]}},
        ExtensionServices.from_config(),
    )
    variables = extension.get_variables()
    predicate = extension.get_predicate(rule)
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from experiments_sdk.tier0_core.logging import Logger, get_logger
from experiments_sdk.tier0_core.tasks import BackgroundTasks
from experiments_sdk.tier1_runtime.sampling import Sampler
from experiments_sdk.tier2_reliability.storage import (
    KeyValueStorage,
    get_browser_storage,
    get_tab_storage,
)
from experiments_sdk.tier3_platform.experiments import (
    AbExperiment,
    MultivariateExperiment,
    load_definitions,
)
from experiments_sdk.tier3_platform.predicates import Predicate
from experiments_sdk.tier3_platform.rules import PredicateBuilder, Rule
from experiments_sdk.tier3_platform.runner import ExperimentRunner, GroupVariable
from experiments_sdk.tier3_platform.tracking import Tracker, get_tracker

EXTENSION_NAME = "experiments"


@dataclass
class ExtensionServices:
    """Host collaborators handed to every extension factory."""
    tracker: Tracker
    browser_storage: KeyValueStorage
    tab_storage: KeyValueStorage
    logger: Logger

    @classmethod
    def from_config(cls) -> "ExtensionServices":
        return cls(
            tracker=get_tracker(),
            browser_storage=get_browser_storage(),
            tab_storage=get_tab_storage(),
            logger=get_logger("experiments_sdk.extension"),
        )


class ExperimentsExtension:
    def __init__(
        self,
        experiments: Mapping[str, AbExperiment | MultivariateExperiment],
        tracker: Tracker,
        browser_storage: KeyValueStorage,
        tab_storage: KeyValueStorage,
        logger: Logger | None = None,
        *,
        sampler: Sampler | None = None,
        tasks: BackgroundTasks | None = None,
    ) -> None:
        self.runner = ExperimentRunner(
            experiments,
            tracker,
            browser_storage,
            tab_storage,
            logger,
            sampler=sampler,
            tasks=tasks,
        )
        self.predicates = PredicateBuilder(self.runner.experiments, logger)

    def get_variables(self) -> dict[str, GroupVariable]:
        return self.runner.get_variables()

    def get_predicate(self, rule: Rule) -> Predicate | None:
        return self.predicates.get_predicate(rule)

    async def flush(self) -> None:
        """Wait for pending tracking calls (e.g. before shutdown)."""
        await self.runner.tasks.drain()


def create_experiments_extension(
    options: Any,
    services: ExtensionServices,
) -> ExperimentsExtension:
    """Validate raw definitions and build the extension. Raises ValidationError."""
    experiments = load_definitions(options)

    return ExperimentsExtension(
        experiments,
        services.tracker,
        services.browser_storage,
        services.tab_storage,
        services.logger,
    )


__all__ = [
    "EXTENSION_NAME",
    "ExtensionServices",
    "ExperimentsExtension",
    "create_experiments_extension",
]
