"""
experiments_sdk.tier3_platform.runner
───────────────────────────────────────
Resolves a visitor's group for each declared experiment and exposes the
result as lazily evaluated variables.

Variable values:
    ab            []                           excluded by traffic
                  ["b"]                        assigned group
    multivariate  []                           excluded by traffic
                  ["wide|dark", "wide", "dark"] joined label, then each variant

The joined label lets a rule match a whole combination, while the individual
variants let it match a single factor.

Assignments persist through TieredAssignmentStore. Whenever this execution
context learns of a non-excluded assignment (fresh draw, or promotion from
the browser tier), a "testGroupAssigned" event is sent as a detached task.
Tracking never delays, alters, or fails a resolution.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping

from experiments_sdk.tier0_core.logging import Logger, get_logger
from experiments_sdk.tier0_core.tasks import BackgroundTasks, get_background_tasks
from experiments_sdk.tier1_runtime.sampling import Sampler, get_sampler
from experiments_sdk.tier1_runtime.serialize import GroupCodec, GroupListCodec
from experiments_sdk.tier2_reliability.cache import TieredAssignmentStore
from experiments_sdk.tier2_reliability.storage import KeyValueStorage
from experiments_sdk.tier3_platform.experiments import (
    AbExperiment,
    MultivariateExperiment,
    combination_label,
    select_ab_group,
    select_multivariate_groups,
)
from experiments_sdk.tier3_platform.tracking import GROUP_ASSIGNED_EVENT, Tracker

GroupVariable = Callable[[], Awaitable[list[str]]]

_EXCLUDED = ""


class ExperimentRunner:
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
        self.experiments = dict(experiments)
        self.tracker = tracker
        self.store = TieredAssignmentStore(browser_storage, tab_storage, logger)
        self.tasks = tasks or get_background_tasks()
        self._log = logger or get_logger(__name__)
        self._sampler = sampler
        self._group_codec = GroupCodec()
        self._group_list_codec = GroupListCodec()

    @property
    def sampler(self) -> Sampler:
        # Fall back to the global sampler at draw time so set_sampler() applies.
        return self._sampler or get_sampler()

    def get_variables(self) -> dict[str, GroupVariable]:
        """Return one zero-argument coroutine function per test id."""
        return {test_id: self._variable(test_id) for test_id in self.experiments}

    def _variable(self, test_id: str) -> GroupVariable:
        async def resolve() -> list[str]:
            return self.assign_group(test_id)

        resolve.__name__ = f"resolve_{test_id}"
        return resolve

    def assign_group(self, test_id: str) -> list[str]:
        """
        Resolve the variable value for *test_id*. Must run inside an event
        loop because tracking is scheduled on it.
        """
        experiment = self.experiments[test_id]

        if isinstance(experiment, AbExperiment):
            group_id = self.assign_ab_group(test_id, experiment)
            return [] if group_id is None else [group_id]

        variant_ids = self.assign_multivariate_groups(test_id, experiment)
        if not variant_ids:
            return []
        return [combination_label(variant_ids), *variant_ids]

    # ── A/B ───────────────────────────────────────────────────────────────────

    def assign_ab_group(self, test_id: str, experiment: AbExperiment) -> str | None:
        def select() -> str:
            group_id = select_ab_group(experiment, self.sampler.random)
            if group_id is None:
                self._log.debug("experiment.traffic_ineligible", test_id=test_id, kind="ab")
            else:
                self._log.debug(
                    "experiment.group_assigned", test_id=test_id, kind="ab", group_id=group_id
                )
            return _EXCLUDED if group_id is None else group_id

        def discovered(group_id: str) -> None:
            if group_id != _EXCLUDED:
                self.track_assigned_group(test_id, group_id)

        group_id = self.store.resolve(test_id, self._group_codec, select, discovered)

        return None if group_id == _EXCLUDED else group_id

    # ── Multivariate ──────────────────────────────────────────────────────────

    def assign_multivariate_groups(
        self, test_id: str, experiment: MultivariateExperiment
    ) -> list[str]:
        def select() -> list[str]:
            variant_ids = select_multivariate_groups(experiment, self.sampler.random)
            if variant_ids:
                self._log.debug(
                    "experiment.group_assigned",
                    test_id=test_id,
                    kind="multivariate",
                    group_ids=variant_ids,
                )
            else:
                self._log.debug(
                    "experiment.traffic_ineligible", test_id=test_id, kind="multivariate"
                )
            return variant_ids

        def discovered(variant_ids: list[str]) -> None:
            if variant_ids:
                self.track_assigned_group(test_id, combination_label(variant_ids))

        return self.store.resolve(test_id, self._group_list_codec, select, discovered)

    # ── Tracking ──────────────────────────────────────────────────────────────

    def track_assigned_group(self, test_id: str, group_id: str) -> None:
        """Send "testGroupAssigned" in the background; failures are only logged."""
        payload = {"testId": test_id, "groupId": group_id}

        def failed(exc: BaseException) -> None:
            self._log.error(
                "experiment.tracking_failed",
                test_id=test_id,
                group_id=group_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )

        # track() may return any awaitable or raise before returning one.
        async def send() -> None:
            await self.tracker.track(GROUP_ASSIGNED_EVENT, payload)

        self.tasks.spawn(
            send(),
            on_error=failed,
            name=f"track:{test_id}",
        )


__all__ = ["ExperimentRunner", "GroupVariable"]
