"""
experiments_sdk.tier3_platform.rules
──────────────────────────────────────
Turns a rule's experiment reference into a predicate.

A rule opts into an experiment through its properties:

    Rule(name="hero-banner", properties={"experiment": {"testId": "hero", "groupId": "b"}})

which yields ``Contains("hero", "b")``, ANDed with ``Variable(audience)`` when
the experiment declares an audience. Malformed references are logged and the
rule is treated as not applicable; they never raise.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from experiments_sdk.tier0_core.errors import ValidationError
from experiments_sdk.tier0_core.logging import Logger, get_logger
from experiments_sdk.tier1_runtime.validate import format_cause, validate_input
from experiments_sdk.tier3_platform.experiments import AbExperiment, MultivariateExperiment
from experiments_sdk.tier3_platform.predicates import And, Contains, Predicate, Variable


@dataclass
class Rule:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)


class ExperimentReference(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    test_id: str = Field(alias="testId", min_length=1, strict=True)
    group_id: str = Field(alias="groupId", min_length=1, strict=True)


class PredicateBuilder:
    def __init__(
        self,
        experiments: Mapping[str, AbExperiment | MultivariateExperiment],
        logger: Logger | None = None,
    ) -> None:
        self._experiments = experiments
        self._log = logger or get_logger(__name__)

    def get_predicate(self, rule: Rule) -> Predicate | None:
        experiment = rule.properties.get("experiment")
        if experiment is None:
            return None

        try:
            reference = validate_input(ExperimentReference, experiment)
        except ValidationError as exc:
            self._log.error(
                "experiment.invalid_rule_properties",
                rule=rule.name,
                cause=format_cause(exc),
                fields=exc.fields,
            )
            return None

        if reference.test_id not in self._experiments:
            self._log.error(
                "experiment.unknown_test",
                rule=rule.name,
                test_id=reference.test_id,
            )
            return None

        return self.group_condition(reference.test_id, reference.group_id)

    def group_condition(self, test_id: str, group_id: str) -> Predicate:
        condition = Contains(test_id, group_id)
        audience = self._experiments[test_id].audience

        if audience is None:
            return condition

        return And(condition, Variable(audience))


__all__ = ["Rule", "ExperimentReference", "PredicateBuilder"]
