"""
experiments_sdk.tier3_platform.experiments
────────────────────────────────────────────
Experiment definitions and group selection.

Two experiment kinds are supported:

  ab            one group out of a flat list, evenly split or weighted
  multivariate  one variant per factor; the cartesian product of the factors
                is the combination space

Selection is random per call; persistence across calls is the runner's job.
Every draw goes through an injected uniform source (see tier1_runtime.sampling).

Raw definitions look like:

    {
        "hero": {"type": "ab", "traffic": 0.5, "groups": ["control", "new"]},
        "cta": {"type": "ab", "groups": {"blue": 80, "green": {"weight": 20}}},
        "layout": {
            "type": "multivariate",
            "audience": "returning",
            "groups": [["wide", "narrow"], ["light", "dark"]],
        },
    }
"""
from __future__ import annotations

import math
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from experiments_sdk.tier1_runtime.sampling import get_sampler
from experiments_sdk.tier1_runtime.validate import validate_input

GROUP_SEPARATOR = "|"

NonEmptyStr = Annotated[str, Field(min_length=1)]


# ── Group splits ─────────────────────────────────────────────────────────────

class EvenSplit(BaseModel):
    """Groups with equal probability each."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["even"] = "even"
    groups: tuple[NonEmptyStr, ...] = Field(min_length=1)


class WeightedSplit(BaseModel):
    """Groups selected in proportion to their weight; weights need not sum to 1."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["weighted"] = "weighted"
    weights: dict[NonEmptyStr, Annotated[float, Field(ge=0)]] = Field(min_length=1)

    @field_validator("weights", mode="before")
    @classmethod
    def _unwrap_weights(cls, v: Any) -> Any:
        # Accept both {"a": 80} and {"a": {"weight": 80}}; any other object
        # is left as is and fails float validation.
        if not isinstance(v, dict):
            return v
        return {
            name: (
                weight["weight"]
                if isinstance(weight, dict) and weight.keys() == {"weight"}
                else weight
            )
            for name, weight in v.items()
        }


GroupSplit = Annotated[Union[EvenSplit, WeightedSplit], Field(discriminator="kind")]


# ── Definitions ──────────────────────────────────────────────────────────────

class _BaseExperiment(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    traffic: float | None = Field(default=None, ge=0, le=1)
    audience: NonEmptyStr | None = None


class AbExperiment(_BaseExperiment):
    type: Literal["ab"] = "ab"
    groups: GroupSplit

    @field_validator("groups", mode="before")
    @classmethod
    def _tag_groups(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return {"kind": "even", "groups": v}
        if isinstance(v, dict):
            return {"kind": "weighted", "weights": v}
        return v


class MultivariateExperiment(_BaseExperiment):
    type: Literal["multivariate"] = "multivariate"
    groups: tuple[Annotated[tuple[NonEmptyStr, ...], Field(min_length=1)], ...] = Field(
        min_length=1
    )

    @property
    def combination_count(self) -> int:
        return math.prod(len(factor) for factor in self.groups)


Experiment = Annotated[
    Union[AbExperiment, MultivariateExperiment], Field(discriminator="type")
]

ExperimentDefinitions = dict[str, Experiment]


def load_definitions(raw: Any) -> dict[str, AbExperiment | MultivariateExperiment]:
    """
    Validate a raw ``{test_id: definition}`` mapping.
    Raises ValidationError with dotted field paths on malformed input.
    """
    return validate_input(ExperimentDefinitions, raw)


# ── Selection ────────────────────────────────────────────────────────────────

def _excluded(traffic: float | None, sample: Callable[[], float]) -> bool:
    return traffic is not None and sample() >= traffic


def select_ab_group(
    experiment: AbExperiment,
    sample: Callable[[], float] | None = None,
) -> str | None:
    """Pick one group, or None when the visitor falls outside the traffic."""
    sample = sample or get_sampler().random

    if _excluded(experiment.traffic, sample):
        return None

    split = experiment.groups

    if isinstance(split, EvenSplit):
        return split.groups[math.floor(sample() * len(split.groups))]

    choices = list(split.weights.items())
    remainder = math.floor(sample() * sum(split.weights.values()))

    for group, weight in choices[:-1]:
        remainder -= weight
        if remainder < 0:
            return group

    return choices[-1][0]


def select_multivariate_groups(
    experiment: MultivariateExperiment,
    sample: Callable[[], float] | None = None,
) -> list[str]:
    """Pick one variant per factor, or [] when outside the traffic."""
    sample = sample or get_sampler().random

    if _excluded(experiment.traffic, sample):
        return []

    index = math.floor(sample() * experiment.combination_count)

    combination: list[str] = []
    for factor in reversed(experiment.groups):
        combination.insert(0, factor[index % len(factor)])
        index //= len(factor)

    return combination


def combination_label(variant_ids: list[str]) -> str:
    return GROUP_SEPARATOR.join(variant_ids)


__all__ = [
    "GROUP_SEPARATOR",
    "EvenSplit",
    "WeightedSplit",
    "AbExperiment",
    "MultivariateExperiment",
    "Experiment",
    "ExperimentDefinitions",
    "load_definitions",
    "select_ab_group",
    "select_multivariate_groups",
    "combination_label",
]
