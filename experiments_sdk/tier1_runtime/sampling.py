"""
experiments_sdk.tier1_runtime.sampling
────────────────────────────────────────
Mockable uniform random source. Group selection draws every random number
through a Sampler instead of calling random.random() directly, which makes
assignment fully controllable in tests and replayable from a recorded draw
sequence.

No seeding or reproducibility is provided by default: assignments are
intentionally non-deterministic per visitor.
"""
from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Callable


# ── Sampler implementation ─────────────────────────────────────────────────

class Sampler:
    """Uniform sampler over [0, 1). Override random_fn to control draws."""

    def __init__(self, random_fn: Callable[[], float] | None = None) -> None:
        self._random_fn = random_fn or random.random

    def random(self) -> float:
        """Return the next uniform draw in [0, 1)."""
        return self._random_fn()

    __call__ = random

    @classmethod
    def replay(cls, draws: Iterable[float]) -> "Sampler":
        """
        Return a Sampler yielding *draws* in order.
        Raises RuntimeError once the sequence is exhausted.
        """
        it = iter(draws)

        def _next() -> float:
            try:
                return next(it)
            except StopIteration:
                raise RuntimeError("Sampler replay sequence exhausted") from None

        return cls(random_fn=_next)

    @classmethod
    def linear(cls, steps: int) -> "Sampler":
        """Return a Sampler yielding 0/steps, 1/steps, 2/steps, ... forever."""
        counter = 0

        def _next() -> float:
            nonlocal counter
            value = (counter % steps) / steps
            counter += 1
            return value

        return cls(random_fn=_next)


# ── Module-level singleton ─────────────────────────────────────────────────

_sampler = Sampler()


def get_sampler() -> Sampler:
    """Return the global sampler instance."""
    return _sampler


def set_sampler(sampler: Sampler) -> None:
    """Replace the global sampler (use in tests)."""
    global _sampler
    _sampler = sampler


def uniform() -> float:
    """Return a uniform draw in [0, 1) from the global sampler."""
    return _sampler.random()


__all__ = ["Sampler", "get_sampler", "set_sampler", "uniform"]
