"""
experiments_sdk.tier1_runtime.retry
─────────────────────────────────────
Retry/backoff policy with jitter for outbound transports (tracking).
Backed by Tenacity. Definition and configuration errors are never retried.

The experiment runner itself never retries: a tracking call is attempted
once from its point of view, and any retry happens inside the transport.

Usage:
    @retry_policy(max_attempts=3, on=[TrackingError])
    async def post_event(...):
        ...
"""
from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, Type

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from experiments_sdk.tier0_core.errors import ConfigurationError, ValidationError

_NON_RETRYABLE: tuple[Type[Exception], ...] = (ValidationError, ConfigurationError)


def _is_retryable(exc: BaseException) -> bool:
    """Return True if the exception should be retried."""
    return not isinstance(exc, _NON_RETRYABLE)


def retry_policy(
    max_attempts: int = 3,
    min_wait: float = 0.2,
    max_wait: float = 5.0,
    jitter: float = 0.5,
    on: list[Type[Exception]] | None = None,
) -> Callable:
    """
    Decorator applying exponential backoff with jitter to a coroutine.

    Args:
        max_attempts: Total number of attempts (including first).
        min_wait:     Minimum wait seconds between retries.
        max_wait:     Maximum wait seconds between retries.
        jitter:       Maximum random seconds added to each wait.
        on:           Specific exception types to retry on. If None, retries
                      on everything except validation/configuration errors.
    """
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            if on:
                retry_on = retry_if_exception_type(tuple(on))
            else:
                retry_on = retry_if_exception(_is_retryable)

            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(min=min_wait, max=max_wait) + wait_random(0, jitter),
                retry=retry_on,
                reraise=True,
            ):
                with attempt:
                    return await fn(*args, **kwargs)

        return wrapper
    return decorator


__all__ = ["retry_policy"]
