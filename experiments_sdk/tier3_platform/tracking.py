"""
experiments_sdk.tier3_platform.tracking
─────────────────────────────────────────
Event tracking transport. The runner only depends on the Tracker contract:
an awaitable ``track(event, payload)`` that may raise.

Backed by: HTTP collector (httpx), structlog sink, or in-memory mock.

Configure via: EXPERIMENTS_TRACKING_BACKEND=http|log|mock
               EXPERIMENTS_TRACKING_URL, EXPERIMENTS_TRACKING_TIMEOUT
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from experiments_sdk.tier0_core.config import get_config
from experiments_sdk.tier0_core.errors import ConfigurationError, TrackingError
from experiments_sdk.tier0_core.logging import get_logger
from experiments_sdk.tier1_runtime.retry import retry_policy

GROUP_ASSIGNED_EVENT = "testGroupAssigned"


@runtime_checkable
class Tracker(Protocol):
    async def track(self, event: str, payload: dict[str, Any]) -> None: ...


@dataclass
class TrackedEvent:
    event: str
    payload: dict[str, Any] = field(default_factory=dict)


# ── Mock provider ─────────────────────────────────────────────────────────────

class MockTracker:
    """Records every event. Set *fail_with* to make each call raise it."""

    def __init__(self, fail_with: BaseException | None = None) -> None:
        self.events: list[TrackedEvent] = []
        self.fail_with = fail_with

    async def track(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append(TrackedEvent(event=event, payload=dict(payload)))
        if self.fail_with is not None:
            raise self.fail_with


# ── Log provider ──────────────────────────────────────────────────────────────

class LogTracker:
    """Writes events to the structured log. Default for local development."""

    def __init__(self) -> None:
        self._log = get_logger(__name__)

    async def track(self, event: str, payload: dict[str, Any]) -> None:
        self._log.info("tracking.event", tracked_event=event, **payload)


# ── HTTP provider ─────────────────────────────────────────────────────────────

class HttpTracker:
    """
    POSTs ``{"event": ..., "payload": ...}`` as JSON to a collector endpoint.
    Requires: EXPERIMENTS_TRACKING_URL
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        client=None,
    ) -> None:
        import httpx
        self._url = url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    @retry_policy(max_attempts=3, on=[TrackingError])
    async def track(self, event: str, payload: dict[str, Any]) -> None:
        import httpx
        try:
            resp = await self._client.post(
                self._url, json={"event": event, "payload": payload}
            )
        except httpx.HTTPError as exc:
            raise TrackingError(
                user_message="Tracking transport unavailable.",
                detail=f"{type(exc).__name__}: {exc}",
            ) from exc

        if resp.status_code >= 400:
            raise TrackingError(
                user_message="Tracking collector rejected the event.",
                detail=f"Collector error: {resp.status_code} {resp.text}",
                status=resp.status_code,
            )

    async def aclose(self) -> None:
        await self._client.aclose()


# ── Provider registry ─────────────────────────────────────────────────────────

_tracker: Tracker | None = None


def _build_tracker() -> Tracker:
    config = get_config()
    name = config.tracking_backend.lower()
    if name == "mock":
        return MockTracker()
    if name == "log":
        return LogTracker()
    if name == "http":
        if not config.tracking_url:
            raise ConfigurationError(
                user_message="EXPERIMENTS_TRACKING_URL is required for the http tracker."
            )
        return HttpTracker(config.tracking_url, timeout=config.tracking_timeout)
    raise ConfigurationError(
        user_message=f"Unknown EXPERIMENTS_TRACKING_BACKEND={name!r}. Supported: http, log, mock"
    )


def get_tracker() -> Tracker:
    global _tracker
    if _tracker is None:
        _tracker = _build_tracker()
    return _tracker


def _reset_tracker() -> None:
    global _tracker
    _tracker = None


__all__ = [
    "GROUP_ASSIGNED_EVENT",
    "Tracker",
    "TrackedEvent",
    "MockTracker",
    "LogTracker",
    "HttpTracker",
    "get_tracker",
]
