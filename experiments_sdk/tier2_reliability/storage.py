"""
experiments_sdk.tier2_reliability.storage
───────────────────────────────────────────
Key/value storage scopes that back the two assignment tiers:

  browser  long-lived, survives sessions (no expiry by default)
  tab      short-lived, one per session/tab (EXPERIMENTS_TAB_TTL)

Both tiers share one synchronous contract: get(key) / set(key, value) /
clear(). The host owns the scopes; the SDK only reads and writes them.

Configure via: EXPERIMENTS_STORAGE_BACKEND=memory|redis, REDIS_URL,
               EXPERIMENTS_STORAGE_PREFIX, EXPERIMENTS_BROWSER_TTL,
               EXPERIMENTS_TAB_TTL
"""
from __future__ import annotations

import time
from typing import Callable, Protocol, runtime_checkable

from experiments_sdk.tier0_core.config import get_config
from experiments_sdk.tier0_core.errors import ConfigurationError


@runtime_checkable
class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    """
    In-process storage scope for development and tests.
    Entries optionally expire *ttl* seconds after they were last written.
    """

    def __init__(
        self,
        ttl: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._store: dict[str, tuple[str, float]] = {}  # key → (value, expires_at)
        self._ttl = ttl
        self._clock = clock or time.monotonic

    def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at and self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: str) -> None:
        expires_at = (self._clock() + self._ttl) if self._ttl else 0.0
        self._store[key] = (value, expires_at)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class RedisStorage:
    """
    Redis-backed storage scope. Keys are namespaced as
    ``<prefix>:<scope>:<key>`` so several scopes can share one database.
    """

    def __init__(
        self,
        url: str,
        scope: str,
        *,
        prefix: str = "experiments",
        ttl: int | None = None,
        client=None,
    ) -> None:
        if client is None:
            import redis
            client = redis.Redis.from_url(url, decode_responses=True)
        self._redis = client
        self._namespace = f"{prefix}:{scope}:"
        self._ttl = ttl

    def _key(self, key: str) -> str:
        return self._namespace + key

    def get(self, key: str) -> str | None:
        value = self._redis.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    def set(self, key: str, value: str) -> None:
        if self._ttl:
            self._redis.setex(self._key(key), self._ttl, value)
        else:
            self._redis.set(self._key(key), value)

    def clear(self) -> None:
        keys = list(self._redis.scan_iter(match=self._namespace + "*"))
        if keys:
            self._redis.delete(*keys)


# ── Provider registry ─────────────────────────────────────────────────────────

_browser: KeyValueStorage | None = None
_tab: KeyValueStorage | None = None


def _build_storage(scope: str, ttl: int | None) -> KeyValueStorage:
    config = get_config()
    backend = config.storage_backend.lower()
    if backend in ("memory", "mock"):
        return MemoryStorage(ttl=ttl)
    if backend == "redis":
        return RedisStorage(
            config.redis_url, scope, prefix=config.storage_prefix, ttl=ttl
        )
    raise ConfigurationError(
        user_message=(
            f"Unknown EXPERIMENTS_STORAGE_BACKEND: {backend!r}. "
            "Supported: memory, redis"
        )
    )


def get_browser_storage() -> KeyValueStorage:
    """Return the long-lived tier."""
    global _browser
    if _browser is None:
        _browser = _build_storage("browser", get_config().browser_ttl)
    return _browser


def get_tab_storage() -> KeyValueStorage:
    """Return the short-lived tier."""
    global _tab
    if _tab is None:
        _tab = _build_storage("tab", get_config().tab_ttl)
    return _tab


def _reset_storage() -> None:
    global _browser, _tab
    _browser = None
    _tab = None


__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "RedisStorage",
    "get_browser_storage",
    "get_tab_storage",
]
