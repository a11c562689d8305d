"""
experiments_sdk.tier2_reliability.cache
─────────────────────────────────────────
Two-tier read-through cache for assignments.

    tab hit      → return as is (no write, no discovery)
    browser hit  → promote into tab, report discovery, return
    miss         → compute, write tab and browser, report discovery, return

A value that fails to decode is indistinguishable from a missing one; the
cache moves on to the next tier and, failing that, recomputes.

"Discovery" means this execution context learned the assignment for the
first time. A browser hit promoted into an empty tab tier is a discovery
every time it happens, not only the first time the assignment was created.
"""
from __future__ import annotations

from typing import Callable, TypeVar

from experiments_sdk.tier0_core.logging import Logger, get_logger
from experiments_sdk.tier1_runtime.serialize import Codec
from experiments_sdk.tier2_reliability.storage import KeyValueStorage

T = TypeVar("T")


class TieredAssignmentStore:
    """Read-through strategy over a long-lived and a short-lived storage tier."""

    def __init__(
        self,
        browser: KeyValueStorage,
        tab: KeyValueStorage,
        logger: Logger | None = None,
    ) -> None:
        self.browser = browser
        self.tab = tab
        self._log = logger or get_logger(__name__)

    def lookup(self, key: str, codec: Codec[T]) -> tuple[T | None, bool]:
        """
        Return ``(value, from_tab)`` for the first tier holding a decodable
        value, or ``(None, False)`` when neither does. Does not write.
        """
        value = self._read(self.tab, key, codec)
        if value is not None:
            return value, True
        return self._read(self.browser, key, codec), False

    def resolve(
        self,
        key: str,
        codec: Codec[T],
        compute: Callable[[], T],
        on_discovery: Callable[[T], None] | None = None,
    ) -> T:
        value, from_tab = self.lookup(key, codec)

        if value is not None and from_tab:
            return value

        if value is not None:
            self.tab.set(key, codec.encode(value))
            if on_discovery is not None:
                on_discovery(value)
            return value

        self._log.debug("experiment.assignment_missing", test_id=key)

        value = compute()
        serialized = codec.encode(value)

        self.tab.set(key, serialized)
        self.browser.set(key, serialized)

        if on_discovery is not None:
            on_discovery(value)

        return value

    @staticmethod
    def _read(storage: KeyValueStorage, key: str, codec: Codec[T]) -> T | None:
        raw = storage.get(key)
        if raw is None:
            return None
        return codec.decode(raw)


__all__ = ["TieredAssignmentStore"]
