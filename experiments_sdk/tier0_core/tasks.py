"""
experiments_sdk.tier0_core.tasks
──────────────────────────────────
Detached background operations. A spawned coroutine runs on the current
event loop without the caller awaiting it; its failure is routed to an error
sink and never re-enters the caller's result or error channel.

Used for fire-and-forget side effects such as assignment tracking.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

ErrorSink = Callable[[BaseException], None]


class BackgroundTasks:
    """
    Owns the set of in-flight detached tasks.

    asyncio only keeps weak references to tasks, so the set holds a strong
    reference until each task completes.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        on_error: ErrorSink | None = None,
        name: str | None = None,
    ) -> asyncio.Task[Any]:
        """
        Schedule *coro* on the running loop and return immediately.

        Must be called from inside a coroutine (a running loop is required).
        Exceptions raised by *coro* are passed to *on_error*; cancellation is
        not reported.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)

        def _done(finished: asyncio.Task[Any]) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None and on_error is not None:
                on_error(exc)

        task.add_done_callback(_done)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight task, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Let done-callbacks run so the set reflects completed tasks.
            await asyncio.sleep(0)


# ── Module-level singleton ─────────────────────────────────────────────────

_background: BackgroundTasks | None = None


def get_background_tasks() -> BackgroundTasks:
    global _background
    if _background is None:
        _background = BackgroundTasks()
    return _background


def _reset_background_tasks() -> None:
    global _background
    _background = None


__all__ = ["BackgroundTasks", "ErrorSink", "get_background_tasks"]
