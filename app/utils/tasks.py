"""Detached background work that must not hold up an HTTP response."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Set

logger = logging.getLogger(__name__)


class BackgroundTaskTracker:
    """Spawn fire-and-forget tasks and keep them alive until they finish.

    The event loop only holds weak references to tasks, so the tracker keeps
    the strong ones. Outcomes are only logged; nobody awaits them on the
    request path.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task %s failed", task.get_name(), exc_info=(type(exc), exc, exc.__traceback__)
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for pending tasks; whatever is still running after ``timeout`` is cancelled."""
        if not self._tasks:
            return
        pending = set(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d unfinished background task(s)", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)


__all__ = ["BackgroundTaskTracker"]
