"""Tracking for fire-and-forget work scheduled on the event loop."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Coroutine, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundTasks:
    """
    Keep strong references to in-flight tasks and log their failures.

    A failed task never propagates its exception; the failure is logged
    with the description given at creation time.
    """

    def __init__(self, owner: str = "") -> None:
        self._owner = owner
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def create(self, coro: Coroutine[Any, Any, T], description: str) -> asyncio.Task[T]:
        """Schedule a coroutine and return its task."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._on_done(done, description))
        return task

    def _on_done(self, task: asyncio.Task[Any], description: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            _LOGGER.warning(
                "%s%s failed: %s",
                f"{self._owner}: " if self._owner else "",
                description,
                err,
                exc_info=(type(err), err, err.__traceback__),
            )

    async def async_cancel_all(self) -> None:
        """Cancel every in-flight task and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._tasks.clear()
