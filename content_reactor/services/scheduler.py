"""Detached task scheduling for fire-and-forget reactions."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional, Set

from .. import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("services.scheduler")


class ReactionScheduler:
    """Run reactions as detached ``asyncio`` tasks.

    Strong references are kept until each task finishes so the event loop
    cannot garbage-collect a running reaction. Failures are logged and never
    reach the code that scheduled the task.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def spawn(
        self, coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None
    ) -> asyncio.Task[Any]:
        """Run ``coro`` as a detached task on the running loop.

        Args:
            coro: The reaction coroutine.
            name: Task name shown in logs.

        Returns:
            The created task. It is tracked until done so :meth:`drain` can
            await it.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(
                "Reaction task %s cancelled",
                task.get_name(),
                extra={"event": "scheduler.task.cancelled"},
            )
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Reaction task %s failed",
                task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"event": "scheduler.task.error"},
            )

    async def drain(self) -> None:
        """Wait until no task is pending, including tasks spawned meanwhile."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Let done-callbacks run before re-checking the set.
            await asyncio.sleep(0)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["ReactionScheduler"]
