"""
Tracked fire-and-forget tasks.

Work spawned here never delays the response that triggered it, but the service
keeps a reference to every pending task and drains the group on shutdown, so
a write started just before the process stops still runs to completion.
"""

import asyncio
from typing import Any, Awaitable, Optional, Set

from shared.logging import get_logger


class BackgroundTaskGroup:
    """Holds background tasks until they finish and logs their failures."""

    def __init__(self, name: str = "background"):
        self.name = name
        self.logger = get_logger(f"apq.tasks.{name}")
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable[Any], *, label: Optional[str] = None) -> asyncio.Task:
        """Schedule ``coro`` without awaiting it."""
        task = asyncio.ensure_future(coro)
        if label:
            task.set_name(label)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            self.logger.warning("Background task cancelled", task=task.get_name())
            return

        exc = task.exception()
        if exc is not None:
            self.logger.error(
                "Background task failed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every task spawned so far, including ones spawned while waiting."""
        while self._tasks:
            tasks = list(self._tasks)
            self.logger.info("Draining background tasks", count=len(tasks))
            # Failures were already logged by _on_done
            await asyncio.gather(*tasks, return_exceptions=True)
