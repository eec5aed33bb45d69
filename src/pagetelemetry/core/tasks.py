"""Fire-and-forget scheduling of coroutines from synchronous code."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from pagetelemetry.core.logs import get_logger

logger = get_logger(__name__)


class BackgroundTasks:
    """Schedules coroutines on the running event loop without awaiting them.

    Strong references are kept until each task finishes, so tasks are not
    garbage collected mid-flight. Outside a running loop the coroutine is
    closed unscheduled.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
        """Schedule a coroutine on the running loop.

        Returns:
            The scheduled task, or None when no loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.debug("No running event loop, background work skipped")
            return None
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled task, including ones spawned meanwhile, ends."""
        while pending := [task for task in self._tasks if not task.done()]:
            await asyncio.gather(*pending, return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)
