"""
Background Task Registry

Owns every detached coroutine the service starts (video pollers,
crisis flag writes). Tasks are tracked from spawn until they finish,
failures are logged and reported, and shutdown cancels whatever is
still running so pollers never leak across restarts.
"""

import asyncio
from typing import Any, Coroutine, Optional

from aura.config.logging_config import get_logger
from aura.infrastructure.monitoring.sentry_integration import capture_exception_with_context

logger = get_logger(__name__)


class BackgroundTaskRegistry:
    """
    Tracks detached asyncio tasks.

    Usage:
        registry = BackgroundTaskRegistry()
        registry.spawn(poll_video(job_id), name="video-poll")
        ...
        await registry.cancel_all()
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._accepting = True

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str,
    ) -> Optional[asyncio.Task]:
        """
        Schedule a coroutine off the caller's control path.

        Args:
            coro: Coroutine to run
            name: Task name for logging

        Returns:
            The task, or None if the registry is shutting down
        """
        if not self._accepting:
            logger.warning("Background task rejected during shutdown", task=name)
            coro.close()
            return None

        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info("Background task cancelled", task=task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Background task failed",
                task=task.get_name(),
                error=str(error),
                error_type=type(error).__name__,
            )
            capture_exception_with_context(error, task_name=task.get_name())

    async def wait_idle(self) -> None:
        """Wait until every tracked task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Stop accepting work and cancel all running tasks."""
        self._accepting = False
        tasks = list(self._tasks)
        if not tasks:
            return

        logger.info("Cancelling background tasks", count=len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
