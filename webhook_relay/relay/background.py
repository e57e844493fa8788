"""Fire-and-forget task runner with bounded task lifetime.

Forwards and alias lookups run after the HTTP response has been sent.
The runner keeps a reference to every in-flight task, caps each task's
lifetime, and on shutdown waits a grace period before cancelling the
rest. Completion is best-effort.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import BACKGROUND_TASKS

logger = get_logger(__name__)


class BackgroundRunner:
    """Owns background tasks submitted by the receive pipeline."""

    def __init__(
        self,
        task_timeout_seconds: float = 30.0,
        shutdown_grace_seconds: float = 5.0,
    ) -> None:
        """Initialize runner.

        Args:
            task_timeout_seconds: Maximum lifetime of a single task
            shutdown_grace_seconds: How long shutdown waits before cancelling
        """
        self._task_timeout = task_timeout_seconds
        self._shutdown_grace = shutdown_grace_seconds
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)

    def submit(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task | None:
        """Schedule a coroutine in the background.

        Args:
            name: Short task kind used in logs and metrics (e.g. "forward")
            coro: Coroutine to run

        Returns:
            The scheduled task, or None if the runner is shut down
        """
        if self._closed:
            coro.close()
            logger.warning("background_task_rejected", task=name)
            BACKGROUND_TASKS.labels(name=name, state="rejected").inc()
            return None

        task = asyncio.create_task(self._run(name, coro), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, name: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            await asyncio.wait_for(coro, timeout=self._task_timeout)
        except TimeoutError:
            logger.warning("background_task_timeout", task=name, timeout=self._task_timeout)
            BACKGROUND_TASKS.labels(name=name, state="timeout").inc()
        except asyncio.CancelledError:
            BACKGROUND_TASKS.labels(name=name, state="cancelled").inc()
            raise
        except Exception as e:
            logger.exception(
                "background_task_failed",
                task=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            BACKGROUND_TASKS.labels(name=name, state="failed").inc()
        else:
            BACKGROUND_TASKS.labels(name=name, state="completed").inc()

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight tasks.

        Args:
            timeout: Seconds to wait; None waits until all tasks finish

        Returns:
            True if no tasks remain
        """
        while self._tasks:
            _, still_pending = await asyncio.wait(set(self._tasks), timeout=timeout)
            if still_pending:
                return False
        return True

    async def shutdown(self) -> None:
        """Stop accepting work, wait the grace period, cancel stragglers."""
        self._closed = True
        if not self._tasks:
            return

        logger.info("background_runner_draining", pending=len(self._tasks))
        if await self.drain(timeout=self._shutdown_grace):
            return

        stragglers = list(self._tasks)
        for task in stragglers:
            task.cancel()
        await asyncio.gather(*stragglers, return_exceptions=True)
        logger.warning("background_tasks_cancelled", count=len(stragglers))
