"""Helpers for side effects that must never block or fail a request."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# Strong references keep scheduled tasks alive until they finish.
_background_tasks: set[asyncio.Task[Any]] = set()


def _on_task_done(label: str, task: asyncio.Task[Any]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s failed: %s", label, exc, exc_info=exc)


def fire_and_forget(coro: Coroutine[Any, Any, Any], *, label: str) -> asyncio.Task[Any] | None:
    """Schedule a coroutine on the running loop without awaiting it.

    Failures are logged when the task finishes. Outside an event loop the
    coroutine is closed and dropped, since there is nothing to deliver to.

    Args:
        coro: The coroutine to run.
        label: Short description used in log lines.

    Returns:
        The scheduled task, or None when no loop was running.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        logger.warning("No running event loop; dropped background task %s", label)
        return None

    task = loop.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(lambda done: _on_task_done(label, done))
    return task


async def drain_background_tasks() -> None:
    """Wait for every task scheduled so far. Used on shutdown."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
