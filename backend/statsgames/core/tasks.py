"""Fire-and-forget background task helper."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from statsgames.core.logging import get_logger

logger = get_logger(__name__)

# Strong references so pending tasks are not garbage collected mid-flight
_pending: set[asyncio.Task[Any]] = set()


def create_background_task(
    coro: Coroutine[Any, Any, Any], *, name: str = ""
) -> asyncio.Task[Any]:
    """Schedule ``coro`` on the running loop and log if it fails."""
    task: asyncio.Task[Any] = asyncio.create_task(coro, name=name or None)
    _pending.add(task)

    def _done(t: asyncio.Task[Any]) -> None:
        _pending.discard(t)
        if t.cancelled():
            return
        if exc := t.exception():
            logger.error("Background task failed", task_name=name, error=str(exc))

    task.add_done_callback(_done)
    return task
