"""Helpers for fire-and-forget asyncio tasks.

Immediate loads and telemetry posts run as background tasks nobody awaits.
These helpers log their failures so they neither vanish nor trigger
"Task exception was never retrieved" warnings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any


def log_task_exception(
    task: asyncio.Task[Any],
    logger: Any,
    event: str,
    *,
    level: str = "error",
) -> BaseException | None:
    """Log the exception of a finished task, if it has one.

    Args:
        task: A done task.
        logger: Anything with structlog-style level methods.
        event: Event name for the log entry.
        level: Name of the logger method to use.

    Returns:
        The task's exception; None when it succeeded or was cancelled.
    """
    if task.cancelled():
        return None
    exc = task.exception()
    if exc is None:
        return None
    emit = getattr(logger, level, logger.error)
    emit(event, error=str(exc), task_name=task.get_name())
    return exc


def spawn_background(
    coro: Coroutine[Any, Any, Any],
    logger: Any,
    event: str,
    *,
    name: str | None = None,
    level: str = "warning",
) -> asyncio.Task[Any]:
    """Start ``coro`` on the running loop; a failure is logged as ``event``.

    Raises:
        RuntimeError: No event loop is running. ``coro`` is closed first.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        raise
    task = loop.create_task(coro, name=name)
    task.add_done_callback(lambda done: log_task_exception(done, logger, event, level=level))
    return task
