"""
Safe asyncio task creation with error logging.

Media generation runs in fire-and-forget tasks; a bare
`asyncio.create_task()` would drop their exceptions on the floor.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


def safe_create_task(coro, *, name: str = None, registry: set | None = None) -> asyncio.Task:
    """Create an asyncio task with automatic error logging.

    Args:
        coro: The coroutine to schedule.
        name: Optional human-readable task name for log messages.
        registry: Optional set that holds a strong reference to the task
            until it finishes (so it can be awaited or cancelled later).

    Returns:
        The created ``asyncio.Task``.
    """
    task = asyncio.create_task(coro, name=name)
    task.add_done_callback(_log_task_exception)
    if registry is not None:
        registry.add(task)
        task.add_done_callback(registry.discard)
    return task


def _log_task_exception(task: asyncio.Task) -> None:
    """Done-callback that logs unhandled task exceptions."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error(
            "Background task '%s' failed: %s",
            task.get_name(),
            exc,
            exc_info=exc,
        )
