"""
Bounded polling for long-running generation jobs.

Veo returns an operation handle that has to be refreshed until its
``done`` flag flips. This primitive owns that loop: a fixed sleep between
refreshes, a maximum number of refreshes, and an overall wall-clock
timeout. Exhausting either bound raises MediaGenerationTimeout.
Cancelling the awaiting task cancels the loop at the next await.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, TypeVar

from ..llm.errors import MediaGenerationTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def poll_until_done(
    initial: T,
    refresh: Callable[[T], Awaitable[T]],
    is_done: Callable[[T], bool],
    *,
    interval: float,
    max_attempts: int,
    timeout: float | None = None,
    label: str = "job",
) -> T:
    """Refresh ``initial`` until ``is_done`` holds.

    Args:
        initial: The handle returned when the job was submitted
        refresh: Coroutine fetching the latest status for a handle
        is_done: Completion predicate
        interval: Seconds to sleep before each refresh
        max_attempts: Maximum number of refreshes
        timeout: Overall wall-clock budget in seconds (None = attempts only)
        label: Name used in log lines and the timeout error

    Returns:
        The first handle for which ``is_done`` is true.

    Raises:
        MediaGenerationTimeout: attempts or wall-clock budget exhausted
    """
    started = time.monotonic()
    attempts = 0
    current = initial

    async def _loop() -> T:
        nonlocal attempts, current
        while not is_done(current):
            if attempts >= max_attempts:
                raise MediaGenerationTimeout(label, attempts, time.monotonic() - started)
            await asyncio.sleep(interval)
            current = await refresh(current)
            attempts += 1
            logger.debug("%s: poll %d/%d done=%s", label, attempts, max_attempts, is_done(current))
        return current

    try:
        async with asyncio.timeout(timeout):
            return await _loop()
    except TimeoutError as e:
        raise MediaGenerationTimeout(label, attempts, time.monotonic() - started) from e
