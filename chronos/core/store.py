"""
Event-ordered state store.

All GameState changes for a session go through one GameStore. Producers
(navigation, media tasks, API handlers) enqueue events; a single consumer
task applies them with ``reduce`` strictly in the order they were enqueued,
which is the order the producing operations completed. Nothing else
assigns ``state``.
"""

import asyncio
import logging

from .events import Event
from .models import GameState
from .reducer import reduce

logger = logging.getLogger(__name__)


class GameStore:
    """Single-consumer event queue around one GameState."""

    def __init__(self, initial: GameState | None = None, name: str = "store"):
        self._state = initial or GameState()
        self._queue: asyncio.Queue[tuple[Event, asyncio.Future | None]] = asyncio.Queue()
        self._consumer: asyncio.Task | None = None
        self.name = name
        self.applied = 0

    @property
    def state(self) -> GameState:
        """The latest applied state."""
        return self._state

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def start(self) -> None:
        """Start the consumer task on the running loop (idempotent)."""
        if not self.running:
            self._consumer = asyncio.create_task(self._consume(), name=f"{self.name}-consumer")

    async def stop(self) -> None:
        """Apply everything already queued, then stop the consumer."""
        if not self.running:
            return
        await self._queue.join()
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None

    def dispatch(self, event: Event) -> None:
        """Enqueue ``event`` without waiting for it to be applied."""
        self.start()
        self._queue.put_nowait((event, None))

    async def apply(self, event: Event) -> GameState:
        """Enqueue ``event`` and return the state right after it was applied."""
        self.start()
        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((event, future))
        return await future

    async def drain(self) -> GameState:
        """Wait until every queued event has been applied."""
        if self.running:
            await self._queue.join()
        return self._state

    async def _consume(self) -> None:
        while True:
            event, future = await self._queue.get()
            try:
                self._state = reduce(self._state, event)
                self.applied += 1
            except Exception as e:
                logger.error(f"[{self.name}] failed to apply {type(event).__name__}: {e}")
                if future is not None and not future.done():
                    future.set_exception(e)
            else:
                if future is not None and not future.done():
                    future.set_result(self._state)
            finally:
                self._queue.task_done()
