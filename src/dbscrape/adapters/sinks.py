"""Output sink adapters for scraped observations."""

import asyncio
from collections.abc import AsyncIterator

from dbscrape.core.models import Observation


class InMemorySink:
    """In-memory implementation of ObservationSink.

    Appends observations to a list and never blocks. Suitable for testing
    and engines that encode a whole cycle at once.
    """

    def __init__(self) -> None:
        self._observations: list[Observation] = []

    async def put(self, observation: Observation) -> None:
        """Append an observation."""
        self._observations.append(observation)

    @property
    def observations(self) -> list[Observation]:
        """Observations pushed so far, in push order."""
        return list(self._observations)

    def clear(self) -> None:
        self._observations.clear()


class QueueSink:
    """Bounded queue implementation of ObservationSink.

    put() blocks while the queue holds max_size observations, applying
    backpressure to the scraper until the engine consumes. Order is
    preserved.

    Args:
        max_size: Maximum number of buffered observations. 0 means unbounded.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._queue: asyncio.Queue[Observation] = asyncio.Queue(maxsize=max_size)

    async def put(self, observation: Observation) -> None:
        """Push an observation, waiting for free space."""
        await self._queue.put(observation)

    async def get(self) -> Observation:
        """Remove and return the oldest observation, waiting if empty."""
        observation = await self._queue.get()
        self._queue.task_done()
        return observation

    def drain(self) -> list[Observation]:
        """Remove and return every buffered observation without waiting."""
        drained: list[Observation] = []
        while True:
            try:
                drained.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return drained
            self._queue.task_done()

    async def __aiter__(self) -> AsyncIterator[Observation]:
        """Consume observations forever; cancel the consumer to stop."""
        while True:
            yield await self.get()

    def qsize(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()
