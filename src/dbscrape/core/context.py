"""Cancellation context for a single scrape cycle."""

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

from dbscrape.core.errors import Cancelled

T = TypeVar("T")


class ScrapeContext:
    """Cooperative cancellation signal with an optional deadline.

    Every blocking step of a scrape (acquiring a connection, issuing the
    query, fetching a row, pushing to the sink) is run through guard(),
    which unblocks it as soon as the context is cancelled or the deadline
    passes.

    Example:
        ```python
        ctx = ScrapeContext(timeout=5.0)
        await scraper.scrape(ctx, source, sink)
        ```
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the context.

        Args:
            timeout: Seconds from now after which the context counts as
                cancelled. None means no deadline.
        """
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self._event: asyncio.Event | None = None
        self._reason: str | None = None

    def _get_event(self) -> asyncio.Event:
        """Get or create the cancellation event (lazy to avoid event loop issues)."""
        if self._event is None:
            self._event = asyncio.Event()
            if self._reason is not None:
                self._event.set()
        return self._event

    def cancel(self, reason: str = "scrape cancelled") -> None:
        """Signal cancellation. Idempotent; the first reason wins."""
        if self._reason is None:
            self._reason = reason
        if self._event is not None:
            self._event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None if there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def cancelled(self) -> bool:
        """Return True if cancelled explicitly or past the deadline."""
        return self._reason is not None or self.remaining() == 0.0

    def _error(self) -> Cancelled:
        if self._reason is not None:
            return Cancelled(self._reason)
        return Cancelled("scrape deadline exceeded")

    def raise_if_cancelled(self) -> None:
        """Raise Cancelled if the context is no longer live."""
        if self.cancelled:
            raise self._error()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await an operation unless the context is cancelled first.

        Args:
            awaitable: The blocking operation.

        Returns:
            The operation's result.

        Raises:
            Cancelled: If the context is cancelled or the deadline passes
                before the operation completes. The operation is cancelled.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self._error()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._get_event().wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()
        if task in done:
            return task.result()
        task.cancel()
        raise self._error()
