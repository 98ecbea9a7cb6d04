"""Helpers for running a scrape cycle outside a collection engine."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from dbscrape.adapters.sinks import InMemorySink
from dbscrape.core.context import ScrapeContext
from dbscrape.core.models import Observation
from dbscrape.core.ports import DataSource, Scraper

T = TypeVar("T")


def _run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine synchronously in a new event loop."""
    return asyncio.run(coro)


async def collect_observations(
    scraper: Scraper,
    source: DataSource,
    timeout: float | None = None,
) -> list[Observation]:
    """Run one scrape cycle and return everything it pushed.

    Args:
        scraper: The scraper to run.
        source: Data source handle passed to the scraper.
        timeout: Optional deadline for the whole cycle, in seconds.

    Returns:
        Observations in push order.

    Raises:
        ScrapeError: Whatever the scraper raised. Partial results are lost.
    """
    sink = InMemorySink()
    await scraper.scrape(ScrapeContext(timeout=timeout), source, sink)
    return sink.observations


def collect_observations_sync(
    scraper: Scraper,
    source: DataSource,
    timeout: float | None = None,
) -> list[Observation]:
    """Synchronous collect_observations for non-async contexts (testing, scripts).

    The source must not be bound to another event loop.
    """
    return _run_sync(collect_observations(scraper, source, timeout=timeout))
