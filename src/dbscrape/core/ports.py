"""Port interfaces for data sources, sinks and scrapers.

These protocols define the contracts the collection engine relies on.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Awaitable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable

from dbscrape.core.context import ScrapeContext
from dbscrape.core.models import MetricDescriptor, Observation


@runtime_checkable
class Cursor(Protocol):
    """Result cursor of an executed query."""

    async def fetchone(self) -> Sequence[Any] | None:
        """Fetch the next raw row, or None when exhausted."""
        ...

    async def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Read-only view of a database connection."""

    def execute(self, sql: str) -> Awaitable[Cursor]:
        """Issue a query and return its cursor."""
        ...


@runtime_checkable
class DataSource(Protocol):
    """Port for a shared, pooled data source handle.

    Adapters implementing this protocol hand out a connection for the
    duration of a single query. Examples: SQLiteDataSource.
    """

    def connection(self) -> AbstractAsyncContextManager[Connection]:
        """Context manager that acquires and releases one connection."""
        ...


@runtime_checkable
class ObservationSink(Protocol):
    """Port for the ordered output channel of a scrape.

    Examples: InMemorySink, QueueSink.
    """

    async def put(self, observation: Observation) -> None:
        """Push one observation. May block to apply backpressure."""
        ...


@runtime_checkable
class Scraper(Protocol):
    """A self-describing unit that turns one diagnostic view into metrics."""

    def name(self) -> str:
        """Stable, unique identifier of the scraper."""
        ...

    def help_text(self) -> str:
        """Describe the role of the scraper."""
        ...

    def version(self) -> float:
        """Minimum server version from which the scraper is available."""
        ...

    def descriptors(self) -> tuple[MetricDescriptor, ...]:
        """Every descriptor the scraper can emit, in emission order."""
        ...

    async def scrape(
        self,
        ctx: ScrapeContext,
        source: DataSource,
        sink: ObservationSink,
    ) -> None:
        """Run one collection cycle, pushing observations to sink.

        Raises:
            QueryFailure: The query could not be issued or fetched.
            DecodeFailure: A row did not match the expected shape.
            Cancelled: The context was cancelled or timed out.
        """
        ...
