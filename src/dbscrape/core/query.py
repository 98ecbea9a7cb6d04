"""Query executor streaming decoded rows from a data source."""

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AsyncExitStack
from typing import Any, TypeVar

from dbscrape.core.context import ScrapeContext
from dbscrape.core.errors import QueryFailure, ScrapeError
from dbscrape.core.ports import DataSource

logger = logging.getLogger(__name__)

R = TypeVar("R")


async def execute_query(
    ctx: ScrapeContext,
    source: DataSource,
    query: str,
    decode: Callable[[Sequence[Any]], R],
) -> AsyncIterator[R]:
    """Issue a read-only query and lazily yield decoded rows.

    The connection and cursor are held only while the generator is live and
    are released when it is exhausted, raises, or is closed early. Callers
    that may stop iterating before exhaustion should wrap the generator in
    contextlib.aclosing().

    Args:
        ctx: Cancellation context; acquire, execute and every fetch observe it.
        source: Shared data source handle.
        query: Fixed, parameterless query text.
        decode: Converts one raw row into the row type, raising DecodeFailure.

    Yields:
        Decoded rows in fetch order.

    Raises:
        QueryFailure: The query could not be issued or a fetch failed.
        DecodeFailure: Raised by decode for a malformed row.
        Cancelled: The context was cancelled while blocked.
    """
    async with AsyncExitStack() as stack:
        try:
            conn = await ctx.guard(stack.enter_async_context(source.connection()))
            cursor = await ctx.guard(conn.execute(query))
        except ScrapeError:
            raise
        except Exception as e:
            raise QueryFailure(f"error running query: {e}") from e
        stack.push_async_callback(cursor.close)

        fetched = 0
        while True:
            try:
                raw = await ctx.guard(cursor.fetchone())
            except ScrapeError:
                raise
            except Exception as e:
                raise QueryFailure(f"error fetching row {fetched + 1}: {e}") from e
            if raw is None:
                break
            fetched += 1
            yield decode(raw)
        logger.debug("Query returned %d rows", fetched)
