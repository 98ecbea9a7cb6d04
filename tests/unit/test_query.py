"""Tests for the query executor."""

import asyncio
from contextlib import aclosing

import pytest

from dbscrape.core.context import ScrapeContext
from dbscrape.core.errors import Cancelled, DecodeFailure, QueryFailure
from dbscrape.core.query import execute_query

pytestmark = [pytest.mark.core, pytest.mark.tier(1)]


def _decode(raw: tuple[int, ...]) -> int:
    if raw[0] < 0:
        raise DecodeFailure("negative")
    return raw[0]


async def _collect(stream) -> list[int]:
    return [row async for row in stream]


class TestExecuteQuery:
    """Tests for execute_query()."""

    async def test_yields_decoded_rows_in_order(self, fake_source) -> None:
        """Rows are decoded and yielded in fetch order."""
        source = fake_source([(3,), (1,), (2,)])

        rows = await _collect(execute_query(ScrapeContext(), source, "SELECT 1", _decode))

        assert rows == [3, 1, 2]
        assert source.conn.queries == ["SELECT 1"]

    async def test_releases_cursor_and_connection_when_exhausted(
        self, fake_source
    ) -> None:
        """Cursor and connection are released after the last row."""
        source = fake_source([(1,)])

        await _collect(execute_query(ScrapeContext(), source, "q", _decode))

        assert source.conn.cursor.closed
        assert source.released == 1

    async def test_is_lazy(self, fake_source) -> None:
        """No connection is acquired before iteration starts."""
        source = fake_source([(1,)])

        stream = execute_query(ScrapeContext(), source, "q", _decode)

        assert source.acquired == 0
        await stream.aclose()

    async def test_releases_on_early_close(self, fake_source) -> None:
        """Closing the stream early releases cursor and connection."""
        source = fake_source([(1,), (2,), (3,)])

        async with aclosing(
            execute_query(ScrapeContext(), source, "q", _decode)
        ) as stream:
            async for row in stream:
                assert row == 1
                break

        assert source.conn.cursor.fetched == 1
        assert source.conn.cursor.closed
        assert source.released == 1

    async def test_execute_error_becomes_query_failure(self, fake_source) -> None:
        """A failing execute raises QueryFailure chained to the driver error."""
        error = RuntimeError("Table 'sys.x$user_summary' doesn't exist")
        source = fake_source(error=error)

        with pytest.raises(QueryFailure, match="doesn't exist") as exc_info:
            await _collect(execute_query(ScrapeContext(), source, "q", _decode))

        assert exc_info.value.__cause__ is error
        assert source.released == 1

    async def test_fetch_error_becomes_query_failure(self, fake_source) -> None:
        """A failing fetch raises QueryFailure naming the row number."""
        source = fake_source([(1,), ConnectionResetError("lost connection")])
        seen: list[int] = []

        with pytest.raises(QueryFailure, match="row 2"):
            async for row in execute_query(ScrapeContext(), source, "q", _decode):
                seen.append(row)

        assert seen == [1]
        assert source.conn.cursor.closed

    async def test_decode_failure_propagates_unchanged(self, fake_source) -> None:
        """DecodeFailure from the decoder is not wrapped."""
        source = fake_source([(1,), (-1,), (2,)])

        with pytest.raises(DecodeFailure, match="negative"):
            await _collect(execute_query(ScrapeContext(), source, "q", _decode))

        assert source.conn.cursor.fetched == 2
        assert source.conn.cursor.closed

    async def test_cancel_while_executing(self, fake_source) -> None:
        """Cancellation during execute raises Cancelled and releases the connection."""
        source = fake_source(block=True)
        ctx = ScrapeContext(timeout=0.05)

        with pytest.raises(Cancelled):
            await asyncio.wait_for(
                _collect(execute_query(ctx, source, "q", _decode)), timeout=1.0
            )

        assert source.released == 1

    async def test_cancel_while_fetching(self, fake_source) -> None:
        """Cancellation during fetch raises Cancelled after the rows already seen."""
        source = fake_source([(1,), (2,)], block_after=1)
        ctx = ScrapeContext()
        seen: list[int] = []

        async def consume() -> None:
            async for row in execute_query(ctx, source, "q", _decode):
                seen.append(row)
                asyncio.get_running_loop().call_later(0.01, ctx.cancel)

        with pytest.raises(Cancelled):
            await asyncio.wait_for(consume(), timeout=1.0)

        assert seen == [1]
        assert source.conn.cursor.closed

    async def test_already_cancelled_context_never_connects(self, fake_source) -> None:
        """A cancelled context never acquires a connection."""
        source = fake_source([(1,)])
        ctx = ScrapeContext()
        ctx.cancel()

        with pytest.raises(Cancelled):
            await _collect(execute_query(ctx, source, "q", _decode))

        assert source.acquired == 0
