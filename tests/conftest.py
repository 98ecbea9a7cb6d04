"""Shared test fixtures for all test modules."""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest

from dbscrape.adapters.sqlite_source import SQLiteDataSource

# Creates the sys view as a plain table in an attached in-memory schema
SYS_VIEW_SCHEMA = """
ATTACH DATABASE ':memory:' AS sys;
CREATE TABLE sys.`x$user_summary_by_statement_type` (
    user TEXT,
    statement TEXT,
    total INTEGER,
    total_latency INTEGER,
    max_latency INTEGER,
    lock_latency INTEGER,
    rows_sent INTEGER,
    rows_examined INTEGER,
    rows_affected INTEGER,
    full_scans INTEGER
);
"""

_INSERT_ROW = """
INSERT INTO sys.`x$user_summary_by_statement_type` VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

EXAMPLE_ROW = ("app", "SELECT", 10, 500, 50, 5, 100, 200, 0, 1)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for file-based source tests."""
    return str(tmp_path / "scrape.db")


@pytest.fixture
async def sys_source() -> AsyncGenerator[SQLiteDataSource, None]:
    """In-memory data source exposing an empty sys summary view."""
    source = SQLiteDataSource(":memory:", init_script=SYS_VIEW_SCHEMA)
    yield source
    await source.close()


@pytest.fixture
def insert_rows():
    """Factory fixture inserting raw rows into the sys summary view."""

    async def _insert(source: SQLiteDataSource, rows: list[tuple[Any, ...]]) -> None:
        async with source.connection() as conn:
            await conn.executemany(_INSERT_ROW, rows)
            await conn.commit()

    return _insert


# === Fake data source for blocking and failure scenarios ===


class FakeCursor:
    """Cursor over a fixed list of raw rows.

    A row given as an exception instance is raised from fetchone().
    """

    def __init__(self, rows: Sequence[Any], block_after: int | None = None) -> None:
        self._rows = list(rows)
        self._block_after = block_after
        self.fetched = 0
        self.closed = False

    async def fetchone(self) -> Any:
        if self._block_after is not None and self.fetched >= self._block_after:
            await asyncio.Event().wait()
        if self.fetched >= len(self._rows):
            return None
        row = self._rows[self.fetched]
        self.fetched += 1
        if isinstance(row, Exception):
            raise row
        return row

    async def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Connection returning a FakeCursor, failing, or blocking forever."""

    def __init__(
        self,
        cursor: FakeCursor,
        error: Exception | None = None,
        block: bool = False,
    ) -> None:
        self.cursor = cursor
        self._error = error
        self._block = block
        self.queries: list[str] = []

    async def execute(self, sql: str) -> FakeCursor:
        self.queries.append(sql)
        if self._block:
            await asyncio.Event().wait()
        if self._error is not None:
            raise self._error
        return self.cursor


class FakeSource:
    """DataSource handing out one FakeConnection and counting releases."""

    def __init__(self, connection: FakeConnection) -> None:
        self.conn = connection
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[FakeConnection]:
        self.acquired += 1
        try:
            yield self.conn
        finally:
            self.released += 1


@pytest.fixture
def fake_source():
    """Factory fixture building a FakeSource.

    Usage:
        source = fake_source([row, row], error=None, block=False, block_after=None)
    """

    def _make(
        rows: Sequence[Any] = (),
        error: Exception | None = None,
        block: bool = False,
        block_after: int | None = None,
    ) -> FakeSource:
        cursor = FakeCursor(rows, block_after=block_after)
        return FakeSource(FakeConnection(cursor, error=error, block=block))

    return _make
