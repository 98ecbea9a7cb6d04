"""SQLite data source adapter backed by aiosqlite."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite


class SQLiteDataSource:
    """aiosqlite implementation of DataSource.

    Hands out one connection per query. For :memory: databases a single
    persistent connection is shared, since SQLite in-memory databases are
    connection-scoped; file databases get a fresh connection that is closed
    when the query finishes.

    Args:
        db_path: Database file path or ":memory:".
        init_script: SQL script run once before the first connection is
            handed out (e.g., to create fixture views).
        attach: Schema name to database path, ATTACHed on every new
            connection so that schema-qualified views resolve.
    """

    def __init__(
        self,
        db_path: str,
        init_script: str = "",
        attach: dict[str, str] | None = None,
    ) -> None:
        self._db_path = db_path
        self._init_script = init_script
        self._attach = dict(attach or {})
        self._initialized = False
        self._init_lock: asyncio.Lock | None = None
        self._persistent_conn: aiosqlite.Connection | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the initialization lock (lazy to avoid event loop issues)."""
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    async def _connect(self) -> aiosqlite.Connection:
        """Open a connection with every configured schema attached."""
        db = await aiosqlite.connect(self._db_path)
        try:
            for schema, path in self._attach.items():
                await db.execute("ATTACH DATABASE ? AS ?", (path, schema))
        except BaseException:
            await db.close()
            raise
        return db

    async def _ensure_initialized(self) -> None:
        """Run the init script once."""
        if self._initialized:
            return
        async with self._get_lock():
            if self._initialized:
                return
            if self._db_path == ":memory:":
                self._persistent_conn = await self._connect()
                await self._persistent_conn.executescript(self._init_script)
            else:
                db = await self._connect()
                try:
                    await db.executescript(self._init_script)
                finally:
                    await db.close()
            self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for one query's connection.

        File databases get a fresh connection that is closed on exit; the
        persistent :memory: connection stays open.
        """
        await self._ensure_initialized()
        if self._persistent_conn is not None:
            yield self._persistent_conn
            return
        db = await self._connect()
        try:
            yield db
        finally:
            await db.close()

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        if self._persistent_conn is not None:
            await self._persistent_conn.close()
            self._persistent_conn = None
            self._initialized = False
