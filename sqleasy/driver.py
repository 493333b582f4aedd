"""Awaitable query methods over a shared SQLite connection."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiosqlite

from sqleasy.errors import UsageError
from sqleasy.query import Sql, normalize
from sqleasy.rows import Row, from_row
from sqleasy.stream import RowStream

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Driver:
    """Async methods for one SQLite connection.

    Every query method takes either a query object (see sqleasy.query.Sql) or
    SQL text followed by its positional values:

        await db.run(sql("INSERT INTO users (name) VALUES (?)", "Alice"))
        await db.run("INSERT INTO users (name) VALUES (?)", "Alice")

    Engine errors propagate unchanged. Use as `async with connect() as db:`
    to close the connection on every exit path.
    """

    def __init__(
        self,
        conn: aiosqlite.Connection,
        on_close: Callable[[aiosqlite.Connection], None] | None = None,
    ):
        self._conn = conn
        self._on_close = on_close

    async def __aenter__(self) -> "Driver":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def run(self, sql: Sql | str, *values: Any) -> int:
        """Execute a statement and return the last inserted row id."""
        query = normalize(sql, *values)
        async with self._conn.execute(query.text, query.values) as cursor:
            return cursor.lastrowid

    def exec(self, sql: Sql | str, *args: Any) -> Awaitable[None]:
        """Execute one or more statements, returning nothing.

        Raises:
            UsageError: Immediately, if positional arguments follow the SQL.
        """
        if args:
            raise UsageError(
                f"exec() takes only the SQL statement, got {len(args)} extra argument(s); "
                "use run() for parameterized statements"
            )
        return self._exec(normalize(sql))

    async def _exec(self, query: Sql) -> None:
        if query.values:
            async with self._conn.execute(query.text, query.values):
                pass
        else:
            async with self._conn.executescript(query.text):
                pass

    async def one(
        self, sql: Sql | str, *values: Any, into: type[T] | None = None
    ) -> Row | T | None:
        """Fetch a single row, or None when nothing matches."""
        query = normalize(sql, *values)
        async with self._conn.execute(query.text, query.values) as cursor:
            row = await cursor.fetchone()
        if row is None or into is None:
            return row
        return from_row(row, into)

    async def many(
        self, sql: Sql | str, *values: Any, into: type[T] | None = None
    ) -> list[Row] | list[T]:
        """Fetch all rows; empty list when nothing matches."""
        query = normalize(sql, *values)
        rows = list(await self._conn.execute_fetchall(query.text, query.values) or [])
        if into is None:
            return rows
        return [from_row(row, into) for row in rows]

    get = one
    all = many

    async def stream(self, sql: Sql | str, *values: Any) -> RowStream:
        """Prepare a query and return a RowStream over its rows.

        Preparation errors raise here, before any row is pulled.
        """
        query = normalize(sql, *values)
        cursor = await self._conn.execute(query.text, query.values)
        return RowStream(cursor)

    async def close(self) -> None:
        """Close the underlying connection, shared with every Driver from the same initialize()."""
        try:
            await self._conn.close()
        finally:
            if self._on_close:
                self._on_close(self._conn)
        logger.info("Closed database connection")
