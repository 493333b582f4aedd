"""Row streaming over a prepared engine cursor.

    async with await db.stream("SELECT * FROM events ORDER BY id") as rows:
        async for row in rows:
            ...

One row is fetched per pull. The cursor is finalized exactly once, when the
rows run out, a fetch fails, or the caller destroys the stream.
"""

import asyncio
import logging
import sqlite3
from enum import Enum

import aiosqlite

from sqleasy.errors import StreamStateError
from sqleasy.rows import Row

logger = logging.getLogger(__name__)


class StreamState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    ERRORED = "errored"
    DESTROYED = "destroyed"


_TERMINAL = frozenset({StreamState.EXHAUSTED, StreamState.ERRORED, StreamState.DESTROYED})


class RowStream:
    """Lazy, forward-only async iterator of rows from one cursor."""

    def __init__(self, cursor: aiosqlite.Cursor):
        self._cursor: aiosqlite.Cursor | None = cursor
        self._state = StreamState.IDLE
        self._processed = 0

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def processed_rows(self) -> int:
        """Rows delivered to the consumer so far."""
        return self._processed

    @property
    def finalized(self) -> bool:
        return self._cursor is None

    def __aiter__(self) -> "RowStream":
        return self

    async def __anext__(self) -> Row:
        if self._state in _TERMINAL:
            raise StopAsyncIteration
        if self._state is StreamState.FETCHING:
            raise StreamStateError("Row stream already has a fetch in flight")

        self._state = StreamState.FETCHING
        try:
            row = await self._cursor.fetchone()
        except asyncio.CancelledError:
            self._state = StreamState.DESTROYED
            await self._finalize()
            raise
        except Exception as e:
            if self._state is StreamState.DESTROYED:
                raise StopAsyncIteration from e
            self._state = StreamState.ERRORED
            await self._finalize()
            raise

        if self._state is StreamState.DESTROYED:
            raise StopAsyncIteration

        if row is None:
            self._state = StreamState.EXHAUSTED
            await self._finalize()
            raise StopAsyncIteration

        self._processed += 1
        self._state = StreamState.IDLE
        return row

    async def destroy(self) -> None:
        """Stop consumption and release the cursor. No-op once terminal."""
        if self._state in _TERMINAL:
            return
        self._state = StreamState.DESTROYED
        await self._finalize()

    aclose = destroy

    async def __aenter__(self) -> "RowStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.destroy()

    async def _finalize(self) -> None:
        cursor, self._cursor = self._cursor, None
        if cursor is None:
            return
        try:
            await cursor.close()
        except (ValueError, sqlite3.ProgrammingError) as e:
            # Connection already closed; the engine released the statement with it.
            logger.debug(f"Cursor finalize skipped: {e}")
        logger.debug(f"Row stream {self._state.value} after {self._processed} rows")
