"""Connection management: open, apply schema, cache per database file."""

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

import aiosqlite

from sqleasy import config
from sqleasy.driver import Driver
from sqleasy.rows import dict_row

logger = logging.getLogger(__name__)

_connections: dict[str, aiosqlite.Connection] = {}
_locks: dict[str, asyncio.Lock] = {}


def _cache_key(file_name: str) -> str | None:
    """Cache key for a database file, None for private databases."""
    if file_name in ("", config.MEMORY) or file_name.startswith("file::memory:"):
        return None
    if file_name.startswith("file:"):
        return file_name
    return str(Path(file_name).expanduser().resolve())


async def connect(file_name: str) -> aiosqlite.Connection:
    """Open connection to SQLite database in autocommit mode with dict rows."""
    start = time.perf_counter()

    conn = await aiosqlite.connect(
        file_name, isolation_level=None, uri=file_name.startswith("file:")
    )
    conn.row_factory = dict_row
    try:
        for name, value in config.pragmas().items():
            async with conn.execute(f"PRAGMA {name} = {value}"):
                pass
    except Exception:
        await conn.close()
        raise

    elapsed = time.perf_counter() - start
    if elapsed > 0.1:
        logger.warning(f"SQLite connection took {elapsed:.3f}s (possible lock contention)")

    return conn


async def _apply_schema(conn: aiosqlite.Connection, file_name: str, schema: str) -> None:
    try:
        async with conn.executescript(schema):
            pass
    except Exception as e:
        logger.error(f"Schema for '{file_name}' failed: {e}")
        raise


async def _open(file_name: str, schema: str | None) -> aiosqlite.Connection:
    """Open a fresh connection and apply schema; closed again if the schema fails."""
    conn = await connect(file_name)
    logger.info(f"Opened database {file_name}")
    if schema:
        try:
            await _apply_schema(conn, file_name, schema)
        except Exception:
            await conn.close()
            raise
    return conn


async def initialize(
    file_name: str | None = None,
    schema: str | None = None,
) -> Callable[[], Driver]:
    """Open (or reuse) the database at file_name and optionally apply a schema script.

    Concurrent calls for the same file share one connection.

    Args:
        file_name: Path to the database file, ":memory:", or None for the configured default
        schema: SQL script run once before returning

    Returns:
        connect function producing Driver instances that share the connection
    """
    if file_name is None:
        file_name = config.default_database()

    key = _cache_key(file_name)
    if key is None:
        conn = await _open(file_name, schema)
    else:
        async with _locks.setdefault(key, asyncio.Lock()):
            conn = _connections.get(key)
            if conn is None:
                if not file_name.startswith("file:"):
                    Path(key).parent.mkdir(parents=True, exist_ok=True)
                conn = await _open(file_name, schema)
                _connections[key] = conn
            else:
                logger.debug(f"Reusing cached connection for {file_name}")
                if schema:
                    await _apply_schema(conn, file_name, schema)

    def connect_driver() -> Driver:
        """Return a new Driver bound to the initialized database."""
        return Driver(conn, on_close=forget)

    return connect_driver


def forget(conn: aiosqlite.Connection) -> None:
    """Drop a closed connection from the cache."""
    for key, cached in list(_connections.items()):
        if cached is conn:
            del _connections[key]


def cached_connections() -> dict[str, aiosqlite.Connection]:
    return dict(_connections)


async def close_all() -> None:
    """Close all cached connections.

    Every connection is attempted; the first failure is re-raised afterwards.
    """
    first_error: Exception | None = None
    for key, conn in list(_connections.items()):
        _connections.pop(key, None)
        try:
            await conn.close()
            logger.info(f"Closed cached connection {key}")
        except Exception as e:
            logger.error(f"Failed to close connection {key}: {e}")
            if first_error is None:
                first_error = e
    if first_error is not None:
        raise first_error


def _reset_for_testing() -> None:
    _connections.clear()
    _locks.clear()
    config.clear_cache()
