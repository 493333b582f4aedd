"""Minimal async wrapper for SQLite: awaitable queries, parameterized SQL, row streaming."""

from sqleasy.connection import close_all, initialize
from sqleasy.driver import Driver
from sqleasy.errors import (
    ConfigError,
    InvalidQueryError,
    SqleasyError,
    StreamStateError,
    UsageError,
)
from sqleasy.query import Sql, empty, join, normalize, raw, sql
from sqleasy.rows import Row, from_row
from sqleasy.stream import RowStream, StreamState

__all__ = [
    "initialize",
    "close_all",
    "Driver",
    "RowStream",
    "StreamState",
    "Sql",
    "sql",
    "raw",
    "join",
    "empty",
    "normalize",
    "Row",
    "from_row",
    "SqleasyError",
    "UsageError",
    "InvalidQueryError",
    "StreamStateError",
    "ConfigError",
]
