"""Row shaping between the engine and callers."""

import sqlite3
from dataclasses import fields
from typing import Any, TypeVar

T = TypeVar("T")

Row = dict[str, Any]


def dict_row(cursor: sqlite3.Cursor, row: tuple) -> Row:
    """sqlite3 row factory producing plain dicts keyed by column name."""
    return {col[0]: value for col, value in zip(cursor.description, row, strict=True)}


def from_row(row: dict[str, Any] | Any, dataclass_type: type[T]) -> T:
    """Convert dict-like row to dataclass instance.

    Matches row keys to dataclass field names; extra columns are ignored.
    Works with dict, sqlite3.Row, or any dict-like object.
    """
    field_names = {f.name for f in fields(dataclass_type)}
    row_dict = dict(row) if not isinstance(row, dict) else row
    kwargs = {key: row_dict[key] for key in field_names if key in row_dict}
    return dataclass_type(**kwargs)
