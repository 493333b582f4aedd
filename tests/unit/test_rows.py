import sqlite3
from dataclasses import dataclass

from sqleasy.rows import dict_row, from_row


@dataclass
class Person:
    id: int
    name: str


def test_dict_row_keys_by_column():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = dict_row
    try:
        row = conn.execute("SELECT 1 AS id, 'Alice' AS name").fetchone()
    finally:
        conn.close()

    assert row == {"id": 1, "name": "Alice"}
    assert list(row) == ["id", "name"]


def test_from_row_ignores_extra_columns():
    person = from_row({"id": 1, "name": "Alice", "extra": True}, Person)

    assert person == Person(id=1, name="Alice")


def test_from_row_accepts_sqlite_row():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    try:
        row = conn.execute("SELECT 2 AS id, 'Bob' AS name").fetchone()
    finally:
        conn.close()

    assert from_row(row, Person) == Person(id=2, name="Bob")
