"""Parameterized queries and argument normalization.

Every Driver operation accepts SQL in one of two shapes:

    db.one(sql("SELECT * FROM users WHERE id = ?", 1))
    db.one("SELECT * FROM users WHERE id = ?", 1)

normalize() resolves both into a single canonical Sql value.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqleasy.errors import InvalidQueryError

Values = tuple[Any, ...] | dict[str, Any]


@dataclass(frozen=True)
class Sql:
    """SQL text paired with the values for its placeholders.

    Positional (`?`) placeholders take a tuple, named (`:name`) placeholders a dict.
    """

    text: str
    values: Values = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise InvalidQueryError(f"Query text must be str, got {type(self.text).__name__}")
        object.__setattr__(self, "values", _coerce_values(self.values))

    def __add__(self, other: "Sql | str") -> "Sql":
        if isinstance(other, str):
            other = raw(other)
        if not isinstance(other, Sql):
            return NotImplemented
        return Sql(self.text + other.text, _merge_values(self.values, other.values))

    def __radd__(self, other: str) -> "Sql":
        if isinstance(other, str):
            return raw(other) + self
        return NotImplemented

    @property
    def named(self) -> bool:
        return isinstance(self.values, dict)


def sql(text: str, *values: Any) -> Sql:
    """Build a query from text and positional values (or a single mapping of named values)."""
    return normalize(text, *values)


def raw(text: str) -> Sql:
    """Wrap literal SQL text with no values. Never pass untrusted input."""
    return Sql(text)


def join(parts: Iterable[Sql | str], separator: str = ", ") -> Sql:
    """Concatenate fragments with separator, chaining their values in order."""
    result = empty
    for i, part in enumerate(parts):
        if i:
            result = result + separator
        result = result + part
    return result


def normalize(query: Any, *values: Any) -> Sql:
    """Resolve either call shape into a canonical Sql.

    Raises:
        InvalidQueryError: If query is neither a str nor an object with a str `text`,
            or if a query object is followed by extra positional values.
    """
    if isinstance(query, str):
        if len(values) == 1 and isinstance(values[0], Mapping):
            return Sql(query, values[0])
        return Sql(query, values)

    text, query_values = _unpack(query)
    if values:
        raise InvalidQueryError(
            f"Unexpected positional values after a query object: {len(values)} given"
        )
    return Sql(text, query_values)


def _unpack(query: Any) -> tuple[str, Any]:
    if query is None:
        raise InvalidQueryError("Invalid parameters: query is None")

    if isinstance(query, Mapping):
        text = query.get("text")
        query_values = query.get("values")
    else:
        text = getattr(query, "text", None)
        query_values = getattr(query, "values", None)

    if not isinstance(text, str):
        raise InvalidQueryError(
            "Invalid parameters: expected str or query object with str text, "
            f"got {type(query).__name__}"
        )
    return text, query_values


def _coerce_values(values: Any) -> Values:
    if values is None:
        return ()
    if isinstance(values, Mapping):
        return dict(values)
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise InvalidQueryError(
            f"Query values must be a sequence or mapping, got {type(values).__name__}"
        )
    return tuple(values)


def _merge_values(left: Values, right: Values) -> Values:
    if not left:
        return right
    if not right:
        return left
    if isinstance(left, dict) and isinstance(right, dict):
        return {**left, **right}
    if isinstance(left, tuple) and isinstance(right, tuple):
        return left + right
    raise InvalidQueryError("Cannot combine positional and named query values")


empty = Sql("")
