"""Immutable statement builders for hammock.data.

Each builder accumulates a table, column values, equality conditions
and (for SELECT) a row window, compiles to a SQL string plus a params
tuple, and runs through the ``Database`` it was created from.

Every method returns a new frozen builder. The original is never
mutated::

    rows = (
        db.select("posts")
        .condition("published", True)
        .range(20, 10)
        .execute_and_fetch_all()
    )

    db.update("posts").fields({"title": "New"}).condition("id", 7).execute()

Conditions are ``column = ?`` predicates joined with ``AND``. There is no
OR, no inequality, no nesting.

Transparency: ``.sql`` and ``.params`` show exactly what will run.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from hammock.data.errors import QueryError
from hammock.data.schema import coerce_attributes

if TYPE_CHECKING:
    from hammock.data.database import Database

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def check_identifier(name: str) -> str:
    """Return *name* if it is a plain SQL identifier, else raise ``QueryError``.

    Values are always bound as placeholders, but table and column names
    are spliced into the statement text and must be checked.
    """
    if not isinstance(name, str) or not _IDENTIFIER.fullmatch(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise QueryError(msg)
    return name


def _where(conditions: tuple[tuple[str, Any], ...]) -> str:
    if not conditions:
        return ""
    return " WHERE " + " AND ".join(f"{column} = ?" for column, _ in conditions)


@dataclass(frozen=True, slots=True)
class _Statement:
    """Shared table + condition state."""

    _table: str
    _db: Database
    _conditions: tuple[tuple[str, Any], ...] = ()

    def __post_init__(self) -> None:
        check_identifier(self._table)

    @property
    def table(self) -> str:
        return self._table

    def condition(self, key: str, value: Any) -> Any:
        """Add a ``key = value`` predicate. Multiple calls are ANDed."""
        check_identifier(key)
        return replace(self, _conditions=(*self._conditions, (key, value)))

    @property
    def sql(self) -> str:
        raise NotImplementedError

    @property
    def params(self) -> tuple[Any, ...]:
        return tuple(value for _, value in self._conditions)

    def execute(self) -> int:
        """Run the statement and return the number of rows affected."""
        return self._db.execute(self.sql, *self.params)


@dataclass(frozen=True, slots=True)
class _FieldStatement(_Statement):
    """A statement that also carries column values."""

    _fields: tuple[tuple[str, Any], ...] = ()

    def fields(self, values: Mapping[str, Any]) -> Any:
        """Set column values. Replaces any previously set fields."""
        for column in values:
            check_identifier(column)
        return replace(self, _fields=tuple(values.items()))


@dataclass(frozen=True, slots=True)
class Insert(_FieldStatement):
    """INSERT builder. Conditions are ignored."""

    @property
    def sql(self) -> str:
        if not self._fields:
            return f"INSERT INTO {self._table} DEFAULT VALUES"
        columns = ", ".join(column for column, _ in self._fields)
        placeholders = ", ".join("?" for _ in self._fields)
        return f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})"

    @property
    def params(self) -> tuple[Any, ...]:
        return tuple(value for _, value in self._fields)


@dataclass(frozen=True, slots=True)
class Update(_FieldStatement):
    """UPDATE builder. Without conditions it updates every row."""

    @property
    def sql(self) -> str:
        if not self._fields:
            msg = f"UPDATE on {self._table!r} has no fields to set"
            raise QueryError(msg)
        assignments = ", ".join(f"{column} = ?" for column, _ in self._fields)
        return f"UPDATE {self._table} SET {assignments}{_where(self._conditions)}"

    @property
    def params(self) -> tuple[Any, ...]:
        values = [value for _, value in self._fields]
        values.extend(value for _, value in self._conditions)
        return tuple(values)


@dataclass(frozen=True, slots=True)
class Delete(_Statement):
    """DELETE builder. Without conditions it deletes every row."""

    @property
    def sql(self) -> str:
        return f"DELETE FROM {self._table}{_where(self._conditions)}"


@dataclass(frozen=True, slots=True)
class Select(_Statement):
    """SELECT builder with an optional ``[start, start + count)`` window."""

    _start: int | None = None
    _count: int | None = None

    def range(self, start: int, count: int) -> Select:
        """Limit the result to *count* rows starting at row *start*."""
        if start < 0 or count < 0:
            msg = f"Invalid range: start={start}, count={count}"
            raise QueryError(msg)
        return replace(self, _start=start, _count=count)

    @property
    def sql(self) -> str:
        sql = f"SELECT * FROM {self._table}{_where(self._conditions)}"
        if self._count is not None:
            sql += f" LIMIT {self._count} OFFSET {self._start or 0}"
        return sql

    def execute(self) -> int:
        """Run the query and return the number of rows it produced."""
        return len(self._db.fetch_all(self.sql, *self.params))

    def execute_and_fetch_all(self) -> list[dict[str, Any]]:
        """Run the query and return every row, coerced per the table's schema.

        Rows of tables with no registered schema come back as the driver
        returned them.
        """
        rows = self._db.fetch_all(self.sql, *self.params)
        schema = self._db.schemas.get(self._table)
        if schema is None:
            return rows
        return [coerce_attributes(row, schema) for row in rows]

    def count(self) -> int:
        """Count matching rows. Ignores ``range()``."""
        sql = f"SELECT COUNT(*) AS total FROM {self._table}{_where(self._conditions)}"
        rows = self._db.fetch_all(sql, *self.params)
        return int(rows[0]["total"]) if rows else 0
