"""Synchronous SQLite storage executor.

Runs placeholder-bound statements against a single ``sqlite3``
connection and hands rows back as plain dicts. Owns the schema registry
used to coerce rows for registered models.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite

Thread safety:
    - One connection per ``Database``, opened with
      ``check_same_thread=False`` because the ASGI adapter may call in
      from different worker threads
    - Every statement runs while holding ``threading.Lock``, so the
      connection is never used by two threads at once
"""

from __future__ import annotations

import logging
import sqlite3
import sys
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hammock.data.errors import DataError, QueryError
from hammock.data.schema import SchemaRegistry
from hammock.data.statements import Delete, Insert, Select, Update

if TYPE_CHECKING:
    from hammock.data.model import Model

logger = logging.getLogger("hammock.data")


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Database connection configuration."""

    url: str
    echo: bool = False


class Database:
    """Synchronous storage executor.

    Usage::

        db = Database("sqlite:///app.db")
        db.register(Post)

        db.execute("INSERT INTO posts (title) VALUES (?)", "Hello")
        post_id = db.last_insert_id()

        rows = db.select("posts").condition("id", post_id).execute_and_fetch_all()

        # Raw escape hatch: no placeholders, no coercion
        db.query("SELECT name FROM sqlite_master")
    """

    __slots__ = ("_config", "_conn", "_lock", "_path", "schemas")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self._config = DatabaseConfig(url=url, echo=echo)
        self._path = _parse_sqlite_path(url)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        self.schemas = SchemaRegistry()

    @property
    def url(self) -> str:
        return self._config.url

    # -- Models --

    def register(self, *models: type[Model]) -> None:
        """Bind *models* to this database and register their schemas."""
        for model_cls in models:
            self.schemas.register(model_cls)
            model_cls.storage = self
            logger.debug("Registered model %s on table %r", model_cls.__name__, model_cls.table)

    # -- Statement builders --

    def insert(self, table: str) -> Insert:
        return Insert(table, self)

    def update(self, table: str) -> Update:
        return Update(table, self)

    def delete(self, table: str) -> Delete:
        return Delete(table, self)

    def select(self, table: str) -> Select:
        return Select(table, self)

    # -- Echo / query logging --

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        """Log a query to stderr when echo is enabled."""
        logger.debug("%s params=%r", sql, params)
        if not self._config.echo:
            return
        ms = elapsed * 1000
        param_str = f"  params={tuple(params)!r}" if params else ""
        print(f"[hammock.data] {ms:6.1f}ms  {sql}{param_str}", file=sys.stderr)

    # -- Execution --

    def _run(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        conn = self._connection()
        t0 = time.perf_counter()
        try:
            return conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise QueryError(str(exc)) from exc
        finally:
            self._log_query(sql, params, time.perf_counter() - t0)

    def execute(self, sql: str, /, *params: Any) -> int:
        """Execute a statement (INSERT/UPDATE/DELETE) and return rows affected."""
        with self._lock:
            return self._run(sql, params).rowcount

    def fetch_all(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """Execute a query and return every row as a dict."""
        with self._lock:
            cursor = self._run(sql, params)
            return [dict(row) for row in cursor.fetchall()]

    def query(self, sql: str, /) -> list[dict[str, Any]]:
        """Run raw SQL with no bound values and no coercion.

        The caller is responsible for keeping untrusted input out of
        *sql*.
        """
        return self.fetch_all(sql)

    def execute_script(self, sql: str, /) -> None:
        """Execute multiple SQL statements at once.

        Useful for schema setup::

            db.execute_script('''
                CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT);
                CREATE INDEX idx_posts_title ON posts(title);
            ''')
        """
        with self._lock:
            conn = self._connection()
            t0 = time.perf_counter()
            try:
                conn.executescript(sql)
            except sqlite3.Error as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, (), time.perf_counter() - t0)

    def last_insert_id(self) -> int:
        """Row id generated by the most recent INSERT on this connection."""
        with self._lock:
            return int(self._connection().execute("SELECT last_insert_rowid()").fetchone()[0])

    # -- Lifecycle --

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = _open(self._path)
        return self._conn

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the connection.

        Called automatically on first query. Call explicitly if you want
        to fail fast at startup.
        """
        with self._lock:
            self._connection()

    def disconnect(self) -> None:
        """Close the connection. The next query reopens it."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *_: Any) -> None:
        self.disconnect()


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db   ->  path/to/db (relative)
    # sqlite:////path/to/db  ->  /path/to/db
    # sqlite:///:memory:    ->  :memory:
    prefix = "sqlite:///"
    if url.startswith(prefix):
        return url[len(prefix) :]
    prefix_short = "sqlite://"
    if url.startswith(prefix_short):
        return url[len(prefix_short) :]
    msg = f"Unsupported database URL scheme: {url!r}. Supported: sqlite:///path"
    raise DataError(msg)


def _open(path: str) -> sqlite3.Connection:
    """Open a sqlite3 connection in autocommit mode with dict-able rows."""
    conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    return conn
