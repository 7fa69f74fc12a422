"""Tests for hammock.data.database: the synchronous SQLite executor."""

import threading

import pytest

from hammock.data import Database, DataError, Field, Model, QueryError
from hammock.data.database import _parse_sqlite_path


class Note(Model):
    table = "notes"
    fields = (Field("body", "string"),)


@pytest.fixture
def db(tmp_path):
    """A fresh file-backed database with a notes table."""
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    database.execute_script("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
    yield database
    database.disconnect()


class TestUrl:
    def test_memory(self) -> None:
        db = Database("sqlite:///:memory:")
        assert db.url == "sqlite:///:memory:"
        assert db.query("SELECT 1 AS one") == [{"one": 1}]

    @pytest.mark.parametrize(
        ("url", "path"),
        [
            ("sqlite:///app.db", "app.db"),
            ("sqlite:///data/app.db", "data/app.db"),
            ("sqlite:////var/data/app.db", "/var/data/app.db"),
            ("sqlite:///:memory:", ":memory:"),
        ],
    )
    def test_path_from_url(self, url: str, path: str) -> None:
        assert _parse_sqlite_path(url) == path

    def test_unsupported_scheme(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            Database("postgresql://localhost/app")


class TestLifecycle:
    def test_lazy_connect(self) -> None:
        db = Database("sqlite:///:memory:")
        assert db.connected is False
        db.query("SELECT 1")
        assert db.connected is True

    def test_disconnect_and_reopen(self, db: Database) -> None:
        db.execute("INSERT INTO notes (body) VALUES (?)", "persisted")
        db.disconnect()
        assert db.connected is False
        assert db.fetch_all("SELECT body FROM notes") == [{"body": "persisted"}]

    def test_context_manager(self, tmp_path) -> None:
        with Database(f"sqlite:///{tmp_path / 'cm.db'}") as db:
            assert db.connected is True
        assert db.connected is False


class TestExecution:
    def test_execute_returns_rowcount(self, db: Database) -> None:
        assert db.execute("INSERT INTO notes (body) VALUES (?)", "a") == 1

    def test_fetch_all_returns_dicts(self, db: Database) -> None:
        db.execute("INSERT INTO notes (body) VALUES (?)", "a")
        db.execute("INSERT INTO notes (body) VALUES (?)", "b")
        rows = db.fetch_all("SELECT id, body FROM notes ORDER BY id")
        assert rows == [{"id": 1, "body": "a"}, {"id": 2, "body": "b"}]

    def test_last_insert_id(self, db: Database) -> None:
        db.execute("INSERT INTO notes (body) VALUES (?)", "a")
        db.execute("INSERT INTO notes (body) VALUES (?)", "b")
        assert db.last_insert_id() == 2

    def test_sql_error_wrapped(self, db: Database) -> None:
        with pytest.raises(QueryError, match="no such table"):
            db.fetch_all("SELECT * FROM missing")

    def test_script_error_wrapped(self, db: Database) -> None:
        with pytest.raises(QueryError):
            db.execute_script("CREATE TABLE notes (id INTEGER PRIMARY KEY);")

    def test_query_skips_coercion(self, db: Database) -> None:
        db.register(Note)
        db.execute("INSERT INTO notes (body) VALUES (?)", "a")
        assert db.query("SELECT id FROM notes") == [{"id": 1}]

    def test_concurrent_writes(self, db: Database) -> None:
        def write(n: int) -> None:
            for i in range(20):
                db.execute("INSERT INTO notes (body) VALUES (?)", f"{n}-{i}")

        threads = [threading.Thread(target=write, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert db.fetch_all("SELECT COUNT(*) AS n FROM notes") == [{"n": 80}]


class TestRegister:
    def test_binds_storage(self, db: Database) -> None:
        db.register(Note)
        assert Note.storage is db
        assert "notes" in db.schemas


class TestEcho:
    def test_echo_prints_to_stderr(self, capsys) -> None:
        db = Database("sqlite:///:memory:", echo=True)
        db.query("SELECT 1")
        err = capsys.readouterr().err
        assert "[hammock.data]" in err
        assert "SELECT 1" in err

    def test_quiet_by_default(self, capsys) -> None:
        db = Database("sqlite:///:memory:")
        db.query("SELECT 1")
        assert capsys.readouterr().err == ""
