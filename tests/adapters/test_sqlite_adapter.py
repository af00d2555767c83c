import logging
import sqlite3

import pytest

from hoodorm.adapters import (
    AdapterConnectionError,
    AdapterExecutionError,
    ConnectionConfig,
    SQLiteAdapter,
)


@pytest.fixture
def adapter(tmp_path):
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'test.db'}"))
    yield adapter
    adapter.close()


def test_connect_accepts_plain_file_path(tmp_path):
    adapter = SQLiteAdapter()
    connection = adapter.connect(ConnectionConfig(url=str(tmp_path / "plain.db")))
    assert isinstance(connection, sqlite3.Connection)
    assert (tmp_path / "plain.db").exists()
    adapter.close()


def test_execute_and_last_insert_id(adapter):
    adapter.execute("CREATE TABLE example (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    cursor = adapter.execute("INSERT INTO example (name) VALUES (?)", ("Alice",))
    inserted_id = adapter.last_insert_id(cursor, "example", "id")
    assert inserted_id == 1
    rows = adapter.execute("SELECT name FROM example WHERE id = ?", (inserted_id,)).fetchall()
    assert rows == [("Alice",)]


def test_transaction_commit_and_rollback(adapter):
    adapter.execute("CREATE TABLE item (id INTEGER PRIMARY KEY, value INTEGER)")

    adapter.begin()
    adapter.execute("INSERT INTO item (value) VALUES (?)", (10,))
    adapter.commit()
    assert adapter.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 1

    adapter.begin()
    adapter.execute("INSERT INTO item (value) VALUES (?)", (20,))
    adapter.rollback()
    assert adapter.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 1


def test_invalid_sql_is_wrapped(adapter):
    with pytest.raises(AdapterExecutionError) as excinfo:
        adapter.execute("SELEKT 1")
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)


def test_execute_requires_connection():
    with pytest.raises(AdapterConnectionError):
        SQLiteAdapter().execute("SELECT 1")


def test_in_memory_database():
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig(url="sqlite:///:memory:"))
    adapter.execute("CREATE TABLE sample (value TEXT)")
    adapter.execute("INSERT INTO sample (value) VALUES (?)", ("hello",))
    assert adapter.execute("SELECT value FROM sample").fetchone()[0] == "hello"
    adapter.close()


def test_slow_statements_are_logged_with_redacted_params(adapter, caplog):
    caplog.set_level(logging.DEBUG, logger="hoodorm.adapters.sqlite")
    slow = SQLiteAdapter(slow_query_ms=0)
    slow._state = adapter._state
    slow.execute("SELECT ?", ("password=hunter2",))
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert warnings
    assert warnings[-1].params == ["***"]
    assert "hunter2" not in warnings[-1].getMessage()


def test_slow_query_threshold_from_environment(monkeypatch):
    monkeypatch.setenv("HOODORM_SLOW_QUERY_MS", "250")
    assert SQLiteAdapter().slow_query_ms == 250
    assert SQLiteAdapter(slow_query_ms=5).slow_query_ms == 5


def test_begin_joins_implicit_transaction_without_autocommit(tmp_path):
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig.from_dsn(f"sqlite:///{tmp_path / 'manual.db'}?autocommit=false"))
    assert (tmp_path / "manual.db").exists()
    adapter.execute("CREATE TABLE item (id INTEGER PRIMARY KEY, value INTEGER)")
    adapter.execute("INSERT INTO item (value) VALUES (?)", (1,))
    adapter.begin()
    adapter.execute("INSERT INTO item (value) VALUES (?)", (2,))
    adapter.rollback()
    assert adapter.execute("SELECT COUNT(*) FROM item").fetchone()[0] == 0
    adapter.close()
