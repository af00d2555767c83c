from dataclasses import dataclass

import pytest

from hoodorm import Id, Session
from hoodorm.adapters import ConnectionConfig, SQLiteAdapter
from hoodorm.dialects import SQLiteDialect
from hoodorm.persistence import TransactionError, TransactionManager


@dataclass
class Entry:
    id: Id = Id(0)
    title: str = ""


@pytest.fixture
def session(tmp_path):
    session = Session.open("sqlite3", str(tmp_path / "tx.db"))
    session.create_table(Entry)
    yield session
    session.close()


def titles(session):
    return [entry.title for entry in session.order_by("id").find(Entry)]


def test_commit_persists_changes(session):
    tx = session.begin()
    assert tx.is_transactional and not session.is_transactional
    tx.save(Entry(title="kept"))
    tx.commit()
    assert titles(session) == ["kept"]


def test_rollback_discards_changes(session):
    tx = session.begin()
    tx.save(Entry(title="discarded"))
    tx.rollback()
    assert titles(session) == []


def test_commit_and_rollback_outside_transaction_are_noops(session):
    session.commit()
    session.rollback()
    tx = session.begin()
    tx.commit()
    tx.commit()


def test_transaction_context_rolls_back_on_error(session):
    with pytest.raises(RuntimeError):
        with session.transaction() as tx:
            tx.save(Entry(title="lost"))
            raise RuntimeError("boom")
    assert titles(session) == []


def test_nested_transaction_uses_savepoint(session):
    with session.transaction() as outer:
        outer.save(Entry(title="outer"))
        with pytest.raises(RuntimeError):
            with outer.transaction() as inner:
                inner.save(Entry(title="inner"))
                raise RuntimeError("inner failure")
        with outer.transaction() as inner:
            inner.save(Entry(title="second"))
    assert titles(session) == ["outer", "second"]


def test_derived_session_has_independent_builder_state(session):
    session.where("title = ?", "x")
    tx = session.begin()
    tx.reset()
    assert session.state.where_args == ["x"]
    tx.rollback()
    session.reset()


def test_manager_requires_lifo_order(tmp_path):
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig(url=str(tmp_path / "manager.db")))
    manager = TransactionManager(adapter, SQLiteDialect())

    outer = manager.begin()
    inner = manager.begin()
    assert manager.depth == 2
    with pytest.raises(TransactionError):
        manager.commit(outer)
    manager.rollback(inner)
    manager.commit(outer)
    assert manager.depth == 0

    with pytest.raises(TransactionError):
        manager.commit(outer)
    adapter.close()


def test_transaction_after_implicit_write_without_autocommit(tmp_path):
    path = tmp_path / "manual.db"
    session = Session.open("sqlite3", f"sqlite:///{path}?autocommit=false")
    try:
        session.create_table(Entry)
        session.save(Entry(title="first"))
        with session.transaction() as tx:
            tx.save(Entry(title="second"))
        assert titles(session) == ["first", "second"]
    finally:
        session.close()
    assert path.exists()

    reopened = Session.open("sqlite3", str(path))
    try:
        assert titles(reopened) == ["first", "second"]
    finally:
        reopened.close()
