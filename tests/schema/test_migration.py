import textwrap
from dataclasses import dataclass

import pytest

from hoodorm import Id, Migration, MigrationRunner, Session, discover_migrations
from hoodorm.schema import MigrationError, MigrationState


@dataclass
class Author:
    id: Id = Id(0)
    name: str = ""


@dataclass
class Tag:
    id: Id = Id(0)
    label: str = ""


class CreateAuthors(Migration):
    def up(self, session):
        session.create_table(Author)

    def down(self, session):
        session.drop_table(Author)


class CreateTags(Migration):
    def up(self, session):
        session.create_table(Tag)

    def down(self, session):
        session.drop_table(Tag)


class Broken(Migration):
    def up(self, session):
        session.create_table(Tag)
        raise RuntimeError("boom")

    def down(self, session):
        pass


def table_names(session):
    rows = session.exec("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


@pytest.fixture
def session(tmp_path):
    session = Session.open("sqlite3", str(tmp_path / "migrations.db"))
    yield session
    session.close()


def test_migrate_applies_pending_in_stamp_order(session):
    runner = MigrationRunner(session, {20: CreateTags(), 10: CreateAuthors()})
    applied = runner.migrate()
    assert [migration.stamp for migration in applied] == [10, 20]
    assert runner.current() == 20
    assert runner.pending() == []
    assert {"author", "tag", "hoodorm_migrations"} <= table_names(session)

    # already applied units are skipped
    assert runner.migrate() == []


def test_state_is_a_single_row(session):
    MigrationRunner(session, {1: CreateAuthors(), 2: CreateTags()}).migrate()
    rows = session.find(MigrationState)
    assert len(rows) == 1
    assert rows[0].current == 2


def test_rollback_steps_back_one_unit(session):
    runner = MigrationRunner(session, {10: CreateAuthors(), 20: CreateTags()})
    runner.migrate()

    rolled_back = runner.rollback()
    assert rolled_back.stamp == 20
    assert runner.current() == 10
    assert "tag" not in table_names(session)

    runner.rollback()
    assert runner.current() == 0
    assert runner.rollback() is None


def test_failed_migration_rolls_back_its_transaction(session):
    runner = MigrationRunner(session, {1: CreateAuthors(), 2: Broken()})
    with pytest.raises(RuntimeError):
        runner.migrate()
    assert runner.current() == 1
    assert "tag" not in table_names(session)


def test_rollback_of_unknown_stamp_raises(session):
    MigrationRunner(session, {5: CreateAuthors()}).migrate()
    with pytest.raises(MigrationError):
        MigrationRunner(session, {1: CreateTags()}).rollback()


def test_duplicate_stamps_are_rejected(session):
    authors, tags = CreateAuthors(), CreateTags()
    authors.stamp = tags.stamp = 5
    with pytest.raises(MigrationError):
        MigrationRunner(session, [authors, tags])


def test_iterable_of_units_is_ordered_by_stamp(session):
    authors, tags = CreateAuthors(), CreateTags()
    authors.stamp, tags.stamp = 7, 3
    runner = MigrationRunner(session, [authors, tags])
    assert list(runner.migrations) == [3, 7]


def test_migrate_with_unknown_stored_stamp_raises(session):
    MigrationRunner(session, {5: CreateAuthors()}).migrate()
    with pytest.raises(MigrationError):
        MigrationRunner(session, {1: CreateTags(), 9: CreateTags()}).migrate()
    assert "tag" not in table_names(session)


def test_discover_migrations_loads_one_class_per_file(tmp_path):
    (tmp_path / "100_create_notes.py").write_text(
        textwrap.dedent(
            """
            from hoodorm import Migration


            class CreateNotes(Migration):
                def up(self, session):
                    session.exec('CREATE TABLE "note" ("id" integer PRIMARY KEY)')

                def down(self, session):
                    session.exec('DROP TABLE "note"')
            """
        )
    )
    (tmp_path / "helpers.py").write_text("VALUE = 1\n")

    migrations = discover_migrations(tmp_path)
    assert list(migrations) == [100]
    assert migrations[100].name == "create_notes"
    assert type(migrations[100]).__name__ == "CreateNotes"


def test_discover_migrations_rejects_file_without_migration(tmp_path):
    (tmp_path / "1_empty.py").write_text("VALUE = 1\n")
    with pytest.raises(MigrationError):
        discover_migrations(tmp_path)
