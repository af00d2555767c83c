import logging
from dataclasses import dataclass
from typing import Optional

import pytest

from hoodorm import Created, Id, Int64, UniqueIndex, UnsupportedOperationError, VarChar, column, index, model_from
from hoodorm.dialects import PostgresDialect, SQLiteDialect
from hoodorm.schema import SchemaBuilder

postgres = SchemaBuilder(PostgresDialect())
sqlite = SchemaBuilder(SQLiteDialect())


@dataclass
class User:
    id: Id = Id(0)
    name: VarChar = column(VarChar(""), size=64, not_null=True)
    age: int = column(0, db_default="0")
    created: Optional[Created] = None
    name_index: UniqueIndex = index("name")


@dataclass
class Widened:
    age: Int64 = Int64(0)


def test_create_table_sql_postgres():
    assert postgres.create_table_sql(model_from(User)) == (
        'CREATE TABLE "user" ("id" bigserial PRIMARY KEY, "name" varchar(64) NOT NULL, '
        '"age" integer DEFAULT 0, "created" timestamp)'
    )


def test_create_table_sql_sqlite_if_not_exists():
    assert sqlite.create_table_sql(model_from(User), if_not_exists=True) == (
        'CREATE TABLE IF NOT EXISTS "user" ("id" integer PRIMARY KEY AUTOINCREMENT, "name" text NOT NULL, '
        '"age" integer DEFAULT 0, "created" text)'
    )


def test_create_indexes_sql():
    assert postgres.create_indexes_sql(model_from(User)) == ['CREATE UNIQUE INDEX "name_index" ON "user" ("name")']
    assert sqlite.create_indexes_sql(model_from(User), if_not_exists=True) == [
        'CREATE UNIQUE INDEX IF NOT EXISTS "name_index" ON "user" ("name")'
    ]


def test_drop_table_sql_logs_warning(caplog):
    caplog.set_level(logging.WARNING, logger="hoodorm.schema.builder")
    assert postgres.drop_table_sql(User) == 'DROP TABLE "user"'
    assert sqlite.drop_table_sql("user", if_exists=True) == 'DROP TABLE IF EXISTS "user"'
    assert any("DROP TABLE generated" in record.message for record in caplog.records)


def test_rename_statements():
    assert postgres.rename_table_sql("user", "member") == 'ALTER TABLE "user" RENAME TO "member"'
    assert sqlite.rename_column_sql("user", "name", "nick") == 'ALTER TABLE "user" RENAME COLUMN "name" TO "nick"'


def test_add_and_change_column_sql():
    age = model_from(Widened).field("age")
    assert sqlite.add_column_sql("user", age) == 'ALTER TABLE "user" ADD COLUMN "age" integer'
    assert postgres.change_column_sql("user", age) == 'ALTER TABLE "user" ALTER COLUMN "age" TYPE bigint'


def test_sqlite_cannot_change_column_type():
    with pytest.raises(UnsupportedOperationError):
        sqlite.change_column_sql("user", model_from(Widened).field("age"))


def test_destructive_column_and_index_statements_log(caplog):
    caplog.set_level(logging.WARNING, logger="hoodorm.schema.builder")
    assert postgres.drop_column_sql("user", "age") == 'ALTER TABLE "user" DROP COLUMN "age"'
    assert postgres.drop_index_sql("name_index") == 'DROP INDEX "name_index"'
    assert len(caplog.records) == 2


def test_create_index_sql_multiple_columns():
    assert postgres.create_index_sql("user_name_age", "user", False, "name", "age") == (
        'CREATE INDEX "user_name_age" ON "user" ("name", "age")'
    )
