"""
Schema builder converting model metadata into DDL statements.
"""

from __future__ import annotations

from typing import Any, List

from ..core.errors import UnsupportedOperationError
from ..core.model import Model, ModelField, table_name
from ..dialects.base import Dialect
from ..utils import get_logger


class SchemaBuilder:
    """
    Produces dialect-specific SQL for schema manipulation.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect
        self.logger = get_logger("schema.builder")

    def _table(self, table: Any) -> str:
        return self.dialect.format_table(table_name(table))

    def create_table_sql(self, model: Model, *, if_not_exists: bool = False) -> str:
        column_list = ", ".join(self._render_columns(model))
        prefix = "CREATE TABLE IF NOT EXISTS" if if_not_exists else "CREATE TABLE"
        return f"{prefix} {self._table(model.table)} ({column_list})"

    def create_indexes_sql(self, model: Model, *, if_not_exists: bool = False) -> List[str]:
        return [
            self.create_index_sql(
                model_index.name,
                model.table,
                model_index.unique,
                *model_index.columns,
                if_not_exists=if_not_exists,
            )
            for model_index in model.indexes
        ]

    def drop_table_sql(self, table: Any, *, if_exists: bool = False) -> str:
        name = self._table(table)
        self.logger.warning(
            "DROP TABLE generated for %s; confirm destructive migration before applying.",
            name,
        )
        prefix = "DROP TABLE IF EXISTS" if if_exists else "DROP TABLE"
        return f"{prefix} {name}"

    def rename_table_sql(self, table: Any, new_name: str) -> str:
        return f"ALTER TABLE {self._table(table)} RENAME TO {self.dialect.quote_identifier(new_name)}"

    def add_column_sql(self, table: Any, field: ModelField) -> str:
        return f"ALTER TABLE {self._table(table)} ADD COLUMN {self.dialect.render_column_definition(field)}"

    def rename_column_sql(self, table: Any, column: str, new_name: str) -> str:
        return (
            f"ALTER TABLE {self._table(table)} RENAME COLUMN "
            f"{self.dialect.quote_identifier(column)} TO {self.dialect.quote_identifier(new_name)}"
        )

    def change_column_sql(self, table: Any, field: ModelField) -> str:
        if not self.dialect.capabilities.supports_alter_column:
            raise UnsupportedOperationError(
                f"The {self.dialect.name} dialect cannot change the type of an existing column."
            )
        return (
            f"ALTER TABLE {self._table(table)} ALTER COLUMN "
            f"{self.dialect.quote_identifier(field.name)} TYPE {self.dialect.column_type(field)}"
        )

    def drop_column_sql(self, table: Any, column: str) -> str:
        if not self.dialect.capabilities.supports_drop_column:
            raise UnsupportedOperationError(f"The {self.dialect.name} dialect cannot drop columns.")
        name = self._table(table)
        self.logger.warning(
            "DROP COLUMN generated for %s.%s; confirm destructive migration before applying.",
            name,
            column,
        )
        return f"ALTER TABLE {name} DROP COLUMN {self.dialect.quote_identifier(column)}"

    def create_index_sql(
        self, name: str, table: Any, unique: bool, *columns: str, if_not_exists: bool = False
    ) -> str:
        keyword = "CREATE UNIQUE INDEX" if unique else "CREATE INDEX"
        if if_not_exists:
            keyword += " IF NOT EXISTS"
        column_list = ", ".join(self.dialect.quote_identifier(column) for column in columns)
        return f"{keyword} {self.dialect.quote_identifier(name)} ON {self._table(table)} ({column_list})"

    def drop_index_sql(self, name: str) -> str:
        self.logger.warning("DROP INDEX generated for %s.", name)
        return f"DROP INDEX {self.dialect.quote_identifier(name)}"

    def _render_columns(self, model: Model) -> List[str]:
        return [self.dialect.render_column_definition(field) for field in model.fields]


