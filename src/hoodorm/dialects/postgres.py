"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from ..core.errors import MissingPrimaryKeyError
from ..core.types import ValueKind
from .base import DEFAULT_VARCHAR_SIZE, BaseDialect, DialectCapabilities

if TYPE_CHECKING:
    from ..core.model import Model
    from ..persistence.session import Session


class PostgresDialect(BaseDialect):
    """
    PostgreSQL dialect using numbered ``$N`` markers and serial primary keys.
    """

    name: Final[str] = "postgres"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_alter_column=True,
        supports_drop_column=True,
    )
    TYPE_NAMES = {
        ValueKind.BOOLEAN: "boolean",
        ValueKind.INTEGER: "integer",
        ValueKind.UNSIGNED: "integer",
        ValueKind.BIG_INTEGER: "bigint",
        ValueKind.BIG_UNSIGNED: "bigint",
        ValueKind.ID: "bigserial",
        ValueKind.FLOAT: "double precision",
        ValueKind.BYTES: "bytea",
        ValueKind.TEXT: "text",
        ValueKind.VARCHAR: "varchar",
        ValueKind.TIMESTAMP: "timestamp",
    }
    SERIAL_TYPES = {
        ValueKind.INTEGER: "serial",
        ValueKind.UNSIGNED: "serial",
        ValueKind.BIG_INTEGER: "bigserial",
        ValueKind.BIG_UNSIGNED: "bigserial",
    }

    def marker(self, position: int) -> str:
        return f"${position + 1}"

    def type_for_kind(self, kind: ValueKind, size: int = 0, auto_increment: bool = False) -> str:
        if auto_increment and kind in self.SERIAL_TYPES:
            return self.SERIAL_TYPES[kind]
        if kind is ValueKind.VARCHAR:
            return f"varchar({size or DEFAULT_VARCHAR_SIZE})"
        return self.TYPE_NAMES[kind]

    def insert(self, session: "Session", model: "Model", sql: str, args: list[Any]) -> tuple[Any, bool]:
        if model.pk is None:
            raise MissingPrimaryKeyError(f"Table '{model.table}' has no primary key to return")
        from ..adapters.base import AdapterExecutionError

        row = session.query_row(f"{sql} RETURNING {self.quote_identifier(model.pk.name)}", *args)
        if row is None:
            raise AdapterExecutionError(f"INSERT into '{model.table}' returned no primary key")
        return row[0], True
